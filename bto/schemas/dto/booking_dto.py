from datetime import datetime
from decimal import Decimal
from typing import Optional

from bto.models.document import Application
from bto.models.project import Project
from bto.schemas.dto.base_dto import BaseDTO


class BookingReceiptDTO(BaseDTO):
    application_id: str
    applicant_name: str
    applicant_nric: str
    applicant_age: int
    applicant_marital_status: str
    project_name: str
    neighbourhood: str
    booked_flat_type: str
    unit_price: Optional[Decimal]
    booked_on: datetime

    @classmethod
    def from_orm_model(cls, application: Application, project: Project) -> "BookingReceiptDTO":
        applicant = application.submitter
        return cls(
            application_id=application.id,
            applicant_name=applicant.name,
            applicant_nric=applicant.nric,
            applicant_age=applicant.age,
            applicant_marital_status=applicant.marital_status.value,
            project_name=project.name,
            neighbourhood=project.neighbourhood,
            booked_flat_type=application.booked_flat_type.value,
            unit_price=project.unit_price(application.booked_flat_type),
            booked_on=application.last_modified_date,
        )


class BookingReportRow(BaseDTO):
    project_name: str
    applicant_nric: str
    applicant_name: str
    age: int
    marital_status: str
    booked_flat_type: str

    @classmethod
    def from_orm_model(cls, application: Application) -> "BookingReportRow":
        applicant = application.submitter
        return cls(
            project_name=application.project_name,
            applicant_nric=applicant.nric,
            applicant_name=applicant.name,
            age=applicant.age,
            marital_status=applicant.marital_status.value,
            booked_flat_type=(
                application.booked_flat_type.value if application.booked_flat_type else "N/A"
            ),
        )
