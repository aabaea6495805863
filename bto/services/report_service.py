# bto/services/report_service.py
from typing import List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from bto.db.enums import Capability, FlatType, MaritalStatus
from bto.logger import get_logger
from bto.models.user import User
from bto.repositories.document_repositories import ApplicationRepository
from bto.schemas.dto.booking_dto import BookingReportRow
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.results import fail

logger = get_logger(__name__)

REPORT_COLUMNS = [
    "project_name",
    "applicant_nric",
    "applicant_name",
    "age",
    "marital_status",
    "booked_flat_type",
]


class ReportService:
    def __init__(self, db: Session):
        self.db = db
        self.application_repository = ApplicationRepository(db)

    def generate_booking_report(
        self,
        manager: User,
        project_name: Optional[str] = None,
        marital_status: Optional[MaritalStatus] = None,
        flat_type: Optional[FlatType] = None,
    ) -> OperationResult:
        '''
        Booked applications, filtered, sorted by project then applicant name.
        :param manager: requesting manager
        :type manager: User
        :param project_name: only this project
        :type project_name: Optional[str]
        :param marital_status: only applicants with this marital status
        :type marital_status: Optional[MaritalStatus]
        :param flat_type: only bookings of this flat type
        :type flat_type: Optional[FlatType]
        :return: rows under data["rows"]
        :rtype: OperationResult
        '''
        if manager is None or not manager.can(Capability.VIEW_REPORT):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only managers may generate booking reports")

        logger.info(
            f"booking report by {manager.nric} "
            f"(project={project_name or 'ALL'}, marital={marital_status.value if marital_status else 'ALL'}, "
            f"flat={flat_type.value if flat_type else 'ALL'})"
        )

        applications = self.application_repository.find_booked()
        if project_name and project_name.strip():
            applications = [a for a in applications if a.project_name == project_name.strip()]
        if marital_status is not None:
            applications = [a for a in applications if a.submitter.marital_status == marital_status]
        if flat_type is not None:
            applications = [a for a in applications if a.booked_flat_type == flat_type]

        applications.sort(key=lambda a: (a.project_name, a.submitter.name))
        rows = [BookingReportRow.from_orm_model(a) for a in applications]
        return OperationResult.success(
            rows,
            data={"rows": [row.model_dump(mode="json") for row in rows]},
            side_effect=False,
        )


def to_dataframe(rows: List[BookingReportRow]) -> pd.DataFrame:
    '''Booking report rows as a DataFrame, one column per report field.'''
    if not rows:
        return pd.DataFrame(columns=REPORT_COLUMNS)
    return pd.DataFrame([row.model_dump() for row in rows], columns=REPORT_COLUMNS)
