# bto/services/booking_service.py
from sqlalchemy.orm import Session

from bto.db.enums import Capability, DocumentStatus, FlatType
from bto.logger import get_logger
from bto.models.user import User
from bto.repositories.document_repositories import ApplicationRepository
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.applicant_profile import applicant_profile_of
from bto.schemas.dto.booking_dto import BookingReceiptDTO
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.eligibility_service import check_eligibility
from bto.services.results import checked, fail
from bto.services.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class BookingService:
    """
    Turns an APPROVED application into a booked flat.

    The inventory decrement and the application transition are staged in
    one unit of work: either both are persisted or both are undone.
    """

    def __init__(self, db: Session):
        self.db = db
        self.application_repository = ApplicationRepository(db)
        self.project_repository = ProjectRepository(db)

    def process_flat_booking(self, officer: User, application_id: str, flat_type: FlatType) -> OperationResult:
        '''
        Book one unit of flat_type for an approved application.

        Preconditions, checked in order:
            1. application is APPROVED
            2. applicant has no other BOOKED application
            3. officer is assigned to the application's project
            4. applicant is eligible for flat_type
            5. a unit of flat_type is left

        :param officer: booking officer
        :type officer: User
        :param application_id: APP- id
        :type application_id: str
        :param flat_type: chosen flat type
        :type flat_type: FlatType
        :return: the booked application as entity
        :rtype: OperationResult
        '''
        if officer is None or not officer.can(Capability.BOOK_FLAT):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only officers may book flats")
        if flat_type is None:
            return fail(logger, ErrorType.VALIDATION_ERROR, "a flat type must be chosen")

        application = self.application_repository.find_by_id(application_id)
        if application is None:
            return fail(logger, ErrorType.NOT_FOUND, f"application '{application_id}' not found")
        applicant = application.submitter

        # 1. status
        if application.status != DocumentStatus.APPROVED:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"application {application.id} is not in the correct state ({application.status.value}) for booking",
            )

        # 2. at most one booking per applicant
        existing = self.application_repository.find_booked_application_by_applicant_nric(applicant.nric)
        if existing is not None and existing.id != application.id:
            return fail(
                logger,
                ErrorType.RESOURCE_EXHAUSTED,
                f"applicant {applicant.nric} already has a booked flat (application {existing.id})",
            )

        # 3. officer handles the project
        project = self.project_repository.find_by_name(application.project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{application.project_name}' not found")
        if not project.is_officer_assigned(officer.nric):
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"officer {officer.nric} is not assigned to handle project '{project.name}'",
            )

        # 4. eligibility for the chosen type
        profile = applicant_profile_of(applicant)
        if not check_eligibility(profile.age, profile.marital_status, flat_type):
            return fail(
                logger,
                ErrorType.VALIDATION_ERROR,
                f"applicant {applicant.nric} is not eligible for flat type {flat_type.value}",
            )

        uow = UnitOfWork(self.db, f"booking {application.id}")
        uow.track(application)

        # 5. take the unit
        if not project.decrement_remaining_unit(flat_type):
            return fail(
                logger,
                ErrorType.RESOURCE_EXHAUSTED,
                f"no remaining units of type {flat_type.value} in project '{project.name}'",
            )
        uow.record(
            f"release {flat_type.value} in {project.name}",
            lambda: project.increment_remaining_unit(flat_type),
        )

        result = checked(logger, application.mark_booked(officer, flat_type))
        if not result.ok:
            uow.rollback("application refused the booking")
            return result

        error = uow.commit()
        if error:
            return error

        logger.info(
            f"application {application.id} booked {flat_type.value} in '{project.name}' by officer {officer.nric}"
        )
        return OperationResult.success(application)

    def generate_booking_receipt(self, officer: User, application_id: str) -> OperationResult:
        """Read-only receipt of a BOOKED application, for an officer of its project."""
        application = self.application_repository.find_by_id(application_id)
        if application is None or application.status != DocumentStatus.BOOKED:
            return fail(
                logger,
                ErrorType.STATE_ERROR if application else ErrorType.NOT_FOUND,
                f"application '{application_id}' not found or not in BOOKED state",
            )
        project = self.project_repository.find_by_name(application.project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project data missing for application {application.id}")
        if officer is None or not project.is_officer_assigned(officer.nric):
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"officer {getattr(officer, 'nric', None)} is not assigned to project '{project.name}'",
            )

        receipt = BookingReceiptDTO.from_orm_model(application, project)
        return OperationResult.success(
            application,
            data=receipt.model_dump(mode="json"),
            side_effect=False,
        )
