# bto/services/withdrawal_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from bto.db.enums import DocumentStatus
from bto.logger import get_logger
from bto.models.document import Withdrawal
from bto.models.user import User
from bto.repositories.document_repositories import ApplicationRepository, WithdrawalRepository
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.results import checked, fail
from bto.services.unit_of_work import UnitOfWork

logger = get_logger(__name__)

# an application in one of these can no longer be withdrawn
FINAL_APPLICATION_STATUSES = (
    DocumentStatus.WITHDRAWN,
    DocumentStatus.REJECTED,
    DocumentStatus.CLOSED,
)


class WithdrawalService:
    """
    Withdrawal requests and their approval.

    Approving the withdrawal of a BOOKED application puts the booked unit
    back into the project's inventory in the same unit of work.
    """

    def __init__(self, db: Session):
        self.db = db
        self.withdrawal_repository = WithdrawalRepository(db)
        self.application_repository = ApplicationRepository(db)
        self.project_repository = ProjectRepository(db)

    def request_withdrawal(self, applicant: User, application_id: str) -> OperationResult:
        '''
        Ask to withdraw one of the applicant's own applications.
        :param applicant: owner of the application
        :type applicant: User
        :param application_id: APP- id
        :type application_id: str
        :return: the submitted withdrawal as entity
        :rtype: OperationResult
        '''
        application = self.application_repository.find_by_id(application_id)
        if application is None:
            return fail(logger, ErrorType.NOT_FOUND, f"application '{application_id}' not found")
        if not application.is_owned_by(applicant):
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"{getattr(applicant, 'nric', None)} did not submit application {application.id}",
            )
        if application.status in FINAL_APPLICATION_STATUSES:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"application {application.id} is already in a final state ({application.status.value})",
            )
        existing = self.withdrawal_repository.find_open_by_application_id(application.id)
        if existing is not None:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"withdrawal {existing.id} already exists for application {application.id}",
            )

        withdrawal = Withdrawal.create(applicant, application)
        result = checked(logger, withdrawal.submit(applicant))
        if not result.ok:
            return result

        uow = UnitOfWork(self.db, f"request {withdrawal.id}")
        self.withdrawal_repository.save(withdrawal)
        error = uow.commit()
        if error:
            return error

        logger.info(f"withdrawal {withdrawal.id} requested by {applicant.nric} for application {application.id}")
        return OperationResult.success(withdrawal)

    def process_withdrawal_request(
        self,
        manager: User,
        withdrawal_id: str,
        approve: bool,
        reason: Optional[str] = None,
    ) -> OperationResult:
        '''
        Approve or reject a pending withdrawal.

        On approval the application becomes WITHDRAWN; if it was BOOKED its
        unit is released first. A unit that cannot be released leaves
        everything untouched.
        '''
        withdrawal = self.withdrawal_repository.find_by_id(withdrawal_id)
        if withdrawal is None:
            return fail(logger, ErrorType.NOT_FOUND, f"withdrawal request '{withdrawal_id}' not found")
        if withdrawal.status != DocumentStatus.PENDING_APPROVAL:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"withdrawal {withdrawal.id} is not pending approval ({withdrawal.status.value})",
            )
        application = self.application_repository.find_by_id(withdrawal.application_id)
        if application is None:
            return fail(logger, ErrorType.NOT_FOUND, f"original application missing for withdrawal {withdrawal.id}")
        project = self.project_repository.find_by_name(application.project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{application.project_name}' not found")
        if manager is None or project.manager_nric != manager.nric:
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"manager {getattr(manager, 'nric', None)} is not authorised for project '{project.name}'",
            )

        uow = UnitOfWork(self.db, f"process {withdrawal.id}")
        uow.track(withdrawal)

        if not approve:
            result = checked(logger, withdrawal.reject(manager, reason))
            if not result.ok:
                return result
            error = uow.commit()
            if error:
                return error
            logger.info(f"withdrawal {withdrawal.id} rejected by manager {manager.nric}")
            return OperationResult.success(withdrawal)

        result = checked(logger, withdrawal.approve(manager))
        if not result.ok:
            return result

        uow.track(application)
        if application.status == DocumentStatus.BOOKED:
            flat_type = application.booked_flat_type
            if flat_type is None or not project.increment_remaining_unit(flat_type):
                uow.rollback(f"cannot release booked unit of {application.id}")
                message = (
                    f"withdrawal {withdrawal.id}: booked unit "
                    f"{flat_type.value if flat_type else 'N/A'} of application {application.id} "
                    f"cannot be released in project '{project.name}'"
                )
                logger.error(message)
                return OperationResult.failure(ErrorType.STATE_ERROR, message)
            uow.record(
                f"re-book {flat_type.value} in {project.name}",
                lambda: project.decrement_remaining_unit(flat_type),
            )

        result = checked(logger, application.mark_withdrawn(manager))
        if not result.ok:
            uow.rollback(f"application {application.id} refused withdrawal")
            return result

        error = uow.commit()
        if error:
            return error

        logger.info(
            f"withdrawal {withdrawal.id} approved by manager {manager.nric}; "
            f"application {application.id} withdrawn"
        )
        return OperationResult.success(withdrawal)

    def view_my_withdrawals(self, actor: User) -> List[Withdrawal]:
        return self.withdrawal_repository.find_by_submitter_nric(actor.nric)

    def list_pending_withdrawals(self, manager: User) -> List[Withdrawal]:
        names = [p.name for p in self.project_repository.find_by_manager(manager.nric)]
        return self.withdrawal_repository.find_pending_for_projects(names)
