# bto/services/registration_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from bto.db.enums import Capability, DocumentStatus
from bto.logger import get_logger
from bto.models.document import Registration
from bto.models.project import Project
from bto.models.user import User
from bto.repositories.document_repositories import ApplicationRepository, RegistrationRepository
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.results import checked, fail
from bto.services.scheduling_service import SchedulingService
from bto.services.unit_of_work import UnitOfWork

logger = get_logger(__name__)

NO_SLOTS_REASON = "No available officer slots."


class RegistrationService:
    """
    Officer registrations for project teams.

    An approved registration takes one of the project's officer slots;
    the registration and the slot are persisted together.
    """

    def __init__(self, db: Session):
        self.db = db
        self.registration_repository = RegistrationRepository(db)
        self.application_repository = ApplicationRepository(db)
        self.project_repository = ProjectRepository(db)
        self.scheduling_service = SchedulingService(db)

    # ======================================================
    # 👮 Officer side
    # ======================================================

    def register_for_project_team(self, officer: User, project_name: str) -> OperationResult:
        '''
        Ask to join a project's team.
        :param officer: registering officer
        :type officer: User
        :param project_name: project to join
        :type project_name: str
        :return: the submitted registration as entity
        :rtype: OperationResult
        '''
        if officer is None or not officer.can(Capability.REGISTER_FOR_PROJECT):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only officers may register for project teams")

        # 1. project
        project = self.project_repository.find_by_name(project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{project_name}' not found")

        # 2. not an applicant of the same project
        applied = [
            app for app in self.application_repository.find_by_applicant_nric(officer.nric)
            if app.project_name == project.name
        ]
        if applied:
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"officer {officer.nric} has applied for project '{project.name}' as an applicant",
            )

        # 3. not handling another project in the same period
        conflict = self.scheduling_service.find_officer_conflict(
            officer.nric, project.open_date, project.close_date, exclude_project=project.name
        )
        if conflict is not None:
            return fail(
                logger,
                ErrorType.RESOURCE_EXHAUSTED,
                f"officer {officer.nric} is already handling another project "
                f"(registration {conflict.id} for '{conflict.project_name}') "
                f"during the application period of '{project.name}'",
            )

        # 4. one live registration per project
        existing = self.registration_repository.find_live_registration(officer.nric, project.name)
        if existing is not None:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"officer {officer.nric} has already registered for project '{project.name}' ({existing.id})",
            )

        registration = Registration.create(officer, project.name)
        result = checked(logger, registration.submit(officer))
        if not result.ok:
            return result

        uow = UnitOfWork(self.db, f"register {registration.id}")
        self.registration_repository.save(registration)
        error = uow.commit()
        if error:
            return error

        logger.info(f"registration {registration.id} submitted by officer {officer.nric} for '{project.name}'")
        return OperationResult.success(registration)

    def view_my_registrations(self, officer: User) -> List[Registration]:
        return self.registration_repository.find_by_officer_nric(officer.nric)

    def list_handled_projects(self, officer: User) -> List[Project]:
        return self.project_repository.find_by_officer(officer.nric)

    # ======================================================
    # 🧑‍💼 Manager side
    # ======================================================

    def list_pending_registrations(self, manager: User) -> List[Registration]:
        names = [p.name for p in self.project_repository.find_by_manager(manager.nric)]
        return self.registration_repository.find_pending_for_projects(names)

    def process_officer_registration(
        self,
        manager: User,
        registration_id: str,
        approve: bool,
        reason: Optional[str] = None,
    ) -> OperationResult:
        '''
        Approve or reject a pending registration.

        Approving with no free officer slot rejects the registration with
        the reason "No available officer slots." and reports
        RESOURCE_EXHAUSTED.

        :param manager: manager of the registration's project
        :type manager: User
        :param registration_id: REG- id
        :type registration_id: str
        :param approve: True to approve, False to reject
        :type approve: bool
        :param reason: rejection reason, required when rejecting
        :type reason: Optional[str]
        '''
        registration = self.registration_repository.find_by_id(registration_id)
        if registration is None:
            return fail(logger, ErrorType.NOT_FOUND, f"registration '{registration_id}' not found")
        if registration.status != DocumentStatus.PENDING_APPROVAL:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"registration {registration.id} is not pending approval ({registration.status.value})",
            )
        project = self.project_repository.find_by_name(registration.project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{registration.project_name}' not found")
        if manager is None or project.manager_nric != manager.nric:
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"manager {getattr(manager, 'nric', None)} is not authorised for project '{project.name}'",
            )

        if approve:
            # the officer may have been approved elsewhere since registering
            conflict = self.scheduling_service.find_officer_conflict(
                registration.submitter_nric, project.open_date, project.close_date, exclude_project=project.name
            )
            if conflict is not None:
                return fail(
                    logger,
                    ErrorType.RESOURCE_EXHAUSTED,
                    f"officer {registration.submitter_nric} is already handling another project "
                    f"(registration {conflict.id} for '{conflict.project_name}') "
                    f"during the application period of '{project.name}'",
                    entity=registration,
                )

        if approve and project.available_officer_slots <= 0:
            rejected = self.process_officer_registration(manager, registration_id, False, NO_SLOTS_REASON)
            if not rejected.ok:
                return rejected
            return fail(
                logger,
                ErrorType.RESOURCE_EXHAUSTED,
                f"no available officer slots in project '{project.name}'; registration {registration.id} rejected",
                entity=registration,
                side_effect=True,
            )

        uow = UnitOfWork(self.db, f"process {registration.id}")
        uow.track(registration)

        if not approve:
            result = checked(logger, registration.reject(manager, reason))
            if not result.ok:
                return result
        else:
            result = checked(logger, registration.approve(manager))
            if not result.ok:
                return result
            officer = registration.submitter
            if not project.add_officer(officer):
                uow.rollback(f"officer {officer.nric} could not be added to '{project.name}'")
                message = (
                    f"registration {registration.id} approved but officer {officer.nric} "
                    f"could not be added to project '{project.name}'; approval reverted"
                )
                logger.error(message)
                return OperationResult.failure(ErrorType.SYSTEM_ERROR, message)
            uow.record(
                f"remove officer {officer.nric} from {project.name}",
                lambda: project.remove_officer(officer),
            )

        error = uow.commit()
        if error:
            return error

        logger.info(
            f"registration {registration.id} {registration.status.value} by manager {manager.nric}"
        )
        return OperationResult.success(registration)
