# bto/services/application_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from bto.db.enums import Capability, DocumentStatus
from bto.logger import get_logger
from bto.models.document import Application
from bto.models.user import User
from bto.repositories.document_repositories import ApplicationRepository, RegistrationRepository
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.applicant_profile import ApplicantProfile, applicant_profile_of
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.eligibility_service import ineligibility_reason, is_eligible_to_apply
from bto.services.results import checked, fail
from bto.services.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class ApplicationService:
    """
    BTO applications: applying, listing and the manager's decision.

    An applicant holds at most one non-final application and can never
    apply again while a booking of theirs is still standing.
    """

    def __init__(self, db: Session):
        self.db = db
        self.application_repository = ApplicationRepository(db)
        self.registration_repository = RegistrationRepository(db)
        self.project_repository = ProjectRepository(db)

    def get_application(self, application_id: str) -> Optional[Application]:
        return self.application_repository.find_by_id(application_id)

    # ======================================================
    # 👤 Applicant side
    # ======================================================

    def apply_for_project(self, applicant: User, project_name: str) -> OperationResult:
        '''
        Apply for a project. Officers are routed through apply_as_officer.

        Checks, in order: project exists, project visible, no standing
        booking, apply-eligibility, no other non-final application.

        :param applicant: the user applying
        :type applicant: User
        :param project_name: name of the project
        :type project_name: str
        :return: the submitted application as entity
        :rtype: OperationResult
        '''
        if applicant is None or not applicant.can(Capability.APPLY):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only applicants and officers may apply")
        if applicant.is_officer:
            return self.apply_as_officer(applicant, project_name)
        return self._apply(applicant, applicant_profile_of(applicant), project_name)

    def apply_as_officer(self, officer: User, project_name: str) -> OperationResult:
        '''
        An officer applying as an applicant, using their applicant profile.
        Refused for a project the officer handles or has asked to handle.
        '''
        if officer is None or not officer.is_officer:
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only officers may apply as officer")

        project = self.project_repository.find_by_name(project_name)
        if project is not None and project.is_officer_assigned(officer.nric):
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"officer {officer.nric} cannot apply for project '{project_name}' as they are handling this project",
            )
        registration = self.registration_repository.find_live_registration(officer.nric, project_name)
        if registration is not None:
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"officer {officer.nric} cannot apply for project '{project_name}' as they are handling this project "
                f"(registration {registration.id} is {registration.status.value})",
            )
        return self._apply(officer, applicant_profile_of(officer), project_name)

    def _apply(self, applicant: User, profile: ApplicantProfile, project_name: str) -> OperationResult:
        # 1. project exists
        project = self.project_repository.find_by_name(project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{project_name}' not found")

        # 2. visible
        if not project.visible:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"project '{project.name}' is not currently open for applications (not visible)",
            )

        # 3. no standing booking
        booked = self.application_repository.find_booked_application_by_applicant_nric(profile.nric)
        if booked is not None:
            return fail(
                logger,
                ErrorType.RESOURCE_EXHAUSTED,
                f"applicant {profile.nric} already has a booked flat "
                f"(application {booked.id} for project '{booked.project_name}')",
            )

        # 4. eligibility
        offered = project.offered_flat_types
        if not is_eligible_to_apply(profile.age, profile.marital_status, offered):
            reason = ineligibility_reason(profile.age, profile.marital_status, offered)
            return fail(
                logger,
                ErrorType.VALIDATION_ERROR,
                f"applicant {profile.nric} is not eligible to apply for project '{project.name}': {reason}",
            )

        # 5. one live application at a time
        active = self.application_repository.find_active_application_by_applicant_nric(profile.nric)
        if active is not None:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"applicant {profile.nric} already has an active application ({active.id})",
            )

        # 6. create in DRAFT and submit straight away
        application = Application.create(applicant, project.name)
        result = checked(logger, application.submit(applicant))
        if not result.ok:
            return result

        uow = UnitOfWork(self.db, f"apply {application.id}")
        self.application_repository.save(application)
        error = uow.commit()
        if error:
            return error

        logger.info(f"application {application.id} submitted by {applicant.nric} for project '{project.name}'")
        return OperationResult.success(application)

    def view_my_applications(self, actor: User) -> List[Application]:
        return self.application_repository.find_by_applicant_nric(actor.nric)

    # ======================================================
    # 🧑‍💼 Manager side
    # ======================================================

    def list_pending_applications(self, manager: User) -> List[Application]:
        names = [p.name for p in self.project_repository.find_by_manager(manager.nric)]
        return self.application_repository.find_pending_for_projects(names)

    def process_bto_application(
        self,
        manager: User,
        application_id: str,
        approve: bool,
        reason: Optional[str] = None,
    ) -> OperationResult:
        '''
        Approve or reject a pending application of a project the manager owns.
        Remaining supply is not consulted here; it is checked at booking.

        :param manager: deciding manager
        :type manager: User
        :param application_id: APP- id
        :type application_id: str
        :param approve: True to approve, False to reject
        :type approve: bool
        :param reason: rejection reason, required when rejecting
        :type reason: Optional[str]
        '''
        application = self.application_repository.find_by_id(application_id)
        if application is None:
            return fail(logger, ErrorType.NOT_FOUND, f"application '{application_id}' not found")
        if application.status != DocumentStatus.PENDING_APPROVAL:
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"application {application.id} is not pending approval ({application.status.value})",
            )
        project = self.project_repository.find_by_name(application.project_name)
        if project is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{application.project_name}' not found")
        if manager is None or project.manager_nric != manager.nric:
            return fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"manager {getattr(manager, 'nric', None)} is not authorised for project '{project.name}'",
            )

        uow = UnitOfWork(self.db, f"process {application.id}")
        uow.track(application)
        if approve:
            result = checked(logger, application.approve(manager))
        else:
            result = checked(logger, application.reject(manager, reason))
        if not result.ok:
            return result

        error = uow.commit()
        if error:
            return error

        logger.info(
            f"application {application.id} {application.status.value} by manager {manager.nric}"
        )
        return OperationResult.success(application)
