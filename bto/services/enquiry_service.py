# bto/services/enquiry_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from bto.db.enums import Capability
from bto.logger import get_logger
from bto.models.document import Enquiry
from bto.models.user import User
from bto.repositories.document_repositories import EnquiryRepository
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.results import checked, fail
from bto.services.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class EnquiryService:
    """
    Enquiries about a project, or general ones with no project.

    Project enquiries are answered by an officer assigned to the project or
    by its manager; general enquiries by any manager.
    """

    def __init__(self, db: Session):
        self.db = db
        self.enquiry_repository = EnquiryRepository(db)
        self.project_repository = ProjectRepository(db)

    def create_enquiry(self, actor: User, project_name: Optional[str], content: str) -> OperationResult:
        if actor is None or not actor.can(Capability.ENQUIRE):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only applicants and officers may submit enquiries")
        project_name = project_name.strip() if project_name and project_name.strip() else None
        if project_name is not None and self.project_repository.find_by_name(project_name) is None:
            return fail(logger, ErrorType.NOT_FOUND, f"project '{project_name}' not found")
        if content is None or not content.strip():
            return fail(logger, ErrorType.VALIDATION_ERROR, "enquiry content cannot be empty")

        enquiry = Enquiry.create(actor, project_name, content.strip())
        result = checked(logger, enquiry.submit(actor))
        if not result.ok:
            return result

        uow = UnitOfWork(self.db, f"enquiry {enquiry.id}")
        self.enquiry_repository.save(enquiry)
        error = uow.commit()
        if error:
            return error

        logger.info(f"enquiry {enquiry.id} submitted by {actor.nric} (project: {project_name or 'general'})")
        return OperationResult.success(enquiry)

    def edit_enquiry(self, actor: User, enquiry_id: str, new_content: str) -> OperationResult:
        enquiry = self.enquiry_repository.find_by_id(enquiry_id)
        if enquiry is None:
            return fail(logger, ErrorType.NOT_FOUND, f"enquiry '{enquiry_id}' not found")

        uow = UnitOfWork(self.db, f"edit {enquiry.id}")
        uow.track(enquiry)
        result = checked(logger, enquiry.edit(actor, new_content))
        if not result.ok:
            return result
        error = uow.commit()
        if error:
            return error

        logger.info(f"enquiry {enquiry.id} edited by {actor.nric}")
        return OperationResult.success(enquiry)

    def delete_enquiry(self, actor: User, enquiry_id: str) -> OperationResult:
        '''Close the enquiry, then remove it from storage.'''
        enquiry = self.enquiry_repository.find_by_id(enquiry_id)
        if enquiry is None:
            return fail(logger, ErrorType.NOT_FOUND, f"enquiry '{enquiry_id}' not found")

        uow = UnitOfWork(self.db, f"delete {enquiry.id}")
        uow.track(enquiry)
        result = checked(logger, enquiry.delete(actor))
        if not result.ok:
            return result
        self.enquiry_repository.delete_by_id(enquiry.id)
        error = uow.commit()
        if error:
            return error

        logger.info(f"enquiry {enquiry.id} deleted by {actor.nric}")
        return OperationResult.success(enquiry)

    def reply_to_enquiry(self, actor: User, enquiry_id: str, content: str) -> OperationResult:
        '''
        Reply to a submitted enquiry.
        :param actor: replying officer or manager
        :type actor: User
        :param enquiry_id: ENQ- id
        :type enquiry_id: str
        :param content: reply text, must not be blank
        :type content: str
        '''
        enquiry = self.enquiry_repository.find_by_id(enquiry_id)
        if enquiry is None:
            return fail(logger, ErrorType.NOT_FOUND, f"enquiry '{enquiry_id}' not found")
        if content is None or not content.strip():
            return fail(logger, ErrorType.VALIDATION_ERROR, "reply content cannot be empty")

        if actor is None or not actor.can(Capability.REPLY_ENQUIRY):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only officers and managers may reply to enquiries")
        if enquiry.project_name is None:
            if not actor.is_manager:
                return fail(
                    logger,
                    ErrorType.AUTHORIZATION_ERROR,
                    f"only a manager may reply to general enquiry {enquiry.id}",
                )
        else:
            project = self.project_repository.find_by_name(enquiry.project_name)
            if project is None:
                return fail(logger, ErrorType.NOT_FOUND, f"project '{enquiry.project_name}' not found")
            handles = (
                project.manager_nric == actor.nric
                if actor.is_manager
                else project.is_officer_assigned(actor.nric)
            )
            if not handles:
                return fail(
                    logger,
                    ErrorType.AUTHORIZATION_ERROR,
                    f"{actor.role.value} {actor.nric} does not handle project '{project.name}'",
                )

        uow = UnitOfWork(self.db, f"reply {enquiry.id}")
        uow.track(enquiry)
        result = checked(logger, enquiry.reply(actor, content))
        if not result.ok:
            return result
        error = uow.commit()
        if error:
            return error

        logger.info(f"enquiry {enquiry.id} replied by {actor.nric}")
        return OperationResult.success(enquiry)

    # ======================================================
    # 🔍 Listings
    # ======================================================

    def view_my_enquiries(self, actor: User) -> List[Enquiry]:
        return self.enquiry_repository.find_by_submitter_nric(actor.nric)

    def list_handled_enquiries(self, officer: User) -> List[Enquiry]:
        names = [p.name for p in self.project_repository.find_by_officer(officer.nric)]
        return self.enquiry_repository.find_by_project_names(names)

    def list_managed_enquiries(self, manager: User) -> List[Enquiry]:
        names = [p.name for p in self.project_repository.find_by_manager(manager.nric)]
        return self.enquiry_repository.find_by_project_names(names)

    def list_all_enquiries(self, manager: User) -> List[Enquiry]:
        if manager is None or not manager.is_manager:
            return []
        return self.enquiry_repository.find_all()
