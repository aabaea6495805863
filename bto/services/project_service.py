# bto/services/project_service.py
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from bto.db.enums import Capability, FlatType
from bto.logger import get_logger
from bto.models.project import Project, ProjectFlat
from bto.models.user import User
from bto.repositories.document_repositories import DocumentRepository
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult
from bto.services.eligibility_service import is_eligible_to_view
from bto.services.results import fail
from bto.services.scheduling_service import SchedulingService
from bto.services.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class ProjectService:
    """
    Project lifecycle and flat inventory management.

    Only the owning manager may change a project. Inventory counters are
    never touched here except through edits of the initial counts; booking
    and withdrawal move them one unit at a time.
    """

    def __init__(self, db: Session):
        self.db = db
        self.project_repository = ProjectRepository(db)
        self.document_repository = DocumentRepository(db)
        self.scheduling_service = SchedulingService(db)

    # ======================================================
    # 🔍 Lookups
    # ======================================================

    def get_project(self, name: str) -> Optional[Project]:
        return self.project_repository.find_by_name(name)

    def list_projects_by_manager(
        self,
        manager: User,
        neighbourhood: Optional[str] = None,
        flat_type: Optional[FlatType] = None,
        open_from: Optional[date] = None,
        close_to: Optional[date] = None,
    ) -> List[Project]:
        '''The manager's own projects, visible or not, with the same filters as list_projects_for.'''
        return self.project_repository.find_by_criteria(
            manager_nric=manager.nric,
            neighbourhood=neighbourhood,
            flat_type=flat_type,
            open_from=open_from,
            close_to=close_to,
        )

    def list_projects_for(
        self,
        actor: User,
        neighbourhood: Optional[str] = None,
        flat_type: Optional[FlatType] = None,
        manager_nric: Optional[str] = None,
        open_from: Optional[date] = None,
        close_to: Optional[date] = None,
    ) -> List[Project]:
        '''
        Projects the actor may see, optionally filtered.

        Managers see everything. Applicants see visible projects they are
        view-eligible for. Officers see the same plus every project they
        are assigned to, visible or not.

        :param actor: the user asking
        :type actor: User
        :param neighbourhood: case-insensitive neighbourhood filter
        :type neighbourhood: Optional[str]
        :param flat_type: only projects offering this flat type
        :type flat_type: Optional[FlatType]
        :param manager_nric: only projects owned by this manager
        :type manager_nric: Optional[str]
        :param open_from: start of the date range (inclusive)
        :type open_from: Optional[date]
        :param close_to: end of the date range (inclusive)
        :type close_to: Optional[date]
        '''
        candidates = self.project_repository.find_by_criteria(
            neighbourhood=neighbourhood,
            flat_type=flat_type,
            manager_nric=manager_nric,
            open_from=open_from,
            close_to=close_to,
        )
        if actor.is_manager:
            return candidates

        result = []
        for project in candidates:
            if actor.is_officer and project.is_officer_assigned(actor.nric):
                result.append(project)
                continue
            if project.visible and is_eligible_to_view(
                actor.age, actor.marital_status, project.offered_flat_types
            ):
                result.append(project)
        return sorted(result, key=lambda p: p.name.lower())

    # ======================================================
    # ✍️ Create / edit / delete
    # ======================================================

    def create_project(
        self,
        manager: User,
        *,
        name: str,
        neighbourhood: str,
        unit_counts: Dict[FlatType, int],
        unit_prices: Optional[Dict[FlatType, Decimal]] = None,
        open_date: date,
        close_date: date,
        visible: bool = True,
    ) -> OperationResult:
        '''
        Create a project owned by manager with remaining units equal to the initial ones.

        :param manager: owning manager
        :type manager: User
        :param name: unique project name
        :type name: str
        :param neighbourhood: neighbourhood of the project
        :type neighbourhood: str
        :param unit_counts: initial units per flat type
        :type unit_counts: Dict[FlatType, int]
        :param unit_prices: selling price per flat type
        :type unit_prices: Optional[Dict[FlatType, Decimal]]
        :param open_date: application opening date
        :type open_date: date
        :param close_date: application closing date
        :type close_date: date
        :return: the created project as entity
        :rtype: OperationResult
        '''
        unit_prices = unit_prices or {}

        # 1. who
        if manager is None or not manager.can(Capability.MANAGE_PROJECT):
            return fail(logger, ErrorType.AUTHORIZATION_ERROR, "only managers may create projects")

        # 2. input
        name = (name or "").strip()
        neighbourhood = (neighbourhood or "").strip()
        if not name or not neighbourhood:
            return fail(logger, ErrorType.VALIDATION_ERROR, "project name and neighbourhood are required")
        problem = self._validate_inventory(unit_counts, unit_prices) or self._validate_window(open_date, close_date)
        if problem:
            return fail(logger, ErrorType.VALIDATION_ERROR, f"project '{name}': {problem}")
        if self.project_repository.find_by_name(name) is not None:
            return fail(logger, ErrorType.VALIDATION_ERROR, f"project '{name}' already exists")

        # 3. manager exclusivity
        conflict = self.scheduling_service.find_manager_conflict(manager.nric, open_date, close_date)
        if conflict is not None:
            return fail(
                logger,
                ErrorType.RESOURCE_EXHAUSTED,
                f"manager {manager.nric} is busy during this period (already manages '{conflict.name}')",
            )

        # 4. build
        project = Project(
            name=name,
            neighbourhood=neighbourhood,
            open_date=open_date,
            close_date=close_date,
            visible=bool(visible),
            manager_nric=manager.nric,
            manager=manager,
        )
        for flat_type in FlatType:
            if flat_type not in unit_counts and flat_type not in unit_prices:
                continue
            count = unit_counts.get(flat_type, 0)
            project.flats.append(ProjectFlat(
                flat_type=flat_type,
                initial_units=count,
                remaining_units=count,
                unit_price=Decimal(unit_prices.get(flat_type, 0)),
            ))

        uow = UnitOfWork(self.db, f"create project {name}")
        self.project_repository.save(project)
        error = uow.commit()
        if error:
            return error

        logger.info(f"project '{name}' created by manager {manager.nric}")
        return OperationResult.success(project)

    def edit_project(
        self,
        manager: User,
        name: str,
        *,
        neighbourhood: Optional[str] = None,
        unit_counts: Optional[Dict[FlatType, int]] = None,
        unit_prices: Optional[Dict[FlatType, Decimal]] = None,
        open_date: Optional[date] = None,
        close_date: Optional[date] = None,
    ) -> OperationResult:
        '''
        Edit a project. Fields left as None are unchanged.

        A unit count may not drop below the units already booked for that
        flat type; remaining units are recomputed as count - booked.
        '''
        unit_counts = unit_counts or {}
        unit_prices = unit_prices or {}

        project, error = self._owned_project(manager, name, "edit")
        if error:
            return error

        if neighbourhood is not None and not neighbourhood.strip():
            return fail(logger, ErrorType.VALIDATION_ERROR, f"project '{project.name}': neighbourhood must not be blank")
        problem = self._validate_inventory(unit_counts, unit_prices)
        if problem:
            return fail(logger, ErrorType.VALIDATION_ERROR, f"project '{project.name}': {problem}")

        new_open = open_date or project.open_date
        new_close = close_date or project.close_date
        problem = self._validate_window(new_open, new_close)
        if problem:
            return fail(logger, ErrorType.VALIDATION_ERROR, f"project '{project.name}': {problem}")

        for flat_type, count in unit_counts.items():
            booked = project.initial_units(flat_type) - project.remaining_units(flat_type)
            if count < booked:
                return fail(
                    logger,
                    ErrorType.VALIDATION_ERROR,
                    f"project '{project.name}': cannot set {flat_type.value} units to {count}, "
                    f"{booked} already booked",
                )

        if (new_open, new_close) != (project.open_date, project.close_date):
            conflict = self.scheduling_service.find_manager_conflict(
                manager.nric, new_open, new_close, exclude_project=project.name
            )
            if conflict is not None:
                return fail(
                    logger,
                    ErrorType.RESOURCE_EXHAUSTED,
                    f"manager {manager.nric} is busy during this period (already manages '{conflict.name}')",
                )

        # all checks passed, mutate
        if neighbourhood is not None:
            project.neighbourhood = neighbourhood.strip()
        project.open_date = new_open
        project.close_date = new_close
        for flat_type, count in unit_counts.items():
            project.set_initial_units(flat_type, count)
        for flat_type, price in unit_prices.items():
            project.set_unit_price(flat_type, Decimal(price))

        error = UnitOfWork(self.db, f"edit project {project.name}").commit()
        if error:
            return error

        logger.info(f"project '{project.name}' edited by manager {manager.nric}")
        return OperationResult.success(project)

    def delete_project(self, manager: User, name: str) -> OperationResult:
        project, error = self._owned_project(manager, name, "delete")
        if error:
            return error
        if self.document_repository.references_project(project.name):
            return fail(
                logger,
                ErrorType.STATE_ERROR,
                f"project '{project.name}' is referenced by documents and cannot be deleted",
            )

        self.project_repository.delete_by_id(project.name)
        error = UnitOfWork(self.db, f"delete project {project.name}").commit()
        if error:
            return error

        logger.info(f"project '{project.name}' deleted by manager {manager.nric}")
        return OperationResult.success(data={"name": project.name})

    def toggle_visibility(self, manager: User, name: str, visible: bool) -> OperationResult:
        project, error = self._owned_project(manager, name, "change visibility of")
        if error:
            return error

        uow = UnitOfWork(self.db, f"visibility of {project.name}")
        previous = project.visible
        project.set_visibility(visible)
        uow.record("visibility", lambda: project.set_visibility(previous))
        error = uow.commit()
        if error:
            return error

        logger.info(f"project '{project.name}' visibility set to {project.visible} by manager {manager.nric}")
        return OperationResult.success(project)

    # ======================================================
    # 🔐 Internal helpers
    # ======================================================

    def _owned_project(self, manager: User, name: str, action: str):
        if manager is None or not manager.can(Capability.MANAGE_PROJECT):
            return None, fail(logger, ErrorType.AUTHORIZATION_ERROR, f"only managers may {action} projects")
        project = self.project_repository.find_by_name(name)
        if project is None:
            return None, fail(logger, ErrorType.NOT_FOUND, f"project '{name}' not found")
        if project.manager_nric != manager.nric:
            return None, fail(
                logger,
                ErrorType.AUTHORIZATION_ERROR,
                f"manager {manager.nric} does not manage project '{project.name}'",
            )
        return project, None

    @staticmethod
    def _validate_inventory(
        unit_counts: Dict[FlatType, int],
        unit_prices: Dict[FlatType, Decimal],
    ) -> Optional[str]:
        for flat_type, count in unit_counts.items():
            if count is None or count < 0:
                return f"unit count for {flat_type.value} must not be negative"
        for flat_type, price in unit_prices.items():
            if price is None or not Decimal(price).is_finite() or Decimal(price) < 0:
                return f"unit price for {flat_type.value} must be a non-negative number"
        return None

    @staticmethod
    def _validate_window(open_date: Optional[date], close_date: Optional[date]) -> Optional[str]:
        if open_date is None or close_date is None:
            return "opening and closing dates are required"
        if open_date > close_date:
            return "opening date must not be after closing date"
        return None
