# bto/repositories/project_repository.py
from datetime import date
from typing import List, Optional

from sqlalchemy import func, select

from bto.db.enums import FlatType
from bto.models.project import Project, ProjectFlat, ProjectOfficer
from bto.repositories.base_repository import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    model = Project

    def find_all(self) -> List[Project]:
        return list(self.db.scalars(select(Project).order_by(func.lower(Project.name))))

    def find_by_name(self, name: str) -> Optional[Project]:
        if not name:
            return None
        return self.db.get(Project, name.strip())

    def find_by_manager(self, manager_nric: str) -> List[Project]:
        return list(self.db.scalars(
            select(Project)
            .where(Project.manager_nric == manager_nric)
            .order_by(func.lower(Project.name))
        ))

    def find_by_officer(self, officer_nric: str) -> List[Project]:
        return list(self.db.scalars(
            select(Project)
            .join(ProjectOfficer, ProjectOfficer.project_name == Project.name)
            .where(ProjectOfficer.officer_nric == officer_nric)
            .order_by(func.lower(Project.name))
        ))

    def find_overlapping_by_manager(
        self,
        manager_nric: str,
        start: date,
        end: date,
        exclude_name: Optional[str] = None,
    ) -> List[Project]:
        '''
        Projects owned by manager_nric whose [open_date, close_date] window
        shares at least one day with [start, end].
        '''
        query = select(Project).where(
            Project.manager_nric == manager_nric,
            Project.open_date <= end,
            Project.close_date >= start,
        )
        if exclude_name:
            query = query.where(Project.name != exclude_name)
        return list(self.db.scalars(query))

    def find_by_criteria(
        self,
        *,
        neighbourhood: Optional[str] = None,
        flat_type: Optional[FlatType] = None,
        manager_nric: Optional[str] = None,
        visible: Optional[bool] = None,
        open_from: Optional[date] = None,
        close_to: Optional[date] = None,
    ) -> List[Project]:
        '''
        Projects matching every given filter. open_from / close_to keep the
        projects whose application window shares at least one day with
        [open_from, close_to]; either bound may be left open.
        '''
        query = select(Project)
        if neighbourhood and neighbourhood.strip():
            query = query.where(func.lower(Project.neighbourhood) == neighbourhood.strip().lower())
        if flat_type is not None:
            query = query.where(
                Project.flats.any(
                    (ProjectFlat.flat_type == flat_type) & (ProjectFlat.initial_units > 0)
                )
            )
        if manager_nric:
            query = query.where(Project.manager_nric == manager_nric)
        if visible is not None:
            query = query.where(Project.visible.is_(visible))
        if open_from is not None:
            query = query.where(Project.close_date >= open_from)
        if close_to is not None:
            query = query.where(Project.open_date <= close_to)
        return list(self.db.scalars(query.order_by(func.lower(Project.name))))
