# bto/services/scheduling_service.py
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from bto.models.document import Registration
from bto.models.project import Project
from bto.repositories.document_repositories import RegistrationRepository
from bto.repositories.project_repository import ProjectRepository


def windows_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    '''Inclusive calendar-date windows overlap unless one ends before the other starts.'''
    return not (a_start > b_end or a_end < b_start)


class SchedulingService:
    """
    Exclusivity windows for managers and officers.

    A manager owns at most one project whose application window overlaps
    any given period; an officer holds at most one APPROVED registration
    per overlapping period.
    """

    def __init__(self, db: Session):
        self.db = db
        self.project_repository = ProjectRepository(db)
        self.registration_repository = RegistrationRepository(db)

    def find_manager_conflict(
        self,
        manager_nric: str,
        start: date,
        end: date,
        exclude_project: Optional[str] = None,
    ) -> Optional[Project]:
        '''
        The manager's project overlapping [start, end], if any.
        :param exclude_project: name of the project being edited, ignored in the check
        '''
        conflicts = self.project_repository.find_overlapping_by_manager(
            manager_nric, start, end, exclude_name=exclude_project
        )
        return conflicts[0] if conflicts else None

    def is_manager_busy_during_period(
        self,
        manager_nric: str,
        start: date,
        end: date,
        exclude_project: Optional[str] = None,
    ) -> bool:
        return self.find_manager_conflict(manager_nric, start, end, exclude_project) is not None

    def find_officer_conflict(
        self,
        officer_nric: str,
        start: date,
        end: date,
        exclude_project: Optional[str] = None,
    ) -> Optional[Registration]:
        '''An APPROVED registration of the officer on another project overlapping [start, end].'''
        return self.registration_repository.find_approved_registration_in_period(
            officer_nric, start, end, exclude_project=exclude_project
        )

    def is_officer_busy_during_period(
        self,
        officer_nric: str,
        start: date,
        end: date,
        exclude_project: Optional[str] = None,
    ) -> bool:
        return self.find_officer_conflict(officer_nric, start, end, exclude_project) is not None
