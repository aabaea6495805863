# bto/repositories/document_repositories.py
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bto.db.enums import DocumentKind, DocumentStatus, NON_FINAL_APPLICATION_STATUSES
from bto.models.document import (
    Application,
    Document,
    Enquiry,
    Registration,
    Withdrawal,
    document_kind_from_id,
)
from bto.models.project import Project
from bto.repositories.base_repository import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    model = Application

    def find_by_applicant_nric(self, applicant_nric: str) -> List[Application]:
        return list(self.db.scalars(
            select(Application)
            .where(Application.submitter_nric == applicant_nric)
            .order_by(Application.last_modified_date.desc())
        ))

    def find_by_project_id(self, project_name: str) -> List[Application]:
        return list(self.db.scalars(
            select(Application).where(Application.project_name == project_name)
        ))

    def find_active_application_by_applicant_nric(self, applicant_nric: str) -> Optional[Application]:
        '''The applicant's application in DRAFT / SUBMITTED / PENDING_APPROVAL / APPROVED, if any.'''
        return self.db.scalars(
            select(Application).where(
                Application.submitter_nric == applicant_nric,
                Application.status.in_(NON_FINAL_APPLICATION_STATUSES),
            )
        ).first()

    def find_booked_application_by_applicant_nric(self, applicant_nric: str) -> Optional[Application]:
        return self.db.scalars(
            select(Application).where(
                Application.submitter_nric == applicant_nric,
                Application.status == DocumentStatus.BOOKED,
            )
        ).first()

    def find_pending_for_projects(self, project_names: Iterable[str]) -> List[Application]:
        names = list(project_names)
        if not names:
            return []
        return list(self.db.scalars(
            select(Application)
            .where(
                Application.status == DocumentStatus.PENDING_APPROVAL,
                Application.project_name.in_(names),
            )
            .order_by(Application.submission_date)
        ))

    def find_booked(self) -> List[Application]:
        return list(self.db.scalars(
            select(Application).where(Application.status == DocumentStatus.BOOKED)
        ))


class RegistrationRepository(BaseRepository[Registration]):
    model = Registration

    def find_by_officer_nric(self, officer_nric: str) -> List[Registration]:
        return list(self.db.scalars(
            select(Registration)
            .where(Registration.submitter_nric == officer_nric)
            .order_by(Registration.last_modified_date.desc())
        ))

    def find_by_project_id(self, project_name: str) -> List[Registration]:
        return list(self.db.scalars(
            select(Registration).where(Registration.project_name == project_name)
        ))

    def find_live_registration(self, officer_nric: str, project_name: str) -> Optional[Registration]:
        '''A registration for the project that is neither rejected nor closed.'''
        return self.db.scalars(
            select(Registration).where(
                Registration.submitter_nric == officer_nric,
                Registration.project_name == project_name,
                Registration.status.not_in((DocumentStatus.REJECTED, DocumentStatus.CLOSED)),
            )
        ).first()

    def find_approved_registration_in_period(
        self,
        officer_nric: str,
        start: date,
        end: date,
        exclude_project: Optional[str] = None,
    ) -> Optional[Registration]:
        '''
        An APPROVED registration of the officer for a project whose
        application window overlaps [start, end].
        '''
        query = (
            select(Registration)
            .join(Project, Project.name == Registration.project_name)
            .where(
                Registration.submitter_nric == officer_nric,
                Registration.status == DocumentStatus.APPROVED,
                Project.open_date <= end,
                Project.close_date >= start,
            )
        )
        if exclude_project:
            query = query.where(Registration.project_name != exclude_project)
        return self.db.scalars(query).first()

    def find_pending_for_projects(self, project_names: Iterable[str]) -> List[Registration]:
        names = list(project_names)
        if not names:
            return []
        return list(self.db.scalars(
            select(Registration)
            .where(
                Registration.status == DocumentStatus.PENDING_APPROVAL,
                Registration.project_name.in_(names),
            )
            .order_by(Registration.submission_date)
        ))


class WithdrawalRepository(BaseRepository[Withdrawal]):
    model = Withdrawal

    def find_by_submitter_nric(self, submitter_nric: str) -> List[Withdrawal]:
        return list(self.db.scalars(
            select(Withdrawal)
            .where(Withdrawal.submitter_nric == submitter_nric)
            .order_by(Withdrawal.last_modified_date.desc())
        ))

    def find_by_application_id(self, application_id: str) -> List[Withdrawal]:
        return list(self.db.scalars(
            select(Withdrawal).where(Withdrawal.application_id == application_id)
        ))

    def find_open_by_application_id(self, application_id: str) -> Optional[Withdrawal]:
        '''A withdrawal for the application that has not been rejected or closed.'''
        return self.db.scalars(
            select(Withdrawal).where(
                Withdrawal.application_id == application_id,
                Withdrawal.status.not_in((DocumentStatus.REJECTED, DocumentStatus.CLOSED)),
            )
        ).first()

    def find_pending_for_projects(self, project_names: Iterable[str]) -> List[Withdrawal]:
        names = list(project_names)
        if not names:
            return []
        return list(self.db.scalars(
            select(Withdrawal)
            .where(
                Withdrawal.status == DocumentStatus.PENDING_APPROVAL,
                Withdrawal.project_name.in_(names),
            )
            .order_by(Withdrawal.submission_date)
        ))


class EnquiryRepository(BaseRepository[Enquiry]):
    model = Enquiry

    def find_all(self) -> List[Enquiry]:
        return list(self.db.scalars(
            select(Enquiry).order_by(Enquiry.submission_date.is_(None), Enquiry.submission_date)
        ))

    def find_by_submitter_nric(self, submitter_nric: str) -> List[Enquiry]:
        return list(self.db.scalars(
            select(Enquiry)
            .where(Enquiry.submitter_nric == submitter_nric)
            .order_by(Enquiry.last_modified_date.desc())
        ))

    def find_by_project_id(self, project_name: str) -> List[Enquiry]:
        return self.find_by_project_names([project_name])

    def find_by_project_names(self, project_names: Iterable[str]) -> List[Enquiry]:
        names = list(project_names)
        if not names:
            return []
        return list(self.db.scalars(
            select(Enquiry)
            .where(Enquiry.project_name.in_(names))
            .order_by(Enquiry.submission_date.is_(None), Enquiry.submission_date)
        ))


class DocumentRepository:
    """
    Facade over the four document repositories.

    Lookups are routed by id prefix (APP-, REG-, WDR-, ENQ-) so callers never
    need to know the concrete kind up front.
    """

    def __init__(self, db: Session):
        self.db = db
        self.applications = ApplicationRepository(db)
        self.registrations = RegistrationRepository(db)
        self.withdrawals = WithdrawalRepository(db)
        self.enquiries = EnquiryRepository(db)
        self._by_kind: Dict[DocumentKind, BaseRepository] = {
            DocumentKind.APPLICATION: self.applications,
            DocumentKind.REGISTRATION: self.registrations,
            DocumentKind.WITHDRAWAL: self.withdrawals,
            DocumentKind.ENQUIRY: self.enquiries,
        }

    def repository_for(self, kind: DocumentKind) -> BaseRepository:
        return self._by_kind[kind]

    def find_by_id(self, document_id: str) -> Optional[Document]:
        kind = document_kind_from_id(document_id)
        if kind is None:
            return None
        return self._by_kind[kind].find_by_id(document_id)

    def save(self, document: Document) -> Document:
        return self._by_kind[document.kind].save(document)

    def delete_by_id(self, document_id: str) -> bool:
        kind = document_kind_from_id(document_id)
        if kind is None:
            return False
        return self._by_kind[kind].delete_by_id(document_id)

    def count(self) -> int:
        return sum(repository.count() for repository in self._by_kind.values())

    def references_project(self, project_name: str) -> bool:
        query = select(Document.id).where(Document.project_name == project_name).limit(1)
        return self.db.scalar(query) is not None
