# bto/models/document.py
'''
Submittable documents: Application, Registration, Withdrawal, Enquiry.

All four share one table; `kind` is the variant tag. Status only ever
changes through the transition methods below, each of which returns an
OperationResult instead of raising.

Lifecycle
    DRAFT -> PENDING_APPROVAL -> APPROVED | REJECTED      (approvable kinds)
    APPROVED -> BOOKED                                    (Application, booking)
    non-final | BOOKED -> WITHDRAWN                       (Application, withdrawal)
    DRAFT -> SUBMITTED -> REPLIED                         (Enquiry)
    DRAFT (| SUBMITTED for Enquiry) -> CLOSED             (delete)
'''
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bto.db.base import Base
from bto.db.enums import (
    Capability,
    DocumentKind,
    DocumentStatus,
    FlatType,
    NON_FINAL_APPLICATION_STATUSES,
)
from bto.models.user import User
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult

DOCUMENT_ID_PREFIXES = {
    DocumentKind.APPLICATION: "APP-",
    DocumentKind.REGISTRATION: "REG-",
    DocumentKind.WITHDRAWAL: "WDR-",
    DocumentKind.ENQUIRY: "ENQ-",
}


def new_document_id(kind: DocumentKind) -> str:
    return DOCUMENT_ID_PREFIXES[kind] + uuid4().hex[:8]


def document_kind_from_id(document_id: str) -> Optional[DocumentKind]:
    '''
    Route an id to its document kind by its 4-character prefix.
    Returns None for an unknown prefix.
    '''
    if document_id is None:
        raise ValueError("document_id must not be None")
    prefix = document_id[:4].upper()
    for kind, kind_prefix in DOCUMENT_ID_PREFIXES.items():
        if kind_prefix == prefix:
            return kind
    return None


class Document(Base):
    __tablename__ = "documents"

    # =========
    # 🔒 Immutable facts
    # =========
    id: Mapped[str] = mapped_column(String(12), primary_key=True, comment="Type-prefixed id, e.g. APP-1a2b3c4d")
    kind: Mapped[DocumentKind] = mapped_column(Enum(DocumentKind, name="document_kind"), nullable=False)
    submitter_nric: Mapped[str] = mapped_column(String(9), ForeignKey("users.nric"), nullable=False)
    submitter: Mapped[User] = relationship(User, lazy="joined")

    # =========
    # 🔁 Lifecycle
    # =========
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, name="document_status"),
        nullable=False,
        default=DocumentStatus.DRAFT,
    )
    submission_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_modified_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_modified_by: Mapped[str] = mapped_column(String(9), nullable=False, comment="NRIC of last modifier")

    # =========
    # Shared payload
    # =========
    project_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __mapper_args__ = {"polymorphic_on": "kind"}

    EDITABLE_STATUSES = (DocumentStatus.DRAFT,)
    DELETABLE_STATUSES = (DocumentStatus.DRAFT,)
    SUBMITTED_STATUS = DocumentStatus.PENDING_APPROVAL

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _init_draft(self, submitter: User) -> None:
        now = datetime.now()
        self.id = new_document_id(self.__mapper__.polymorphic_identity)
        self.submitter = submitter
        self.submitter_nric = submitter.nric
        self.status = DocumentStatus.DRAFT
        self.submission_date = None
        self.last_modified_date = now
        self.last_modified_by = submitter.nric

    def _touch(self, actor: User, when: Optional[datetime] = None) -> None:
        self.last_modified_date = when or datetime.now()
        self.last_modified_by = actor.nric

    def is_owned_by(self, actor: User) -> bool:
        return actor is not None and actor.nric == self.submitter_nric

    def _fail(self, error_type: ErrorType, message: str) -> OperationResult:
        return OperationResult.failure(error_type, f"{self.id}: {message}", entity=self)

    def _ok(self) -> OperationResult:
        return OperationResult.success(self)

    _SNAPSHOT_FIELDS = (
        "status",
        "submission_date",
        "last_modified_date",
        "last_modified_by",
        "project_name",
        "rejection_reason",
    )

    def snapshot(self) -> Dict[str, Any]:
        '''Capture mutable fields so a unit of work can undo a transition.'''
        return {field: getattr(self, field) for field in self._SNAPSHOT_FIELDS}

    def restore(self, snapshot: Dict[str, Any]) -> None:
        for field, value in snapshot.items():
            setattr(self, field, value)

    # ------------------------------------------------------------------
    # shared contract
    # ------------------------------------------------------------------

    def submit(self, actor: User) -> OperationResult:
        if not self.is_owned_by(actor):
            return self._fail(ErrorType.AUTHORIZATION_ERROR, "only the submitter may submit")
        if self.status != DocumentStatus.DRAFT:
            return self._fail(ErrorType.STATE_ERROR, f"cannot submit from {self.status.name}")
        now = datetime.now()
        self.status = self.SUBMITTED_STATUS
        self.submission_date = now
        self._touch(actor, now)
        return self._ok()

    def edit(self, actor: User, new_content: Any) -> OperationResult:
        if not self.is_owned_by(actor):
            return self._fail(ErrorType.AUTHORIZATION_ERROR, "only the submitter may edit")
        if self.status not in self.EDITABLE_STATUSES:
            return self._fail(ErrorType.STATE_ERROR, f"cannot edit in {self.status.name}")
        if new_content is None or (isinstance(new_content, str) and not new_content.strip()):
            return self._fail(ErrorType.VALIDATION_ERROR, "content must not be empty")
        result = self._apply_content(new_content)
        if not result.ok:
            return result
        self._touch(actor)
        return self._ok()

    def _apply_content(self, new_content: Any) -> OperationResult:
        raise NotImplementedError(f"{type(self).__name__}._apply_content() must be implemented")

    def delete(self, actor: User) -> OperationResult:
        '''Mark as CLOSED. Removing the row is the repository's job.'''
        if not self.is_owned_by(actor):
            return self._fail(ErrorType.AUTHORIZATION_ERROR, "only the submitter may delete")
        if self.status not in self.DELETABLE_STATUSES:
            return self._fail(ErrorType.STATE_ERROR, f"cannot delete in {self.status.name}")
        self.status = DocumentStatus.CLOSED
        self._touch(actor)
        return self._ok()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} status={self.status.name}>"


class ApprovableMixin:
    """approve / reject for documents decided by a manager."""

    def approve(self, actor: User) -> OperationResult:
        if actor is None or not actor.can(Capability.APPROVE_DOCUMENT):
            return self._fail(ErrorType.AUTHORIZATION_ERROR, "only a manager may approve")
        if self.status != DocumentStatus.PENDING_APPROVAL:
            return self._fail(ErrorType.STATE_ERROR, f"cannot approve from {self.status.name}")
        self.status = DocumentStatus.APPROVED
        self.rejection_reason = None
        self._touch(actor)
        return self._ok()

    def reject(self, actor: User, reason: Optional[str]) -> OperationResult:
        if actor is None or not actor.can(Capability.APPROVE_DOCUMENT):
            return self._fail(ErrorType.AUTHORIZATION_ERROR, "only a manager may reject")
        if reason is None or not reason.strip():
            return self._fail(ErrorType.VALIDATION_ERROR, "a rejection reason is required")
        if self.status != DocumentStatus.PENDING_APPROVAL:
            return self._fail(ErrorType.STATE_ERROR, f"cannot reject from {self.status.name}")
        self.status = DocumentStatus.REJECTED
        self.rejection_reason = reason.strip()
        self._touch(actor)
        return self._ok()


class Application(ApprovableMixin, Document):
    """An applicant's application for a flat in a project."""

    booked_flat_type: Mapped[Optional[FlatType]] = mapped_column(
        Enum(FlatType, name="flat_type"), nullable=True
    )

    __mapper_args__ = {"polymorphic_identity": DocumentKind.APPLICATION}

    _SNAPSHOT_FIELDS = Document._SNAPSHOT_FIELDS + ("booked_flat_type",)

    @classmethod
    def create(cls, applicant: User, project_name: str) -> "Application":
        application = cls()
        application._init_draft(applicant)
        application.project_name = project_name
        application.booked_flat_type = None
        return application

    @property
    def is_non_final(self) -> bool:
        return self.status in NON_FINAL_APPLICATION_STATUSES

    def _apply_content(self, new_content: Any) -> OperationResult:
        if not isinstance(new_content, str):
            return self._fail(ErrorType.VALIDATION_ERROR, "project name expected")
        self.project_name = new_content.strip()
        return self._ok()

    def mark_booked(self, officer: User, flat_type: FlatType) -> OperationResult:
        if self.status != DocumentStatus.APPROVED:
            return self._fail(ErrorType.STATE_ERROR, f"cannot book from {self.status.name}")
        self.status = DocumentStatus.BOOKED
        self.booked_flat_type = flat_type
        self._touch(officer)
        return self._ok()

    def mark_withdrawn(self, manager: User) -> OperationResult:
        if not (self.is_non_final or self.status == DocumentStatus.BOOKED):
            return self._fail(ErrorType.STATE_ERROR, f"cannot withdraw from {self.status.name}")
        self.status = DocumentStatus.WITHDRAWN
        self._touch(manager)
        return self._ok()


class Registration(ApprovableMixin, Document):
    """An officer's request to join a project's team."""

    __mapper_args__ = {"polymorphic_identity": DocumentKind.REGISTRATION}

    @classmethod
    def create(cls, officer: User, project_name: str) -> "Registration":
        registration = cls()
        registration._init_draft(officer)
        registration.project_name = project_name
        return registration

    def _apply_content(self, new_content: Any) -> OperationResult:
        if not isinstance(new_content, str):
            return self._fail(ErrorType.VALIDATION_ERROR, "project name expected")
        self.project_name = new_content.strip()
        return self._ok()


class Withdrawal(ApprovableMixin, Document):
    """
    A request to withdraw an application.

    application_id is a weak reference: the withdrawal never owns the
    application, it is only used to look it up when the request is decided.
    """

    application_id: Mapped[Optional[str]] = mapped_column(String(12), nullable=True, index=True)

    __mapper_args__ = {"polymorphic_identity": DocumentKind.WITHDRAWAL}

    @classmethod
    def create(cls, applicant: User, application: Application) -> "Withdrawal":
        if application is None:
            raise ValueError("application to withdraw must not be None")
        withdrawal = cls()
        withdrawal._init_draft(applicant)
        withdrawal.application_id = application.id
        withdrawal.project_name = application.project_name
        return withdrawal

    def _apply_content(self, new_content: Any) -> OperationResult:
        return self._fail(ErrorType.STATE_ERROR, "withdrawal requests cannot be edited")


class Enquiry(Document):
    """A question about a project (or a general one when project_name is None)."""

    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reply_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    replier_nric: Mapped[Optional[str]] = mapped_column(String(9), nullable=True)
    reply_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __mapper_args__ = {"polymorphic_identity": DocumentKind.ENQUIRY}

    EDITABLE_STATUSES = (DocumentStatus.DRAFT, DocumentStatus.SUBMITTED)
    DELETABLE_STATUSES = (DocumentStatus.DRAFT, DocumentStatus.SUBMITTED)
    SUBMITTED_STATUS = DocumentStatus.SUBMITTED

    _SNAPSHOT_FIELDS = Document._SNAPSHOT_FIELDS + (
        "content",
        "reply_content",
        "replier_nric",
        "reply_date",
    )

    @classmethod
    def create(cls, submitter: User, project_name: Optional[str], content: str) -> "Enquiry":
        enquiry = cls()
        enquiry._init_draft(submitter)
        enquiry.project_name = project_name
        enquiry.content = content
        return enquiry

    def _apply_content(self, new_content: Any) -> OperationResult:
        if not isinstance(new_content, str):
            return self._fail(ErrorType.VALIDATION_ERROR, "text expected")
        self.content = new_content.strip()
        return self._ok()

    def reply(self, actor: User, content: Optional[str]) -> OperationResult:
        if actor is None or not actor.can(Capability.REPLY_ENQUIRY):
            return self._fail(ErrorType.AUTHORIZATION_ERROR, "only officers and managers may reply")
        if content is None or not content.strip():
            return self._fail(ErrorType.VALIDATION_ERROR, "reply must not be empty")
        if self.status != DocumentStatus.SUBMITTED:
            return self._fail(ErrorType.STATE_ERROR, f"cannot reply in {self.status.name}")
        now = datetime.now()
        self.status = DocumentStatus.REPLIED
        self.reply_content = content.strip()
        self.replier_nric = actor.nric
        self.reply_date = now
        self._touch(actor, now)
        return self._ok()
