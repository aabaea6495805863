from datetime import datetime
from typing import Optional

from bto.models.document import Application, Document, Enquiry, Withdrawal
from bto.schemas.dto.base_dto import BaseDTO


class DocumentDTO(BaseDTO):
    id: str
    kind: str
    status: str
    submitter_nric: str
    submitter_name: Optional[str]
    project_name: Optional[str]
    submission_date: Optional[datetime]
    last_modified_date: datetime
    last_modified_by: str
    rejection_reason: Optional[str] = None

    # kind specific, left empty where they do not apply
    booked_flat_type: Optional[str] = None
    application_id: Optional[str] = None
    content: Optional[str] = None
    reply_content: Optional[str] = None
    replier_nric: Optional[str] = None
    reply_date: Optional[datetime] = None

    @classmethod
    def from_orm_model(cls, document: Document) -> "DocumentDTO":
        dto = cls(
            id=document.id,
            kind=document.kind.value,
            status=document.status.value,
            submitter_nric=document.submitter_nric,
            submitter_name=document.submitter.name if document.submitter else None,
            project_name=document.project_name,
            submission_date=document.submission_date,
            last_modified_date=document.last_modified_date,
            last_modified_by=document.last_modified_by,
            rejection_reason=document.rejection_reason,
        )
        if isinstance(document, Application) and document.booked_flat_type is not None:
            dto.booked_flat_type = document.booked_flat_type.value
        elif isinstance(document, Withdrawal):
            dto.application_id = document.application_id
        elif isinstance(document, Enquiry):
            dto.content = document.content
            dto.reply_content = document.reply_content
            dto.replier_nric = document.replier_nric
            dto.reply_date = document.reply_date
        return dto
