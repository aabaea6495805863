import enum


# Actor related enums
class ActorRole(enum.Enum):
    APPLICANT = "applicant"
    OFFICER = "officer"
    MANAGER = "manager"


class MaritalStatus(enum.Enum):
    SINGLE = "single"
    MARRIED = "married"


class Capability(enum.Enum):
    APPLY = "apply"                      # submit / withdraw own applications
    ENQUIRE = "enquire"                  # create / edit / delete own enquiries
    REGISTER_FOR_PROJECT = "register_for_project"
    BOOK_FLAT = "book_flat"
    REPLY_ENQUIRY = "reply_enquiry"
    MANAGE_PROJECT = "manage_project"    # create / edit / delete / visibility
    APPROVE_DOCUMENT = "approve_document"
    VIEW_REPORT = "view_report"


# Project related enums
class FlatType(enum.Enum):
    TWO_ROOM = "2-Room"
    THREE_ROOM = "3-Room"


# Document related enums
class DocumentKind(enum.Enum):
    APPLICATION = "application"
    REGISTRATION = "registration"
    WITHDRAWAL = "withdrawal"
    ENQUIRY = "enquiry"


class DocumentStatus(enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    REPLIED = "replied"
    CLOSED = "closed"
    BOOKED = "booked"


# Application statuses that still count as the applicant's live application
NON_FINAL_APPLICATION_STATUSES = (
    DocumentStatus.DRAFT,
    DocumentStatus.SUBMITTED,
    DocumentStatus.PENDING_APPROVAL,
    DocumentStatus.APPROVED,
)

TERMINAL_STATUSES = (
    DocumentStatus.REJECTED,
    DocumentStatus.WITHDRAWN,
    DocumentStatus.CLOSED,
    DocumentStatus.REPLIED,
)
