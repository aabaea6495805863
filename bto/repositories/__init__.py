from bto.repositories.base_repository import BaseRepository
from bto.repositories.user_repository import UserRepository
from bto.repositories.project_repository import ProjectRepository
from bto.repositories.document_repositories import (
    ApplicationRepository,
    DocumentRepository,
    EnquiryRepository,
    RegistrationRepository,
    WithdrawalRepository,
)

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ProjectRepository",
    "ApplicationRepository",
    "RegistrationRepository",
    "WithdrawalRepository",
    "EnquiryRepository",
    "DocumentRepository",
]
