# bto/models/user.py
from sqlalchemy import String, Integer, Enum
from sqlalchemy.orm import Mapped, mapped_column

from bto.db.base import Base
from bto.db.enums import ActorRole, Capability, MaritalStatus

ROLE_CAPABILITIES = {
    ActorRole.APPLICANT: frozenset({
        Capability.APPLY,
        Capability.ENQUIRE,
    }),
    ActorRole.OFFICER: frozenset({
        Capability.APPLY,
        Capability.ENQUIRE,
        Capability.REGISTER_FOR_PROJECT,
        Capability.BOOK_FLAT,
        Capability.REPLY_ENQUIRY,
    }),
    ActorRole.MANAGER: frozenset({
        Capability.MANAGE_PROJECT,
        Capability.APPROVE_DOCUMENT,
        Capability.REPLY_ENQUIRY,
        Capability.VIEW_REPORT,
    }),
}


class User(Base):
    """
    An actor of the system: applicant, HDB officer or HDB manager.

    The role column is the variant tag; every variant shares the same
    profile fields. What an actor may do is decided by its capability set,
    never by subclassing.
    """

    __tablename__ = "users"

    # =========
    # 🔒 Identity
    # =========
    nric: Mapped[str] = mapped_column(
        String(9),
        primary_key=True,
        comment="NRIC, validated at the authentication boundary",
    )
    role: Mapped[ActorRole] = mapped_column(
        Enum(ActorRole, name="actor_role"),
        nullable=False,
        comment="Actor variant",
    )

    # =========
    # 👤 Profile
    # =========
    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="Display name")
    age: Mapped[int] = mapped_column(Integer, nullable=False, comment="Age in years")
    marital_status: Mapped[MaritalStatus] = mapped_column(
        Enum(MaritalStatus, name="marital_status"),
        nullable=False,
        comment="Marital status",
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, comment="bcrypt hash")

    @property
    def capabilities(self) -> frozenset:
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def is_applicant(self) -> bool:
        return self.role == ActorRole.APPLICANT

    @property
    def is_officer(self) -> bool:
        return self.role == ActorRole.OFFICER

    @property
    def is_manager(self) -> bool:
        return self.role == ActorRole.MANAGER

    def __repr__(self) -> str:
        return f"<User nric={self.nric} role={self.role.value}>"
