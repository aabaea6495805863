# bto/services/user_service.py
import re
from typing import List, Optional

import bcrypt
from sqlalchemy.orm import Session

from bto.db.enums import ActorRole, MaritalStatus
from bto.models.user import User
from bto.repositories.user_repository import UserRepository

NRIC_PATTERN = re.compile(r"^[ST]\d{7}[A-Z]$")


def is_valid_nric(nric: Optional[str]) -> bool:
    return bool(nric) and NRIC_PATTERN.match(nric.strip().upper()) is not None


class UserService:
    """
    Accounts at the authentication boundary.
    Provides:
    - registration
    - authentication
    - password change
    - user lookup

    NRIC format is checked here; everything behind this service trusts it.
    Failures raise ValueError for the caller to translate.
    """

    def __init__(self, db: Session):
        self.db = db
        self.user_repository = UserRepository(db)

    # ======================================================
    # 🔐 Internal helpers
    # ======================================================

    def _hash_password(self, password: str) -> str:
        '''Hash a password using bcrypt'''
        return bcrypt.hashpw(
            password.encode("utf-8"),
            bcrypt.gensalt(),
        ).decode("utf-8")

    def _verify_password(self, password: str, password_hash: str) -> bool:
        '''verify a password against its hash'''
        return bcrypt.checkpw(
            password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )

    # ======================================================
    # 👤 User CRUD
    # ======================================================

    def create_user(
        self,
        *,
        nric: str,
        name: str,
        age: int,
        marital_status: MaritalStatus,
        role: ActorRole,
        password: str,
    ) -> User:
        """
        Register a new user.

        :param nric: NRIC, must match ^[ST]\\d{7}[A-Z]$
        :type nric: str
        :param name: Display name
        :type name: str
        :param age: Age in years
        :type age: int
        :param marital_status: SINGLE or MARRIED
        :type marital_status: MaritalStatus
        :param role: applicant, officer or manager
        :type role: ActorRole
        :param password: Plaintext password
        :type password: str
        """

        # 1️⃣ NRIC format and uniqueness
        if not is_valid_nric(nric):
            raise ValueError(f"Invalid NRIC '{nric}'")
        nric = nric.strip().upper()
        if self.user_repository.find_by_nric(nric):
            raise ValueError(f"User '{nric}' already exists")
        if age is None or age < 0:
            raise ValueError("Age must not be negative")
        if not password:
            raise ValueError("Password must not be empty")

        # 2️⃣ create
        user = User(
            nric=nric,
            name=name.strip(),
            age=int(age),
            marital_status=marital_status,
            role=role,
            password_hash=self._hash_password(password),
        )
        return self.user_repository.save(user)

    def authenticate(self, *, nric: str, password: str) -> User:
        """
        Authenticate user by NRIC + password.
        Returns User if successful.

        :param nric: Login NRIC
        :type nric: str
        :param password: Plaintext password
        :type password: str
        """
        if not is_valid_nric(nric):
            raise ValueError("Invalid NRIC format")

        user = self.user_repository.find_by_nric(nric)
        if not user or not self._verify_password(password or "", user.password_hash):
            raise ValueError("Invalid NRIC or password")
        return user

    def get_user_by_nric(self, nric: str) -> Optional[User]:
        return self.user_repository.find_by_nric(nric)

    def list_users(self, role: Optional[ActorRole] = None) -> List[User]:
        if role is None:
            return self.user_repository.find_all()
        return self.user_repository.find_by_role(role)

    # ======================================================
    # 🔁 Account maintenance
    # ======================================================

    def change_password(self, *, nric: str, old_password: str, new_password: str) -> None:
        """
        Change password after re-checking the current one.

        :param nric: NRIC of the user
        :type nric: str
        :param old_password: current plaintext password
        :type old_password: str
        :param new_password: New plaintext password
        :type new_password: str
        """
        user = self.authenticate(nric=nric, password=old_password)
        if not new_password:
            raise ValueError("New password must not be empty")
        if new_password == old_password:
            raise ValueError("New password must differ from the current one")

        user.password_hash = self._hash_password(new_password)
        self.db.flush()
