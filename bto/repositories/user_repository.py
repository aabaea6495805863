from typing import List, Optional

from sqlalchemy import select

from bto.db.enums import ActorRole
from bto.models.user import User
from bto.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def find_by_nric(self, nric: str) -> Optional[User]:
        if not nric:
            return None
        return self.db.get(User, nric.strip().upper())

    def find_by_role(self, role: ActorRole) -> List[User]:
        return list(self.db.scalars(
            select(User).where(User.role == role).order_by(User.name)
        ))
