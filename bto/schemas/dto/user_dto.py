from typing import List

from bto.models.user import User
from bto.schemas.dto.base_dto import BaseDTO


class UserDTO(BaseDTO):
    nric: str
    name: str
    age: int
    marital_status: str
    role: str
    capabilities: List[str] = []

    @classmethod
    def from_orm_model(cls, user: User) -> "UserDTO":
        return cls(
            nric=user.nric,
            name=user.name,
            age=user.age,
            marital_status=user.marital_status.value,
            role=user.role.value,
            capabilities=sorted(capability.value for capability in user.capabilities),
        )
