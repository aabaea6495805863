# bto/schemas/operation_result.py
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from bto.schemas.error_type import ErrorType


class OperationResult(BaseModel):
    '''
    Outcome of a state-changing operation.

    ok: bool - whether the operation did what was asked
    error_type: Optional[ErrorType] - failure kind callers can branch on
    error_message: Optional[str] - human readable reason
    data: Optional[Dict[str, Any]] - JSON-safe payload (usually a DTO dump)
    entity: Any - the ORM object affected, never serialised
    side_effect: bool - whether persistent state changed
    '''
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None

    data: Optional[Dict[str, Any]] = None
    entity: Any = Field(default=None, exclude=True)

    side_effect: bool = False

    @classmethod
    def success(
        cls,
        entity: Any = None,
        *,
        data: Optional[Dict[str, Any]] = None,
        side_effect: bool = True,
    ) -> "OperationResult":
        return cls(ok=True, entity=entity, data=data, side_effect=side_effect)

    @classmethod
    def failure(
        cls,
        error_type: ErrorType,
        message: str,
        *,
        entity: Any = None,
        side_effect: bool = False,
    ) -> "OperationResult":
        return cls(
            ok=False,
            error_type=error_type,
            error_message=message,
            entity=entity,
            side_effect=side_effect,
        )

    def __bool__(self) -> bool:
        return self.ok
