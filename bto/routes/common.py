# bto/routes/common.py
from contextlib import contextmanager
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterator, Optional

from flask import current_app, jsonify, request, session
from sqlalchemy.orm import Session

from bto.db.enums import FlatType, MaritalStatus
from bto.models.user import User
from bto.repositories.user_repository import UserRepository
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult

STATUS_BY_ERROR_TYPE = {
    ErrorType.VALIDATION_ERROR: 400,
    ErrorType.AUTHORIZATION_ERROR: 403,
    ErrorType.STATE_ERROR: 409,
    ErrorType.RESOURCE_EXHAUSTED: 409,
    ErrorType.NOT_FOUND: 404,
    ErrorType.DATABASE_ERROR: 500,
    ErrorType.SYSTEM_ERROR: 500,
}


@contextmanager
def db_session() -> Iterator[Session]:
    '''One SQLAlchemy session per request, always closed.'''
    db = current_app.extensions["bto.session_factory"]()
    try:
        yield db
    finally:
        db.close()


def current_user(db: Session) -> Optional[User]:
    nric = session.get("user_nric")
    if not nric:
        return None
    return UserRepository(db).find_by_nric(nric)


def error_response(error_type: ErrorType, message: str):
    body = {"ok": False, "error_type": error_type.value, "error_message": message}
    return jsonify(body), STATUS_BY_ERROR_TYPE[error_type]


def login_required_response():
    return error_response(ErrorType.AUTHORIZATION_ERROR, "please log in first")


def result_response(result: OperationResult, serializer: Optional[Callable] = None, success_status: int = 200):
    '''Translate an OperationResult into a JSON body and HTTP status.'''
    if not result.ok:
        return error_response(result.error_type, result.error_message)
    body = result.model_dump(mode="json")
    if serializer is not None and result.entity is not None:
        body["data"] = serializer(result.entity)
    return jsonify(body), success_status


def json_body() -> Dict:
    return request.get_json(silent=True) or {}


# ------------------------------------------------------------------
# request parsing
# ------------------------------------------------------------------

def parse_flat_type(raw: Optional[str]) -> Optional[FlatType]:
    '''Accept either the value ("2-Room") or the name ("TWO_ROOM").'''
    if raw is None or str(raw).strip() == "":
        return None
    raw = str(raw).strip()
    for flat_type in FlatType:
        if raw.lower() in (flat_type.value.lower(), flat_type.name.lower()):
            return flat_type
    raise ValueError(f"unknown flat type '{raw}'")


def parse_marital_status(raw: Optional[str]) -> Optional[MaritalStatus]:
    if raw is None or str(raw).strip() == "":
        return None
    raw = str(raw).strip().lower()
    for status in MaritalStatus:
        if raw in (status.value, status.name.lower()):
            return status
    raise ValueError(f"unknown marital status '{raw}'")


def parse_date(raw: Optional[str]) -> Optional[date]:
    if raw is None or str(raw).strip() == "":
        return None
    return date.fromisoformat(str(raw).strip())


def parse_flat_mapping(raw: Optional[Dict], convert: Callable) -> Dict[FlatType, object]:
    '''{"2-Room": 10, "3-Room": 5} -> {FlatType.TWO_ROOM: 10, ...}'''
    if not raw:
        return {}
    parsed = {}
    for key, value in raw.items():
        try:
            parsed[parse_flat_type(key)] = convert(value)
        except (TypeError, InvalidOperation) as e:
            raise ValueError(f"invalid value for {key}: {value}") from e
    return parsed


def to_decimal(value) -> Decimal:
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise InvalidOperation(f"not a finite amount: {value}")
    return amount


def parse_bool(raw, default: Optional[bool] = None) -> bool:
    '''JSON booleans as-is; "true"/"false", "1"/"0", "yes"/"no" as strings. Anything else is refused.'''
    if raw is None:
        if default is None:
            raise ValueError("a boolean value is required")
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    raise ValueError(f"not a boolean: {raw!r}")
