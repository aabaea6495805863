# bto/routes/auth.py
from flask import Blueprint, jsonify, session

from bto.logger import get_logger
from bto.routes.common import (
    current_user,
    db_session,
    error_response,
    json_body,
    login_required_response,
)
from bto.schemas.dto.user_dto import UserDTO
from bto.schemas.error_type import ErrorType
from bto.services.user_service import UserService

logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.route("/login", methods=["POST"])
def login():
    """Log in with NRIC + password."""
    payload = json_body()
    nric = (payload.get("nric") or "").strip().upper()
    password = payload.get("password") or ""
    if not nric or not password:
        return error_response(ErrorType.VALIDATION_ERROR, "NRIC and password are required")

    with db_session() as db:
        try:
            user = UserService(db).authenticate(nric=nric, password=password)
        except ValueError as e:
            logger.warning(f"login failed for {nric}: {e}")
            return error_response(ErrorType.AUTHORIZATION_ERROR, str(e))

        session["user_nric"] = user.nric
        session["user_role"] = user.role.value
        logger.info(f"{user.role.value} {user.nric} logged in")
        return jsonify({"ok": True, "data": UserDTO.from_orm_model(user).model_dump(mode="json")})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    nric = session.get("user_nric")
    session.clear()
    if nric:
        logger.info(f"{nric} logged out")
    return jsonify({"ok": True})


@auth_bp.route("/me", methods=["GET"])
def me():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        return jsonify({"ok": True, "data": UserDTO.from_orm_model(user).model_dump(mode="json")})


@auth_bp.route("/password", methods=["POST"])
def change_password():
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            UserService(db).change_password(
                nric=user.nric,
                old_password=payload.get("old_password") or "",
                new_password=payload.get("new_password") or "",
            )
            db.commit()
        except ValueError as e:
            db.rollback()
            return error_response(ErrorType.VALIDATION_ERROR, str(e))

        # a changed password ends the session
        session.clear()
        logger.info(f"{user.nric} changed password")
        return jsonify({"ok": True})
