# bto/routes/registration.py
from flask import Blueprint, jsonify

from bto.routes.common import (
    current_user,
    db_session,
    error_response,
    json_body,
    login_required_response,
    parse_bool,
    result_response,
)
from bto.schemas.dto.document_dto import DocumentDTO
from bto.schemas.dto.project_dto import ProjectDTO
from bto.schemas.error_type import ErrorType
from bto.services.registration_service import RegistrationService

registration_bp = Blueprint("registration", __name__, url_prefix="/registrations")


def _dump(document):
    return DocumentDTO.from_orm_model(document).model_dump(mode="json")


@registration_bp.route("", methods=["GET"])
def my_registrations():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        registrations = RegistrationService(db).view_my_registrations(user)
        return jsonify({"ok": True, "data": [_dump(r) for r in registrations]})


@registration_bp.route("/handled-projects", methods=["GET"])
def handled_projects():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        projects = RegistrationService(db).list_handled_projects(user)
        return jsonify({
            "ok": True,
            "data": [ProjectDTO.from_orm_model(p).model_dump(mode="json") for p in projects],
        })


@registration_bp.route("/pending", methods=["GET"])
def pending_registrations():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        if not user.is_manager:
            return error_response(ErrorType.AUTHORIZATION_ERROR, "only managers may list pending registrations")
        registrations = RegistrationService(db).list_pending_registrations(user)
        return jsonify({"ok": True, "data": [_dump(r) for r in registrations]})


@registration_bp.route("", methods=["POST"])
def register():
    """Officer asks to join a project team: {"project_name": "..."}"""
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = RegistrationService(db).register_for_project_team(
            user, (payload.get("project_name") or "").strip()
        )
        return result_response(result, _dump, success_status=201)


@registration_bp.route("/<registration_id>/decision", methods=["POST"])
def decide(registration_id):
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            approve = parse_bool(payload.get("approve"))
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, f"'approve': {e}")
        result = RegistrationService(db).process_officer_registration(
            user,
            registration_id,
            approve,
            payload.get("reason"),
        )
        return result_response(result, _dump)
