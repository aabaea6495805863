# bto/routes/project.py
from flask import Blueprint, jsonify, request

from bto.routes.common import (
    current_user,
    db_session,
    error_response,
    json_body,
    login_required_response,
    parse_bool,
    parse_date,
    parse_flat_mapping,
    parse_flat_type,
    result_response,
    to_decimal,
)
from bto.schemas.dto.project_dto import ProjectDTO
from bto.schemas.error_type import ErrorType
from bto.services.project_service import ProjectService

project_bp = Blueprint("project", __name__, url_prefix="/projects")


def _dump(project):
    return ProjectDTO.from_orm_model(project).model_dump(mode="json")


@project_bp.route("", methods=["GET"])
def list_projects():
    """
    Projects visible to the logged-in user.
    Filters: ?neighbourhood=&flat_type=&manager=&open_from=&close_to= ; ?mine=1 for a manager's own.
    """
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            flat_type = parse_flat_type(request.args.get("flat_type"))
            open_from = parse_date(request.args.get("open_from"))
            close_to = parse_date(request.args.get("close_to"))
            mine = parse_bool(request.args.get("mine"), default=False)
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, str(e))
        if open_from and close_to and open_from > close_to:
            return error_response(ErrorType.VALIDATION_ERROR, "open_from must not be after close_to")

        filters = dict(
            neighbourhood=request.args.get("neighbourhood"),
            flat_type=flat_type,
            open_from=open_from,
            close_to=close_to,
        )
        service = ProjectService(db)
        if mine and user.is_manager:
            projects = service.list_projects_by_manager(user, **filters)
        else:
            projects = service.list_projects_for(user, manager_nric=request.args.get("manager"), **filters)
        return jsonify({"ok": True, "data": [_dump(p) for p in projects]})


@project_bp.route("/<name>", methods=["GET"])
def detail(name):
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        project = next((p for p in ProjectService(db).list_projects_for(user) if p.name == name), None)
        if project is None:
            return error_response(ErrorType.NOT_FOUND, f"project '{name}' not found")
        return jsonify({"ok": True, "data": _dump(project)})


@project_bp.route("", methods=["POST"])
def create_project():
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            unit_counts = parse_flat_mapping(payload.get("unit_counts"), int)
            unit_prices = parse_flat_mapping(payload.get("unit_prices"), to_decimal)
            open_date = parse_date(payload.get("open_date"))
            close_date = parse_date(payload.get("close_date"))
            visible = parse_bool(payload.get("visible"), default=True)
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, str(e))

        result = ProjectService(db).create_project(
            user,
            name=payload.get("name"),
            neighbourhood=payload.get("neighbourhood"),
            unit_counts=unit_counts,
            unit_prices=unit_prices,
            open_date=open_date,
            close_date=close_date,
            visible=visible,
        )
        return result_response(result, _dump, success_status=201)


@project_bp.route("/<name>", methods=["PATCH"])
def edit_project(name):
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            unit_counts = parse_flat_mapping(payload.get("unit_counts"), int)
            unit_prices = parse_flat_mapping(payload.get("unit_prices"), to_decimal)
            open_date = parse_date(payload.get("open_date"))
            close_date = parse_date(payload.get("close_date"))
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, str(e))

        result = ProjectService(db).edit_project(
            user,
            name,
            neighbourhood=payload.get("neighbourhood"),
            unit_counts=unit_counts,
            unit_prices=unit_prices,
            open_date=open_date,
            close_date=close_date,
        )
        return result_response(result, _dump)


@project_bp.route("/<name>/visibility", methods=["POST"])
def toggle_visibility(name):
    payload = json_body()
    try:
        visible = parse_bool(payload.get("visible"))
    except ValueError as e:
        return error_response(ErrorType.VALIDATION_ERROR, f"'visible': {e}")
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = ProjectService(db).toggle_visibility(user, name, visible)
        return result_response(result, _dump)


@project_bp.route("/<name>", methods=["DELETE"])
def delete_project(name):
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        return result_response(ProjectService(db).delete_project(user, name))
