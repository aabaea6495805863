# bto/routes/enquiry.py
from flask import Blueprint, jsonify, request

from bto.routes.common import (
    current_user,
    db_session,
    error_response,
    json_body,
    login_required_response,
    result_response,
)
from bto.schemas.dto.document_dto import DocumentDTO
from bto.schemas.error_type import ErrorType
from bto.services.enquiry_service import EnquiryService

enquiry_bp = Blueprint("enquiry", __name__, url_prefix="/enquiries")


def _dump(document):
    return DocumentDTO.from_orm_model(document).model_dump(mode="json")


@enquiry_bp.route("", methods=["GET"])
def list_enquiries():
    """
    ?scope=mine (default) | handled (officer) | managed | all (manager)
    """
    scope = request.args.get("scope", "mine")
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        service = EnquiryService(db)
        if scope == "mine":
            enquiries = service.view_my_enquiries(user)
        elif scope == "handled" and user.is_officer:
            enquiries = service.list_handled_enquiries(user)
        elif scope == "managed" and user.is_manager:
            enquiries = service.list_managed_enquiries(user)
        elif scope == "all" and user.is_manager:
            enquiries = service.list_all_enquiries(user)
        else:
            return error_response(ErrorType.AUTHORIZATION_ERROR, f"scope '{scope}' not available")
        return jsonify({"ok": True, "data": [_dump(e) for e in enquiries]})


@enquiry_bp.route("", methods=["POST"])
def create_enquiry():
    """{"project_name": "..." or null, "content": "..."}"""
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = EnquiryService(db).create_enquiry(user, payload.get("project_name"), payload.get("content"))
        return result_response(result, _dump, success_status=201)


@enquiry_bp.route("/<enquiry_id>", methods=["PATCH"])
def edit_enquiry(enquiry_id):
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = EnquiryService(db).edit_enquiry(user, enquiry_id, payload.get("content"))
        return result_response(result, _dump)


@enquiry_bp.route("/<enquiry_id>", methods=["DELETE"])
def delete_enquiry(enquiry_id):
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        return result_response(EnquiryService(db).delete_enquiry(user, enquiry_id))


@enquiry_bp.route("/<enquiry_id>/reply", methods=["POST"])
def reply(enquiry_id):
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = EnquiryService(db).reply_to_enquiry(user, enquiry_id, payload.get("content"))
        return result_response(result, _dump)
