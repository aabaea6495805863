# bto/routes/withdrawal.py
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
from bto.schemas.error_type import ErrorType
from bto.services.withdrawal_service import WithdrawalService

withdrawal_bp = Blueprint("withdrawal", __name__, url_prefix="/withdrawals")


def _dump(document):
    return DocumentDTO.from_orm_model(document).model_dump(mode="json")


@withdrawal_bp.route("", methods=["GET"])
def my_withdrawals():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        withdrawals = WithdrawalService(db).view_my_withdrawals(user)
        return jsonify({"ok": True, "data": [_dump(w) for w in withdrawals]})


@withdrawal_bp.route("/pending", methods=["GET"])
def pending_withdrawals():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        if not user.is_manager:
            return error_response(ErrorType.AUTHORIZATION_ERROR, "only managers may list pending withdrawals")
        withdrawals = WithdrawalService(db).list_pending_withdrawals(user)
        return jsonify({"ok": True, "data": [_dump(w) for w in withdrawals]})


@withdrawal_bp.route("", methods=["POST"])
def request_withdrawal():
    """Withdraw one of my applications: {"application_id": "APP-..."}"""
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = WithdrawalService(db).request_withdrawal(user, (payload.get("application_id") or "").strip())
        return result_response(result, _dump, success_status=201)


@withdrawal_bp.route("/<withdrawal_id>/decision", methods=["POST"])
def decide(withdrawal_id):
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            approve = parse_bool(payload.get("approve"))
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, f"'approve': {e}")
        result = WithdrawalService(db).process_withdrawal_request(
            user,
            withdrawal_id,
            approve,
            payload.get("reason"),
        )
        return result_response(result, _dump)
