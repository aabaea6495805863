# bto/routes/application.py
import io

import pandas as pd
from flask import Blueprint, jsonify, request, send_file

from bto.routes.common import (
    current_user,
    db_session,
    error_response,
    json_body,
    login_required_response,
    parse_bool,
    parse_flat_type,
    parse_marital_status,
    result_response,
)
from bto.schemas.dto.document_dto import DocumentDTO
from bto.schemas.error_type import ErrorType
from bto.services.application_service import ApplicationService
from bto.services.booking_service import BookingService
from bto.services.report_service import ReportService, to_dataframe

application_bp = Blueprint("application", __name__, url_prefix="/applications")


def _dump(document):
    return DocumentDTO.from_orm_model(document).model_dump(mode="json")


@application_bp.route("", methods=["GET"])
def my_applications():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        applications = ApplicationService(db).view_my_applications(user)
        return jsonify({"ok": True, "data": [_dump(a) for a in applications]})


@application_bp.route("/pending", methods=["GET"])
def pending_applications():
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        if not user.is_manager:
            return error_response(ErrorType.AUTHORIZATION_ERROR, "only managers may list pending applications")
        applications = ApplicationService(db).list_pending_applications(user)
        return jsonify({"ok": True, "data": [_dump(a) for a in applications]})


@application_bp.route("", methods=["POST"])
def apply():
    """Apply for a project: {"project_name": "..."}"""
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        result = ApplicationService(db).apply_for_project(user, (payload.get("project_name") or "").strip())
        return result_response(result, _dump, success_status=201)


@application_bp.route("/<application_id>/decision", methods=["POST"])
def decide(application_id):
    """Manager decision: {"approve": true} or {"approve": false, "reason": "..."}"""
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            approve = parse_bool(payload.get("approve"))
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, f"'approve': {e}")
        result = ApplicationService(db).process_bto_application(
            user,
            application_id,
            approve,
            payload.get("reason"),
        )
        return result_response(result, _dump)


@application_bp.route("/<application_id>/booking", methods=["POST"])
def book(application_id):
    """Officer books a flat: {"flat_type": "2-Room"}"""
    payload = json_body()
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            flat_type = parse_flat_type(payload.get("flat_type"))
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, str(e))
        result = BookingService(db).process_flat_booking(user, application_id, flat_type)
        return result_response(result, _dump)


@application_bp.route("/<application_id>/receipt", methods=["GET"])
def receipt(application_id):
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        return result_response(BookingService(db).generate_booking_receipt(user, application_id))


@application_bp.route("/report", methods=["GET"])
def booking_report():
    """Manager booking report; ?project_name=&marital_status=&flat_type= filters."""
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            filters = _report_filters()
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, str(e))
        return result_response(ReportService(db).generate_booking_report(user, **filters))


@application_bp.route("/report/excel", methods=["GET"])
def download_report_excel():
    """Same report as /report, as an .xlsx file"""
    with db_session() as db:
        user = current_user(db)
        if user is None:
            return login_required_response()
        try:
            filters = _report_filters()
        except ValueError as e:
            return error_response(ErrorType.VALIDATION_ERROR, str(e))
        result = ReportService(db).generate_booking_report(user, **filters)
        if not result.ok:
            return result_response(result)

        df = to_dataframe(result.entity)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Bookings")
        output.seek(0)

        return send_file(
            output,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            as_attachment=True,
            download_name=f"booking_report_{filters['project_name'] or 'all'}.xlsx",
        )


def _report_filters():
    return {
        "project_name": request.args.get("project_name"),
        "marital_status": parse_marital_status(request.args.get("marital_status")),
        "flat_type": parse_flat_type(request.args.get("flat_type")),
    }
