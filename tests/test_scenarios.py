# tests/test_scenarios.py
from datetime import date

from bto.db.enums import DocumentStatus, FlatType
from bto.repositories.document_repositories import ApplicationRepository
from bto.schemas.error_type import ErrorType
from bto.services.application_service import ApplicationService
from bto.services.booking_service import BookingService
from bto.services.project_service import ProjectService
from bto.services.registration_service import RegistrationService
from bto.services.withdrawal_service import WithdrawalService


def test_inventory_never_goes_negative(make_project):
    project = make_project("Yishun-1", units={FlatType.TWO_ROOM: 2})
    assert project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert project.remaining_units(FlatType.TWO_ROOM) == 0
    assert project.decrement_remaining_unit(FlatType.TWO_ROOM) is False
    assert project.remaining_units(FlatType.TWO_ROOM) == 0


def test_single_applicant_cannot_apply_to_three_room_only_project(db, single_applicant, make_project):
    project = make_project(units={FlatType.THREE_ROOM: 5})
    result = ApplicationService(db).apply_for_project(single_applicant, project.name)
    assert result.error_type == ErrorType.VALIDATION_ERROR
    assert "not eligible" in result.error_message
    assert ApplicationRepository(db).count() == 0


def test_registered_officer_cannot_apply_for_own_project(db, manager, officer, project):
    registrations = RegistrationService(db)
    registered = registrations.register_for_project_team(officer, project.name)
    assert registrations.process_officer_registration(manager, registered.entity.id, True).ok

    result = ApplicationService(db).apply_for_project(officer, project.name)
    assert result.error_type == ErrorType.AUTHORIZATION_ERROR
    assert "handling this project" in result.error_message


def test_book_then_withdraw_restores_inventory(
    db, manager, other_manager, officer, married_applicant, assigned_project, make_project
):
    applications = ApplicationService(db)
    applied = applications.apply_for_project(married_applicant, assigned_project.name)
    application_id = applied.entity.id
    assert application_id.startswith("APP-")

    approved = applications.process_bto_application(manager, application_id, True)
    assert approved.entity.status == DocumentStatus.APPROVED

    booked = BookingService(db).process_flat_booking(officer, application_id, FlatType.TWO_ROOM)
    assert booked.ok
    application = booked.entity
    assert application.status == DocumentStatus.BOOKED
    assert application.booked_flat_type == FlatType.TWO_ROOM
    assert assigned_project.remaining_units(FlatType.TWO_ROOM) == 1

    elsewhere = make_project("Tengah-2", owner=other_manager)
    second = applications.apply_for_project(married_applicant, elsewhere.name)
    assert second.error_type == ErrorType.RESOURCE_EXHAUSTED
    assert "already has a booked flat" in second.error_message

    withdrawals = WithdrawalService(db)
    requested = withdrawals.request_withdrawal(married_applicant, application_id)
    assert withdrawals.process_withdrawal_request(manager, requested.entity.id, True).ok
    assert application.status == DocumentStatus.WITHDRAWN
    assert assigned_project.remaining_units(FlatType.TWO_ROOM) == 2


def test_manager_cannot_run_overlapping_projects(db, manager):
    service = ProjectService(db)
    first = service.create_project(
        manager,
        name="Yishun-1",
        neighbourhood="Yishun",
        unit_counts={FlatType.TWO_ROOM: 2},
        open_date=date(2024, 1, 1),
        close_date=date(2024, 3, 1),
    )
    assert first.ok

    second = service.create_project(
        manager,
        name="Boon Lay",
        neighbourhood="Jurong West",
        unit_counts={FlatType.TWO_ROOM: 2},
        open_date=date(2024, 2, 1),
        close_date=date(2024, 4, 1),
    )
    assert second.error_type == ErrorType.RESOURCE_EXHAUSTED
    assert "busy during this period" in second.error_message
