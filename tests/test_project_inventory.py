# tests/test_project_inventory.py
from datetime import date
from decimal import Decimal

import pytest

from bto.db.enums import ActorRole, FlatType
from bto.models.project import MAX_OFFICER_SLOTS
from bto.repositories.project_repository import ProjectRepository
from bto.schemas.error_type import ErrorType
from bto.services.project_service import ProjectService


def test_create_sets_remaining_to_initial(project):
    assert project.initial_units(FlatType.TWO_ROOM) == 2
    assert project.remaining_units(FlatType.TWO_ROOM) == 2
    assert project.remaining_units(FlatType.THREE_ROOM) == 3
    assert project.unit_price(FlatType.TWO_ROOM) == Decimal("350000")
    assert project.offered_flat_types == {FlatType.TWO_ROOM, FlatType.THREE_ROOM}


def test_decrement_stops_at_zero(project):
    assert project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert not project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert project.remaining_units(FlatType.TWO_ROOM) == 0


def test_increment_stops_at_initial(project):
    assert not project.increment_remaining_unit(FlatType.TWO_ROOM)
    assert project.remaining_units(FlatType.TWO_ROOM) == 2

    project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert project.increment_remaining_unit(FlatType.TWO_ROOM)
    assert project.remaining_units(FlatType.TWO_ROOM) == 2


def test_unknown_flat_type_is_not_stock(make_project):
    project = make_project(units={FlatType.THREE_ROOM: 1})
    assert not project.decrement_remaining_unit(FlatType.TWO_ROOM)
    assert not project.increment_remaining_unit(FlatType.TWO_ROOM)
    assert project.offered_flat_types == {FlatType.THREE_ROOM}


def test_officer_slots_bounded_and_unique(db, project, make_user):
    officers = [make_user(f"T00000{i:02d}Z", ActorRole.OFFICER) for i in range(MAX_OFFICER_SLOTS + 1)]
    for officer in officers[:MAX_OFFICER_SLOTS]:
        assert project.add_officer(officer)
    assert not project.add_officer(officers[0])
    assert not project.add_officer(officers[-1])
    assert project.available_officer_slots == 0
    assert len(project.assigned_officer_nrics) == MAX_OFFICER_SLOTS


def test_remove_officer_compacts_slots(project, make_user):
    a = make_user("T1000001A", ActorRole.OFFICER)
    b = make_user("T1000002B", ActorRole.OFFICER)
    c = make_user("T1000003C", ActorRole.OFFICER)
    for officer in (a, b, c):
        project.add_officer(officer)

    assert project.remove_officer(b)
    assert not project.remove_officer(b)
    assert project.assigned_officer_nrics == [a.nric, c.nric]
    assert [slot.slot for slot in project.officer_slots] == [0, 1]


def test_create_rejects_bad_input(db, manager, project):
    service = ProjectService(db)
    base = dict(
        neighbourhood="Tampines",
        unit_counts={FlatType.TWO_ROOM: 1},
        open_date=date(2025, 1, 1),
        close_date=date(2025, 2, 1),
    )

    negative = service.create_project(manager, name="Neg", **{**base, "unit_counts": {FlatType.TWO_ROOM: -1}})
    assert negative.error_type == ErrorType.VALIDATION_ERROR

    price = service.create_project(manager, name="Price", unit_prices={FlatType.TWO_ROOM: Decimal("-1")}, **base)
    assert price.error_type == ErrorType.VALIDATION_ERROR

    dates = service.create_project(
        manager, name="Dates", **{**base, "open_date": date(2025, 3, 1), "close_date": date(2025, 2, 1)}
    )
    assert dates.error_type == ErrorType.VALIDATION_ERROR

    duplicate = service.create_project(manager, name=project.name, **base)
    assert duplicate.error_type == ErrorType.VALIDATION_ERROR
    assert "already exists" in duplicate.error_message


@pytest.mark.parametrize("price", [Decimal("NaN"), Decimal("Infinity"), Decimal("-Infinity")])
def test_non_finite_price_is_a_validation_error(db, manager, project, price):
    service = ProjectService(db)
    created = service.create_project(
        manager,
        name="Odd",
        neighbourhood="Tampines",
        unit_counts={FlatType.TWO_ROOM: 1},
        unit_prices={FlatType.TWO_ROOM: price},
        open_date=date(2025, 1, 1),
        close_date=date(2025, 2, 1),
    )
    assert created.error_type == ErrorType.VALIDATION_ERROR
    assert ProjectRepository(db).find_by_name("Odd") is None

    edited = service.edit_project(manager, project.name, unit_prices={FlatType.TWO_ROOM: price})
    assert edited.error_type == ErrorType.VALIDATION_ERROR
    assert project.unit_price(FlatType.TWO_ROOM) == Decimal("350000")


def test_only_managers_create(db, married_applicant):
    result = ProjectService(db).create_project(
        married_applicant,
        name="Nope",
        neighbourhood="Bedok",
        unit_counts={FlatType.TWO_ROOM: 1},
        open_date=date(2025, 1, 1),
        close_date=date(2025, 2, 1),
    )
    assert result.error_type == ErrorType.AUTHORIZATION_ERROR


def test_edit_units_keeps_booked_units(db, manager, project):
    project.decrement_remaining_unit(FlatType.THREE_ROOM)
    db.commit()
    service = ProjectService(db)

    too_low = service.edit_project(manager, project.name, unit_counts={FlatType.THREE_ROOM: 0})
    assert too_low.error_type == ErrorType.VALIDATION_ERROR
    assert project.remaining_units(FlatType.THREE_ROOM) == 2

    result = service.edit_project(manager, project.name, unit_counts={FlatType.THREE_ROOM: 5})
    assert result.ok
    assert project.initial_units(FlatType.THREE_ROOM) == 5
    assert project.remaining_units(FlatType.THREE_ROOM) == 4


def test_edit_adds_new_flat_type(db, manager, make_project):
    project = make_project(units={FlatType.THREE_ROOM: 1})
    result = ProjectService(db).edit_project(
        manager,
        project.name,
        unit_counts={FlatType.TWO_ROOM: 4},
        unit_prices={FlatType.TWO_ROOM: Decimal("200000")},
    )
    assert result.ok
    assert project.remaining_units(FlatType.TWO_ROOM) == 4
    assert project.unit_price(FlatType.TWO_ROOM) == Decimal("200000")


def test_edit_requires_owner(db, other_manager, project):
    result = ProjectService(db).edit_project(other_manager, project.name, neighbourhood="Woodlands")
    assert result.error_type == ErrorType.AUTHORIZATION_ERROR
    assert project.neighbourhood == "Yishun"


def test_edit_missing_project(db, manager):
    result = ProjectService(db).edit_project(manager, "Ghost", neighbourhood="Woodlands")
    assert result.error_type == ErrorType.NOT_FOUND


def test_toggle_visibility(db, manager, project):
    result = ProjectService(db).toggle_visibility(manager, project.name, False)
    assert result.ok
    db.expire_all()
    assert ProjectRepository(db).find_by_name(project.name).visible is False


def test_delete_project_without_documents(db, manager, project):
    result = ProjectService(db).delete_project(manager, project.name)
    assert result.ok
    assert ProjectRepository(db).find_by_name("Yishun-1") is None


def test_delete_project_referenced_by_application(db, manager, married_applicant, project):
    from bto.services.application_service import ApplicationService

    assert ApplicationService(db).apply_for_project(married_applicant, project.name).ok
    result = ProjectService(db).delete_project(manager, project.name)
    assert result.error_type == ErrorType.STATE_ERROR
    assert ProjectRepository(db).find_by_name(project.name) is not None


def test_listing_by_role(db, manager, officer, married_applicant, single_applicant, make_project):
    open_project = make_project("Alpha", units={FlatType.THREE_ROOM: 2})
    hidden = make_project(
        "Bravo",
        open_date=date(2024, 6, 1),
        close_date=date(2024, 7, 1),
        visible=False,
    )
    hidden.add_officer(officer)
    db.commit()
    service = ProjectService(db)

    assert [p.name for p in service.list_projects_for(manager)] == ["Alpha", "Bravo"]
    assert [p.name for p in service.list_projects_for(married_applicant)] == ["Alpha"]
    # viewing does not depend on being able to apply
    assert [p.name for p in service.list_projects_for(single_applicant)] == ["Alpha"]
    assert [p.name for p in service.list_projects_for(officer)] == ["Alpha", "Bravo"]
    assert service.list_projects_for(married_applicant, flat_type=FlatType.TWO_ROOM) == []
    assert [p.name for p in service.list_projects_for(manager, neighbourhood="yishun")] == ["Alpha", "Bravo"]
    assert [p.name for p in service.list_projects_by_manager(manager)] == ["Alpha", "Bravo"]
    assert open_project.visible


def test_listing_date_range_and_manager_filters(db, manager, other_manager, married_applicant, make_project):
    make_project("Alpha", open_date=date(2024, 1, 1), close_date=date(2024, 3, 1))
    make_project("Bravo", open_date=date(2024, 6, 1), close_date=date(2024, 7, 1))
    make_project("Charlie", owner=other_manager, open_date=date(2024, 2, 15), close_date=date(2024, 4, 1))
    service = ProjectService(db)

    def names(projects):
        return [p.name for p in projects]

    # windows touching the range on a single day still count
    assert names(service.list_projects_for(married_applicant, open_from=date(2024, 3, 1), close_to=date(2024, 6, 1))) == [
        "Alpha", "Bravo", "Charlie"
    ]
    assert names(service.list_projects_for(married_applicant, open_from=date(2024, 3, 2), close_to=date(2024, 5, 31))) == [
        "Charlie"
    ]
    assert names(service.list_projects_for(married_applicant, close_to=date(2024, 1, 31))) == ["Alpha"]
    assert names(service.list_projects_for(married_applicant, manager_nric=other_manager.nric)) == ["Charlie"]

    assert names(service.list_projects_by_manager(manager, open_from=date(2024, 5, 1))) == ["Bravo"]
    assert names(service.list_projects_by_manager(manager, neighbourhood="Woodlands")) == []
    assert names(service.list_projects_by_manager(other_manager, flat_type=FlatType.TWO_ROOM)) == ["Charlie"]
