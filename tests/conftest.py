# tests/conftest.py
import os

# console logging only while testing
os.environ["LOG_DIR"] = ""

from datetime import date
from decimal import Decimal

import pytest

from bto.db.base import Base
from bto.db.enums import ActorRole, FlatType, MaritalStatus
from bto.db.session import build_engine, build_session_factory
from bto.models.user import User
import bto.db.init_db  # noqa: F401  registers every table
from bto.services.project_service import ProjectService


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db):
    def _make(nric, role=ActorRole.APPLICANT, *, name=None, age=30, marital_status=MaritalStatus.MARRIED):
        user = User(
            nric=nric,
            role=role,
            name=name or nric,
            age=age,
            marital_status=marital_status,
            password_hash="not-a-real-hash",
        )
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture()
def manager(make_user):
    return make_user("S1111111A", ActorRole.MANAGER, name="Michael", age=45)


@pytest.fixture()
def other_manager(make_user):
    return make_user("S1111112B", ActorRole.MANAGER, name="Jessica", age=50)


@pytest.fixture()
def officer(make_user):
    return make_user("T2222222B", ActorRole.OFFICER, name="Daniel", age=36, marital_status=MaritalStatus.SINGLE)


@pytest.fixture()
def married_applicant(make_user):
    return make_user("S3333333C", name="Grace", age=25, marital_status=MaritalStatus.MARRIED)


@pytest.fixture()
def single_applicant(make_user):
    return make_user("S4444444D", name="John", age=40, marital_status=MaritalStatus.SINGLE)


@pytest.fixture()
def make_project(db, manager):
    def _make(
        name="Yishun-1",
        *,
        owner=None,
        units=None,
        prices=None,
        open_date=date(2024, 1, 1),
        close_date=date(2024, 3, 1),
        neighbourhood="Yishun",
        visible=True,
    ):
        result = ProjectService(db).create_project(
            owner or manager,
            name=name,
            neighbourhood=neighbourhood,
            unit_counts=units if units is not None else {FlatType.TWO_ROOM: 2, FlatType.THREE_ROOM: 3},
            unit_prices=prices or {FlatType.TWO_ROOM: Decimal("350000"), FlatType.THREE_ROOM: Decimal("450000")},
            open_date=open_date,
            close_date=close_date,
            visible=visible,
        )
        assert result.ok, result.error_message
        return result.entity
    return _make


@pytest.fixture()
def project(make_project):
    return make_project()


@pytest.fixture()
def assigned_project(db, project, officer):
    project.add_officer(officer)
    db.commit()
    return project


@pytest.fixture()
def approved_application(db, manager, married_applicant, assigned_project):
    from bto.services.application_service import ApplicationService

    service = ApplicationService(db)
    applied = service.apply_for_project(married_applicant, assigned_project.name)
    assert applied.ok, applied.error_message
    decided = service.process_bto_application(manager, applied.entity.id, True)
    assert decided.ok, decided.error_message
    return decided.entity
