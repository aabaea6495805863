# tests/test_eligibility.py
import pytest

from bto.db.enums import ActorRole, FlatType, MaritalStatus
from bto.models.user import User
from bto.schemas.applicant_profile import applicant_profile_of
from bto.services.eligibility_service import (
    check_eligibility,
    eligible_flat_types,
    ineligibility_reason,
    is_eligible_to_apply,
    is_eligible_to_view,
)

BOTH = {FlatType.TWO_ROOM, FlatType.THREE_ROOM}
SINGLE = MaritalStatus.SINGLE
MARRIED = MaritalStatus.MARRIED


@pytest.mark.parametrize(
    "age, status, offered, expected",
    [
        (21, MARRIED, BOTH, True),
        (21, MARRIED, {FlatType.THREE_ROOM}, True),
        (20, MARRIED, BOTH, False),
        (21, MARRIED, set(), False),
        (35, SINGLE, {FlatType.TWO_ROOM}, True),
        (35, SINGLE, {FlatType.THREE_ROOM}, False),
        (34, SINGLE, BOTH, False),
    ],
)
def test_apply_eligibility(age, status, offered, expected):
    assert is_eligible_to_apply(age, status, offered) is expected


def test_view_eligibility_is_looser_than_apply():
    assert not is_eligible_to_apply(25, SINGLE, BOTH)
    assert is_eligible_to_view(25, SINGLE, BOTH)
    assert is_eligible_to_view(18, MARRIED, {FlatType.THREE_ROOM})
    assert not is_eligible_to_view(40, MARRIED, set())


@pytest.mark.parametrize(
    "age, status, flat_type, expected",
    [
        (21, MARRIED, FlatType.THREE_ROOM, True),
        (20, MARRIED, FlatType.TWO_ROOM, False),
        (35, SINGLE, FlatType.TWO_ROOM, True),
        (35, SINGLE, FlatType.THREE_ROOM, False),
        (34, SINGLE, FlatType.TWO_ROOM, False),
    ],
)
def test_booking_eligibility(age, status, flat_type, expected):
    assert check_eligibility(age, status, flat_type) is expected


def test_eligible_flat_types():
    assert eligible_flat_types(40, SINGLE, BOTH) == {FlatType.TWO_ROOM}
    assert eligible_flat_types(30, MARRIED, BOTH) == BOTH


def test_ineligibility_reasons():
    assert ineligibility_reason(30, MARRIED, BOTH) is None
    assert "2-Room" in ineligibility_reason(40, SINGLE, {FlatType.THREE_ROOM})
    assert "21" in ineligibility_reason(19, MARRIED, BOTH)
    assert "35" in ineligibility_reason(30, SINGLE, BOTH)


def _user(role):
    return User(nric="S9999999Z", role=role, name="Pat", age=30, marital_status=MARRIED, password_hash="x")


def test_officer_acts_as_applicant():
    profile = applicant_profile_of(_user(ActorRole.OFFICER))
    assert profile.nric == "S9999999Z"
    assert profile.marital_status == MARRIED


def test_manager_has_no_applicant_profile():
    with pytest.raises(ValueError):
        applicant_profile_of(_user(ActorRole.MANAGER))
