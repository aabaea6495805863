# bto/services/eligibility_service.py
'''
Eligibility rules. Pure functions of (age, marital status, flat types).

Apply and view eligibility are two different policies: an applicant may
look at any visible project that offers flats, even one they could never
apply for.
'''
from typing import Iterable, Optional

from bto.db.enums import FlatType, MaritalStatus

MIN_MARRIED_AGE = 21
MIN_SINGLE_AGE = 35


def is_eligible_to_apply(age: int, marital_status: MaritalStatus, offered_types: Iterable[FlatType]) -> bool:
    '''
    MARRIED and 21+: any project offering at least one flat type.
    SINGLE and 35+: only projects offering 2-Room flats.
    Everyone else: not eligible.
    '''
    offered = set(offered_types)
    if marital_status == MaritalStatus.MARRIED and age >= MIN_MARRIED_AGE:
        return len(offered) > 0
    if marital_status == MaritalStatus.SINGLE and age >= MIN_SINGLE_AGE:
        return FlatType.TWO_ROOM in offered
    return False


def is_eligible_to_view(age: int, marital_status: MaritalStatus, offered_types: Iterable[FlatType]) -> bool:
    # the profile does not restrict viewing
    return len(set(offered_types)) > 0


def check_eligibility(age: int, marital_status: MaritalStatus, flat_type: FlatType) -> bool:
    '''Flat-type specific rule applied when a unit is actually booked.'''
    if marital_status == MaritalStatus.MARRIED:
        return age >= MIN_MARRIED_AGE
    if marital_status == MaritalStatus.SINGLE:
        return age >= MIN_SINGLE_AGE and flat_type == FlatType.TWO_ROOM
    return False


def eligible_flat_types(age: int, marital_status: MaritalStatus, offered_types: Iterable[FlatType]) -> set:
    return {t for t in offered_types if check_eligibility(age, marital_status, t)}


def ineligibility_reason(age: int, marital_status: MaritalStatus, offered_types: Iterable[FlatType]) -> Optional[str]:
    """Human readable reason why apply-eligibility fails, None when it passes."""
    offered = set(offered_types)
    if is_eligible_to_apply(age, marital_status, offered):
        return None
    if marital_status == MaritalStatus.SINGLE and age >= MIN_SINGLE_AGE:
        return "singles aged 35 and above may only apply for projects offering 2-Room flats"
    if marital_status == MaritalStatus.MARRIED and age < MIN_MARRIED_AGE:
        return "married applicants must be 21 or older"
    if marital_status == MaritalStatus.SINGLE and age < MIN_SINGLE_AGE:
        return "single applicants must be 35 or older"
    return "the project offers no flat types"
