# bto/schemas/applicant_profile.py
from pydantic import BaseModel, ConfigDict

from bto.db.enums import Capability, MaritalStatus


class ApplicantProfile(BaseModel):
    '''
    The applicant-facing part of an actor: what eligibility is decided on.

    nric: str - owner of the profile
    name: str - display name
    age: int - age in years
    marital_status: MaritalStatus
    '''
    model_config = ConfigDict(frozen=True)

    nric: str
    name: str
    age: int
    marital_status: MaritalStatus


def applicant_profile_of(user) -> ApplicantProfile:
    """
    Treat an actor as an applicant.

    Applicants and officers both carry the APPLY capability; an officer
    applying for a flat goes through this function rather than being a
    subtype of applicant. Managers never apply.

    :param user: the acting User
    :type user: User
    :return: the user's applicant profile
    :rtype: ApplicantProfile
    """
    if user is None:
        raise ValueError("user must not be None")
    if not user.can(Capability.APPLY):
        raise ValueError(f"{user.role.value} {user.nric} cannot act as an applicant")
    return ApplicantProfile(
        nric=user.nric,
        name=user.name,
        age=user.age,
        marital_status=user.marital_status,
    )
