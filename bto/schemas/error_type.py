from enum import Enum


class ErrorType(str, Enum):
    '''
    Structured classification of why an operation did not happen.

    VALIDATION_ERROR: malformed or missing input, negative counts, bad date order.
    AUTHORIZATION_ERROR: the actor is not the owner / manager / officer the action requires.
    STATE_ERROR: the requested transition is illegal from the current status.
    RESOURCE_EXHAUSTED: no remaining units, no officer slots, scheduling conflict, existing booking.
    NOT_FOUND: unknown id or name.
    DATABASE_ERROR: persisting failed; in-memory state has been compensated.
    SYSTEM_ERROR: an inconsistency the system could not resolve on its own.
    '''
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    STATE_ERROR = "STATE_ERROR"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    NOT_FOUND = "NOT_FOUND"

    DATABASE_ERROR = "DATABASE_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"
