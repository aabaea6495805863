# bto/services/results.py
import logging
from typing import Any

from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult


def fail(
    logger: logging.Logger,
    error_type: ErrorType,
    message: str,
    *,
    entity: Any = None,
    side_effect: bool = False,
) -> OperationResult:
    '''Log a refused operation at WARNING and build its failure result.'''
    logger.warning(f"[{error_type.value}] {message}")
    return OperationResult.failure(error_type, message, entity=entity, side_effect=side_effect)


def checked(logger: logging.Logger, result: OperationResult) -> OperationResult:
    '''Pass a transition result through, logging it when it failed.'''
    if not result.ok:
        logger.warning(f"[{result.error_type.value}] {result.error_message}")
    return result
