# bto/services/unit_of_work.py
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bto.logger import get_logger
from bto.models.document import Document
from bto.schemas.error_type import ErrorType
from bto.schemas.operation_result import OperationResult

logger = get_logger(__name__)


class UnitOfWork:
    """
    Stages several in-memory mutations and persists them together.

    Every mutation is registered with an undo closure. commit() either
    persists everything, or runs the undo closures newest-first, rolls the
    session back and reports a DATABASE_ERROR. Inventory and document
    state therefore never disagree after a failed write.
    """

    def __init__(self, db: Session, label: str = "unit of work"):
        self.db = db
        self.label = label
        self._undo_log: List[Tuple[str, Callable[[], None]]] = []

    def record(self, description: str, undo: Callable[[], None]) -> None:
        '''
        Register the inverse of a mutation that has just been applied.
        :param description: what the undo reverts, used in log lines
        :type description: str
        :param undo: zero-argument callable restoring the previous state
        :type undo: Callable[[], None]
        '''
        self._undo_log.append((description, undo))

    def track(self, document: Document) -> None:
        '''Snapshot a document now so any later transition on it can be undone.'''
        snapshot = document.snapshot()
        self.record(f"restore {document.id}", lambda: document.restore(snapshot))

    @property
    def pending_undo_count(self) -> int:
        return len(self._undo_log)

    def rollback(self, reason: str) -> None:
        '''Revert every recorded mutation (newest first) and discard the session state.'''
        logger.error(f"{self.label}: rolling back ({reason})")
        while self._undo_log:
            description, undo = self._undo_log.pop()
            try:
                undo()
            except Exception as e:
                logger.error(f"{self.label}: undo '{description}' failed: {e}")
        self.db.rollback()

    def commit(self) -> Optional[OperationResult]:
        '''
        Persist everything staged so far.
        :return: None on success, a DATABASE_ERROR failure otherwise
        :rtype: Optional[OperationResult]
        '''
        try:
            self.db.flush()
            self.db.commit()
        except SQLAlchemyError as e:
            self.rollback(f"commit failed: {e}")
            return OperationResult.failure(
                ErrorType.DATABASE_ERROR,
                f"{self.label}: failed to save changes",
            )
        self._undo_log.clear()
        return None
