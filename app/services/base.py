import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError


class BaseService:
    """
    Common plumbing for domain services: the request-scoped session and a
    module logger. Authorization stays explicit in each operation.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    @contextmanager
    def conflict_on_duplicate(self, message: str) -> Iterator[None]:
        """Translate a unique-constraint violation into a ConflictError."""
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            self._logger.info(f"Unique constraint rejected write: {message}")
            raise ConflictError(message) from e
