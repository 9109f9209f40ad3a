import logging
from contextlib import contextmanager
from sqlalchemy.orm import Session


class BaseService:
    """
    Shared plumbing for DB-backed services: session handle, logger and
    a commit-or-rollback unit of work.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    @contextmanager
    def unit_of_work(self):
        """Commit once at the end; roll back everything on any exception."""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)
