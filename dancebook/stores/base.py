# dancebook/stores/base.py

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dancebook.errors import StoreFailure

logger = logging.getLogger(__name__)


class BaseStore:
    """Shared session handling for the stores. Each store wraps one SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def _commit(self):
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Commit failed in {type(self).__name__}: {type(e).__name__}: {e}")
            raise StoreFailure() from e

    @contextmanager
    def _reading(self):
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Query failed in {type(self).__name__}: {type(e).__name__}: {e}")
            raise StoreFailure() from e
