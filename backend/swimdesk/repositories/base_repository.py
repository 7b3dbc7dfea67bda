# backend/swimdesk/repositories/base_repository.py
"""
Base Repository Pattern for SwimDesk

Repositories translate between the ORM and the services. They flush but
never commit: the calling service owns the transaction, so a cancellation
and its catch-up request, or a booking and its credit debit, land together
or not at all.

Nothing is ever deleted. Sessions are deactivated and enrollments are
cancelled, so history stays queryable.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..database.session_utils import POSTGRESQL, get_dialect_name, supports_row_locks

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """Common reads and writes for a single mapped model."""

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        return get_dialect_name(self.db)

    def get_by_id(self, id: str, for_update: bool = False) -> Optional[T]:
        """
        Load one row by primary key.

        ``for_update`` holds a row lock until the transaction ends; SQLite has
        no row locks and ignores the flag.
        """
        query = self.db.query(self.model).filter(self.model.id == id)
        if for_update:
            query = self._lock(query)
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to load {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to load {self.model.__name__}: {str(e)}")

    def find_one_by(self, **criteria: Any) -> Optional[T]:
        try:
            return self.db.query(self.model).filter_by(**criteria).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Lookup by {sorted(criteria)} failed: {str(e)}")
            raise RepositoryException(f"Failed to find {self.model.__name__}: {str(e)}")

    def create(self, **values: Any) -> T:
        """
        Add and flush a new row so its defaults and id are populated.

        IntegrityError propagates untouched; services turn unique violations
        into domain conflicts such as DUPLICATE_ENROLLMENT.
        """
        entity = self.model(**values)
        try:
            self.db.add(entity)
            self.db.flush()
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to create {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")
        return entity

    def refresh(self, instance: T) -> None:
        self.db.refresh(instance)

    def flush(self) -> None:
        self.db.flush()

    def _insert_ignore(self, values: dict, conflict_columns: List[str]) -> None:
        """
        INSERT unless a row with the same ``conflict_columns`` exists.

        Two requests racing to create the same singleton row both succeed;
        exactly one of them writes it.
        """
        if self.dialect_name == POSTGRESQL:
            stmt = pg_insert(self.model).values(**values).on_conflict_do_nothing(index_elements=conflict_columns)
        else:
            stmt = insert(self.model).values(**values).prefix_with("OR IGNORE")
        try:
            self.db.execute(stmt)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Insert into {self.model.__name__} failed: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def _lock(self, query: Query) -> Query:
        """``SELECT ... FOR UPDATE`` on dialects that honour it."""
        return query.with_for_update() if supports_row_locks(self.db) else query

    def _execute_query(self, query: Query) -> List[T]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query on {self.model.__name__} failed: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")

    def _execute_scalar(self, query: Query) -> Any:
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self.logger.error(f"Scalar query on {self.model.__name__} failed: {str(e)}")
            raise RepositoryException(f"Scalar query failed: {str(e)}")
