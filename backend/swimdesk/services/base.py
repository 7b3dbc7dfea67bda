# backend/swimdesk/services/base.py
"""
Base Service Pattern for SwimDesk

Every service owns a SQLAlchemy session and decides where a unit of work
begins and ends. Repositories below it only flush.
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import RepositoryException, ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class BaseService:
    """
    Base class for all service layer components.

    Services that call other services pass ``use_transaction=False`` so the
    whole operation commits or rolls back once, in the outermost caller.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on clean exit, roll back on any error.

        Store failures surface as ServiceException(STORE_UNAVAILABLE) so the
        API can tell the caller to retry; domain errors pass through as-is.
        """
        try:
            yield self.db
            self.db.commit()
        except (SQLAlchemyError, RepositoryException) as e:
            self.db.rollback()
            self.logger.error(f"Transaction rolled back: {str(e)}")
            raise ServiceException(
                "The scheduling store is temporarily unavailable",
                code="STORE_UNAVAILABLE",
            ) from e
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def optional_transaction(self, use_transaction: bool) -> Iterator[Session]:
        """Open a transaction only when this call owns the boundary."""
        if use_transaction:
            with self.transaction() as db:
                yield db
        else:
            yield self.db

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and export the result to Prometheus.

        Usage:
            @BaseService.measure_operation("cancel_enrollment")
            def cancel_enrollment(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                started = time.perf_counter()
                error_type = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    if elapsed > settings.slow_operation_threshold_seconds:
                        self.logger.warning(f"Slow operation: {operation_name} took {elapsed:.2f}s")
                    prometheus_metrics.record_service_operation(
                        service=self.__class__.__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="error" if error_type else "success",
                        error_type=error_type,
                    )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})
