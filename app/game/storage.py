from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


@contextmanager
def guard_storage(
    operation: str,
    *,
    error_type: type[Exception],
    log_event: str,
    **context: Any,
) -> Iterator[None]:
    """Log a failed database write and re-raise it as the domain storage error."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(
            log_event,
            operation=operation,
            error_type=type(exc).__name__,
            **context,
        )
        raise error_type(operation) from exc
