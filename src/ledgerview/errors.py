"""Error kinds surfaced by the read models and the credential verifier.

Operational failures are logged with full context here and replaced by a
DashboardError whose message is safe to show to an end user. Expected
negative outcomes (unknown user, wrong password) are return values, not
errors.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from ledgerview.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    QUERY_FAILED = "query_failed"
    VALIDATION_FAILED = "validation_failed"


class DashboardError(Exception):
    """User-safe error carrying a kind and, for query failures, the operation name."""

    def __init__(self, kind: ErrorKind, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.operation = operation

    def __repr__(self) -> str:
        return f"DashboardError(kind={self.kind.value!r}, operation={self.operation!r}, message={self.message!r})"


@contextmanager
def query_failure(operation: str, message: str) -> Iterator[None]:
    """
    Log any backend exception raised inside the block and re-raise it as a
    QUERY_FAILED DashboardError with a fixed message.

    DashboardErrors raised inside the block pass through untouched. The
    original exception is not chained onto the surfaced error; it only
    reaches the server log.

    Usage:
        with query_failure("fetch_revenue", "Failed to fetch revenue data."):
            rows = await query_revenue(engine)
    """
    try:
        yield
    except DashboardError:
        raise
    except Exception as exc:
        logger.error("Database error in %s: %s", operation, exc, exc_info=True)
        raise DashboardError(ErrorKind.QUERY_FAILED, message, operation=operation) from None
