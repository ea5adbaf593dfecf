"""Translation of driver-level failures into domain errors."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from article_lifecycle.domain.exceptions import StorageUnavailableError

_TRANSIENT_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    ConnectionError,
)


@asynccontextmanager
async def storage_guard(operation: str) -> AsyncIterator[None]:
    """Re-raise transient database failures as ``StorageUnavailableError``."""
    try:
        yield
    except _TRANSIENT_ERRORS as exc:
        raise StorageUnavailableError(operation, exc) from exc
