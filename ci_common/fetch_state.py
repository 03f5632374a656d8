"""
Outcome of one fetch, as seen by a view.

Keeps "nothing fetched yet", "fetch failed" and "fetched but empty" apart so
that a consumer never mistakes an error for an empty queue.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .decode import DecodeError

logger = logging.getLogger(__name__)


class FetchStatus(Enum):
    PENDING = "pending"
    ERROR = "error"
    EMPTY = "empty"
    LOADED = "loaded"


@dataclass(frozen=True)
class FetchState:
    """Snapshot of a view's data: its status, the data and any error message."""

    status: FetchStatus = FetchStatus.PENDING
    data: Any = None
    error: str | None = None

    @classmethod
    def pending(cls) -> "FetchState":
        return cls()

    @classmethod
    def failed(cls, error: str) -> "FetchState":
        return cls(status=FetchStatus.ERROR, error=error)

    @classmethod
    def loaded(cls, data: Any) -> "FetchState":
        """Wrap fetched data; an empty collection becomes EMPTY."""
        if data is None or (hasattr(data, "__len__") and len(data) == 0):
            return cls(status=FetchStatus.EMPTY, data=data)
        return cls(status=FetchStatus.LOADED, data=data)

    @classmethod
    def capture(cls, fetch: Callable[..., Any], *args: Any, **kwargs: Any) -> "FetchState":
        """
        Run a fetch function and record its outcome.

        RuntimeError (transport failures) and DecodeError (unreadable bodies)
        become an ERROR state; any other exception propagates.
        """
        try:
            data = fetch(*args, **kwargs)
        except (RuntimeError, DecodeError) as e:
            logger.error(f"Fetch failed: {e}")
            return cls.failed(str(e))
        return cls.loaded(data)

    @property
    def is_error(self) -> bool:
        return self.status is FetchStatus.ERROR

    @property
    def is_empty(self) -> bool:
        return self.status is FetchStatus.EMPTY

    @property
    def is_loaded(self) -> bool:
        return self.status is FetchStatus.LOADED
