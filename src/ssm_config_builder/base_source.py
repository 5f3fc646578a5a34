"""
Parameter source abstraction.

The builder never talks to a parameter store directly. It calls a
ParameterSource, which returns every parameter under a path:
1. Recursively (all descendants, not just direct children)
2. Completely (all result pages collected)
3. Sorted by name ascending

Failures surface as SourceFetchError carrying the path.
"""

import time
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Parameter:
    """A single flat key/value pair, e.g. Parameter("/app/db/port", "5432")."""

    name: str
    value: str


@dataclass
class CallContext:
    """
    Per-call deadline and cancellation signal.

    Passed explicitly into each build call and checked by the source before
    every page fetch. Nothing is shared between calls.

    Usage:
        context = CallContext.with_timeout(5.0)
        builder.build_json_from_prefix("/app/schema", True, context=context)
    """

    deadline: Optional[float] = None  # time.monotonic() value
    cancelled: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def with_timeout(cls, seconds: float) -> "CallContext":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self.cancelled.set()

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline


class ParameterSource(ABC):
    """Abstract base class for parameter stores (SSM, in-memory fixtures, etc.)."""

    @abstractmethod
    def fetch_parameters_under_path(
        self, path: str, context: Optional[CallContext] = None
    ) -> list[Parameter]:
        """
        Fetch all parameters recursively under path.

        Args:
            path: Prefix to fetch, e.g. "/app/schema"
            context: Optional deadline/cancellation for this call

        Returns:
            Parameters sorted by name ascending

        Raises:
            SourceFetchError: If the store call fails
        """
        pass
