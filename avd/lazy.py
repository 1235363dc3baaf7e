"""One-time initialization and deferred evaluation primitives."""

from __future__ import annotations

import threading
from types import TracebackType
from typing import Callable, Generic, Optional, TypeVar

from avd.utils import log

T = TypeVar("T")
U = TypeVar("U")

_UNSET = object()


class Lazy(Generic[T]):
    """Compute a value at most once, on first ``get()``, safely under concurrent access.

    A failing factory is not retried: the exception is remembered and raised
    again on every later ``get()``.
    """

    def __init__(self, factory: Callable[[], T], name: Optional[str] = None) -> None:
        self._factory: Optional[Callable[[], T]] = factory
        self._name = name or getattr(factory, "__name__", "lazy")
        self._lock = threading.Lock()
        self._value = _UNSET
        self._error: Optional[BaseException] = None
        self._error_traceback: Optional[TracebackType] = None

    @property
    def evaluated(self) -> bool:
        return self._value is not _UNSET or self._error is not None

    def get(self) -> T:
        if not self.evaluated:
            with self._lock:
                if not self.evaluated:
                    self._evaluate()
        if self._error is not None:
            # Each raise starts from the factory's traceback.
            raise self._error.with_traceback(self._error_traceback)
        return self._value  # type: ignore[return-value]

    def _evaluate(self) -> None:
        factory = self._factory
        assert factory is not None
        log("DEBUG", f"Initializing {self._name}")
        try:
            self._value = factory()
        except Exception as exc:
            self._error_traceback = exc.__traceback__
            self._error = exc
        # Drop the closure so captured state can be collected.
        self._factory = None

    def __repr__(self) -> str:
        state = "evaluated" if self.evaluated else "pending"
        return f"<Lazy {self._name} ({state})>"


class Deferred(Generic[T]):
    """Result handle whose computation runs only when the value is first observed."""

    def __init__(self, compute: Callable[[], T], name: Optional[str] = None) -> None:
        self._lazy: Lazy[T] = Lazy(compute, name=name)

    @classmethod
    def of(cls, value: T) -> "Deferred[T]":
        return cls(lambda: value, name="constant")

    @property
    def evaluated(self) -> bool:
        return self._lazy.evaluated

    def get(self) -> T:
        return self._lazy.get()

    def map(self, fn: Callable[[T], U]) -> "Deferred[U]":
        """Chain a transformation without forcing evaluation."""
        return Deferred(lambda: fn(self.get()), name=f"{self._lazy._name}.map")

    def __repr__(self) -> str:
        return f"<Deferred {self._lazy!r}>"
