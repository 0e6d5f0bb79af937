"""Per-call tracking of keys that are currently being resolved."""

import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from aletheia.secrets.exceptions import CircularSecretReferenceError

_current: ContextVar[Optional["ResolutionContext"]] = ContextVar(
    "aletheia_resolution_context", default=None
)


class ResolutionContext:
    """
    Set of keys in flight for one thread of execution.

    Pass the same context to nested ``resolve`` calls (for example from a
    backend that looks up its own credentials through the resolver) so a
    key that depends on itself is reported instead of recursing forever.
    When no context is passed, ``current()`` gives each thread its own.
    """

    def __init__(self):
        self._active: set[str] = set()
        self._owner = threading.get_ident()

    @classmethod
    def current(cls) -> "ResolutionContext":
        """Return the context bound to the running thread/task, creating it lazily."""
        context = _current.get()
        # a context copied into another thread must not be shared with it
        if context is None or context._owner != threading.get_ident():
            context = cls()
            _current.set(context)
        return context

    @contextmanager
    def enter(self, key: str) -> Iterator[None]:
        """
        Mark ``key`` as in flight for the duration of the block.

        Raises:
            CircularSecretReferenceError: If ``key`` is already in flight
        """
        if key in self._active:
            raise CircularSecretReferenceError(key)

        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)

    def __contains__(self, key: str) -> bool:
        return key in self._active

    @property
    def active_keys(self) -> frozenset:
        return frozenset(self._active)
