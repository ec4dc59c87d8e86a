"""Ordered interception chains wrapped around scheduling and execution."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

Middleware = Callable[[Any, Callable[[], Any]], Any]


@dataclass(slots=True)
class MiddlewareEntry:
    """One chain link: a middleware class or callable plus its init kwargs."""

    klass: Any
    kwargs: dict[str, Any] = field(default_factory=dict)

    def build(self) -> Middleware:
        """Return the callable for one invocation.

        Classes are instantiated per invocation; other callables are used as is.
        """

        if isinstance(self.klass, type):
            return self.klass(**self.kwargs)
        return self.klass


class MiddlewareChain:
    """Composable list of ``(job, call_next)`` middleware.

    The first entry is the outermost wrapper. A middleware must call
    ``call_next()`` exactly once, or return without calling it to
    short-circuit the rest of the chain including the terminal operation.
    """

    def __init__(self, entries: list[MiddlewareEntry] | None = None) -> None:
        self._entries: list[MiddlewareEntry] = list(entries or [])

    def add(self, klass: Any, **kwargs: Any) -> None:
        """Append a middleware, replacing any earlier registration of it."""

        self.remove(klass)
        self._entries.append(MiddlewareEntry(klass, kwargs))

    def prepend(self, klass: Any, **kwargs: Any) -> None:
        """Insert a middleware as the outermost link."""

        self.remove(klass)
        self._entries.insert(0, MiddlewareEntry(klass, kwargs))

    def insert_before(self, old: Any, klass: Any, **kwargs: Any) -> None:
        """Insert ``klass`` right before ``old`` (or first if ``old`` is absent)."""

        self.remove(klass)
        index = self._index_of(old)
        self._entries.insert(0 if index is None else index, MiddlewareEntry(klass, kwargs))

    def insert_after(self, old: Any, klass: Any, **kwargs: Any) -> None:
        """Insert ``klass`` right after ``old`` (or last if ``old`` is absent)."""

        self.remove(klass)
        index = self._index_of(old)
        position = len(self._entries) if index is None else index + 1
        self._entries.insert(position, MiddlewareEntry(klass, kwargs))

    def remove(self, klass: Any) -> None:
        self._entries = [entry for entry in self._entries if entry.klass is not klass]

    def exists(self, klass: Any) -> bool:
        return self._index_of(klass) is not None

    def clear(self) -> None:
        self._entries.clear()

    def copy(self) -> MiddlewareChain:
        return MiddlewareChain(
            [MiddlewareEntry(entry.klass, dict(entry.kwargs)) for entry in self._entries],
        )

    def invoke(self, job: Any, terminal: Callable[[], Any]) -> Any:
        """Run ``terminal`` wrapped by every middleware, outermost first.

        Results and exceptions surface unmodified unless a middleware
        transforms them.
        """

        links = [entry.build() for entry in self._entries]

        def _call(index: int) -> Any:
            if index == len(links):
                return terminal()
            return links[index](job, lambda: _call(index + 1))

        return _call(0)

    def __iter__(self) -> Iterator[Any]:
        return (entry.klass for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _index_of(self, klass: Any) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.klass is klass:
                return index
        return None
