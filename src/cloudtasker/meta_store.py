"""Ordered key/value metadata attached to every worker."""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

_MISSING = object()


class MetaStore:
    """Pass-through metadata container.

    Keys are normalized to strings so that metadata survives a JSON round trip
    unchanged. Values are deep-copied from the seed so that two workers never
    share mutable metadata state.
    """

    __slots__ = ("_data",)

    def __init__(self, seed: Mapping[Any, Any] | MetaStore | None = None) -> None:
        if seed is None:
            items: Mapping[Any, Any] = {}
        elif isinstance(seed, MetaStore):
            items = seed._data
        elif isinstance(seed, Mapping):
            items = seed
        else:
            raise TypeError(f"Metadata seed must be a mapping, got {type(seed).__name__}")
        self._data: dict[str, Any] = {
            _normalize_key(key): copy.deepcopy(value) for key, value in items.items()
        }

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value stored under ``key``."""

        return self._data.get(_normalize_key(key), default)

    def set(self, key: Any, value: Any) -> Any:
        """Store ``value`` under ``key`` and return it."""

        self._data[_normalize_key(key)] = value
        return value

    def delete(self, key: Any, default: Any = _MISSING) -> Any:
        """Remove ``key`` and return its value."""

        normalized = _normalize_key(key)
        if default is _MISSING:
            return self._data.pop(normalized)
        return self._data.pop(normalized, default)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy suitable for serialization."""

        return copy.deepcopy(self._data)

    def __contains__(self, key: object) -> bool:
        return _normalize_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MetaStore):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == {_normalize_key(key): value for key, value in other.items()}
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MetaStore({self._data!r})"


def _normalize_key(key: object) -> str:
    if isinstance(key, Enum):
        key = key.value
    return key if type(key) is str else str(key)
