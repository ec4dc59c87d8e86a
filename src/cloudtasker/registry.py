"""Process-wide worker registry and per-type option store.

Payloads name their worker class with a string tag. Only classes that were
explicitly registered can be resolved, so a delivered payload can never make
the receiving process import or instantiate arbitrary objects.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, overload

if TYPE_CHECKING:
    from cloudtasker.worker import Worker

logger = logging.getLogger(__name__)

W = TypeVar("W", bound="type[Worker]")

_WORKERS: dict[str, type[Worker]] = {}
_NAMES: dict[type, str] = {}
_OPTIONS: dict[type, dict[str, Any]] = {}


@overload
def register_worker(cls: W, *, name: str | None = None, **options: Any) -> W: ...


@overload
def register_worker(
    cls: None = None, *, name: str | None = None, **options: Any
) -> Callable[[W], W]: ...


def register_worker(cls=None, *, name=None, **options):
    """Register a worker class, usable bare or with arguments.

    ``@register_worker`` tags the class with ``"<module>.<qualname>"``;
    ``@register_worker(name="send_email", max_retries=5)`` sets an explicit tag
    and per-type options.
    """

    def _register(worker_cls):
        from cloudtasker.worker import Worker

        if not isinstance(worker_cls, type) or not issubclass(worker_cls, Worker):
            raise TypeError(f"{worker_cls!r} is not a Worker subclass")
        tag = (name or default_worker_name(worker_cls)).strip()
        if not tag:
            raise ValueError("Worker name must be a non-empty string")
        existing = _WORKERS.get(tag)
        if existing is not None and existing is not worker_cls:
            raise ValueError(
                f"Worker name {tag!r} is already registered to {existing.__qualname__}",
            )
        previous_tag = _NAMES.get(worker_cls)
        if previous_tag is not None and previous_tag != tag:
            _WORKERS.pop(previous_tag, None)
        _WORKERS[tag] = worker_cls
        _NAMES[worker_cls] = tag
        if options:
            set_worker_options(worker_cls, **options)
        logger.debug("Registered worker %s as %r", worker_cls.__qualname__, tag)
        return worker_cls

    if cls is None:
        return _register
    return _register(cls)


def unregister_worker(tag: str) -> type[Worker] | None:
    """Remove a tag from the registry and return the class it pointed to."""

    worker_cls = _WORKERS.pop(tag, None)
    if worker_cls is not None:
        _NAMES.pop(worker_cls, None)
        _OPTIONS.pop(worker_cls, None)
    return worker_cls


def resolve_worker(tag: str) -> type[Worker] | None:
    """Return the class registered under ``tag``, or None."""

    return _WORKERS.get(tag)


def registered_workers() -> dict[str, type[Worker]]:
    """Return a snapshot of the registry."""

    return dict(_WORKERS)


def default_worker_name(worker_cls: type) -> str:
    return f"{worker_cls.__module__}.{worker_cls.__qualname__}"


def worker_name(worker_cls: type) -> str:
    """Return the tag written into descriptors for ``worker_cls``."""

    return _NAMES.get(worker_cls) or default_worker_name(worker_cls)


def get_worker_options(worker_cls: type) -> dict[str, Any]:
    """Return a copy of the options declared for ``worker_cls``."""

    return dict(_OPTIONS.get(worker_cls, {}))


def set_worker_options(worker_cls: type, **options: Any) -> dict[str, Any]:
    """Replace the options declared for ``worker_cls``."""

    _OPTIONS[worker_cls] = dict(options)
    return dict(options)

