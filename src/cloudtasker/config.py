"""Runtime configuration for worker scheduling and execution."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any

from cloudtasker.middleware import MiddlewareChain

if TYPE_CHECKING:
    from cloudtasker.dispatcher import Dispatcher
    from cloudtasker.worker import Worker

DEFAULT_MAX_RETRIES = 25

ErrorReporter = Callable[[BaseException, "Worker"], None]


@dataclass(slots=True)
class Settings:
    """Plain settings loadable from the environment."""

    max_retries: int = DEFAULT_MAX_RETRIES
    worker_modules: tuple[str, ...] = ()

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with library defaults."""

        settings = cls(
            max_retries=_env_int("CLOUDTASKER_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            worker_modules=_collect_worker_modules(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise configuration error on invalid values."""

        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise TypeError("CLOUDTASKER_MAX_RETRIES must be an integer.")
        if self.max_retries < 0:
            raise ValueError("CLOUDTASKER_MAX_RETRIES must be >= 0.")


@dataclass(slots=True)
class Config:
    """Process-wide runtime state read at point of use.

    ``server_middleware`` wraps worker execution, ``client_middleware`` wraps
    the dispatcher call made by ``Worker.schedule``.
    """

    settings: Settings = field(default_factory=Settings)
    server_middleware: MiddlewareChain = field(default_factory=MiddlewareChain)
    client_middleware: MiddlewareChain = field(default_factory=MiddlewareChain)
    dispatcher: Dispatcher | None = None
    error_reporter: ErrorReporter | None = None

    @property
    def max_retries(self) -> int:
        return self.settings.max_retries


_SETTINGS_FIELDS = frozenset(item.name for item in fields(Settings))
_config = Config()


def get_config() -> Config:
    """Return the live process-wide configuration."""

    return _config


def configure(**changes: Any) -> Config:
    """Update the process-wide configuration in place.

    Settings fields (``max_retries``, ``worker_modules``) may be passed
    directly alongside ``Config`` attributes.
    """

    setting_changes = {key: value for key, value in changes.items() if key in _SETTINGS_FIELDS}
    if setting_changes:
        settings = replace(_config.settings, **setting_changes)
        settings.validate()
        _config.settings = settings
    for key, value in changes.items():
        if key in _SETTINGS_FIELDS:
            continue
        if key not in Config.__dataclass_fields__:
            raise TypeError(f"Unknown configuration option: {key!r}")
        setattr(_config, key, value)
    return _config


def reset_config(settings: Settings | None = None) -> Config:
    """Restore defaults: empty chains, no dispatcher, no error reporter."""

    global _config  # noqa: PLW0603
    _config = Config(settings=settings or Settings())
    return _config


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _collect_worker_modules() -> tuple[str, ...]:
    raw = os.getenv("CLOUDTASKER_WORKER_MODULES", "").strip()
    if not raw:
        return ()
    return normalize_module_names(raw.split(","))


def normalize_module_names(values: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    deduped: list[str] = []
    seen: set[str] = set()
    for value in values:
        normalized = value.strip()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        deduped.append(normalized)
    return tuple(deduped)
