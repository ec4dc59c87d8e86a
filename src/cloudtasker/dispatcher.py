"""Dispatcher contract and an inline implementation for local runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from cloudtasker.descriptor import JobDescriptor

logger = logging.getLogger(__name__)

Interval = int | float | timedelta
TimeAt = datetime | int | float


class Dispatcher(Protocol):
    """Protocol implemented by task-delivery backends."""

    def schedule(
        self,
        descriptor: JobDescriptor,
        *,
        interval: Interval | None = None,
        time_at: TimeAt | None = None,
    ) -> Any:
        """Hand the descriptor to the delivery service and return its handle."""


@dataclass(slots=True)
class ScheduledTask:
    """One scheduling request as seen by an in-process dispatcher."""

    descriptor: JobDescriptor
    schedule_time: datetime | None

    @property
    def job_id(self) -> str | None:
        return self.descriptor.job_id

    @property
    def worker(self) -> str:
        return self.descriptor.worker


def schedule_time(
    *,
    interval: Interval | None = None,
    time_at: TimeAt | None = None,
    now: datetime | None = None,
) -> datetime | None:
    """Resolve delay parameters into an aware UTC timestamp.

    ``None`` means immediate dispatch. ``interval`` is relative seconds (or a
    ``timedelta``); ``time_at`` is an absolute ``datetime`` or epoch seconds.
    Naive datetimes are taken as UTC.
    """

    if interval is not None and time_at is not None:
        raise ValueError("Pass either interval or time_at, not both.")
    if interval is not None:
        delay = interval if isinstance(interval, timedelta) else timedelta(seconds=interval)
        if delay <= timedelta(0):
            return None
        return (now or datetime.now(UTC)) + delay
    if time_at is None:
        return None
    if isinstance(time_at, datetime):
        return time_at if time_at.tzinfo else time_at.replace(tzinfo=UTC)
    if isinstance(time_at, bool) or not isinstance(time_at, int | float):
        raise TypeError(f"time_at must be a datetime or epoch seconds, got {time_at!r}")
    return datetime.fromtimestamp(time_at, tz=UTC)


class InlineDispatcher:
    """Execute workers synchronously at schedule time.

    Delays are logged and ignored. The descriptor goes through a JSON round
    trip first so that jobs run exactly as a delivered payload would.
    Execution errors propagate to the caller of ``schedule``.
    """

    def schedule(
        self,
        descriptor: JobDescriptor,
        *,
        interval: Interval | None = None,
        time_at: TimeAt | None = None,
    ) -> ScheduledTask:
        from cloudtasker.handler import execute_payload

        task = ScheduledTask(
            descriptor=descriptor,
            schedule_time=schedule_time(interval=interval, time_at=time_at),
        )
        if task.schedule_time is not None:
            logger.info(
                "Inline dispatch ignores delay for %s (%s), requested at %s",
                descriptor.worker,
                descriptor.job_id,
                task.schedule_time.isoformat(),
            )
        execute_payload(descriptor.to_json())
        return task
