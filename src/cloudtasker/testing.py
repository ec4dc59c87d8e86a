"""In-memory dispatcher for tests and local development.

``FakeDispatcher`` records scheduling requests instead of delivering them.
``drain()`` then plays the transport's part: it executes each recorded task
through the JSON payload path, redelivers retryable failures with an
incremented retry count, and drops tasks that end up dead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from cloudtasker.descriptor import JobDescriptor
from cloudtasker.dispatcher import Interval, ScheduledTask, TimeAt, schedule_time
from cloudtasker.errors import DeadWorkerError, InvalidWorkerError
from cloudtasker.handler import execute_payload
from cloudtasker.registry import worker_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DrainSummary:
    """Counters for one ``drain`` call."""

    processed: int = 0
    succeeded: int = 0
    retried: int = 0
    dead: int = 0
    invalid: int = 0
    results: list[Any] = field(default_factory=list)


class FakeDispatcher:
    """Dispatcher that keeps scheduled tasks in memory."""

    def __init__(self) -> None:
        self.tasks: list[ScheduledTask] = []

    def schedule(
        self,
        descriptor: JobDescriptor,
        *,
        interval: Interval | None = None,
        time_at: TimeAt | None = None,
    ) -> ScheduledTask:
        task = ScheduledTask(
            descriptor=descriptor,
            schedule_time=schedule_time(interval=interval, time_at=time_at),
        )
        self.tasks.append(task)
        return task

    def jobs_for(self, worker_cls: type) -> list[ScheduledTask]:
        """Return the pending tasks scheduled for ``worker_cls``."""

        tag = worker_name(worker_cls)
        return [task for task in self.tasks if task.worker == tag]

    def clear(self) -> None:
        self.tasks.clear()

    def drain(self, *, max_attempts: int = 1_000) -> DrainSummary:
        """Execute pending tasks until none are left.

        Tasks scheduled while draining (e.g. by ``reenqueue``) are processed
        in the same call. ``max_attempts`` caps the total number of
        executions so a job that always reenqueues itself cannot loop forever.
        """

        summary = DrainSummary()
        while self.tasks and summary.processed < max_attempts:
            task = self.tasks.pop(0)
            summary.processed += 1
            try:
                summary.results.append(
                    execute_payload(task.descriptor.to_json()),
                )
                summary.succeeded += 1
            except DeadWorkerError:
                summary.dead += 1
            except InvalidWorkerError:
                logger.warning("Dropping undecodable task %s", task.job_id)
                summary.invalid += 1
            except Exception:  # noqa: BLE001
                summary.retried += 1
                self.tasks.append(
                    replace(
                        task,
                        descriptor=replace(
                            task.descriptor,
                            job_retries=task.descriptor.job_retries + 1,
                        ),
                    ),
                )
        return summary
