"""Worker base class: identity, lifecycle and scheduling helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from uuid import uuid4

from cloudtasker.config import get_config
from cloudtasker.descriptor import JobDescriptor
from cloudtasker.dispatcher import Interval, TimeAt
from cloudtasker.errors import DeadWorkerError, MissingDispatcherError
from cloudtasker.meta_store import MetaStore
from cloudtasker.registry import get_worker_options, set_worker_options, worker_name
from cloudtasker.worker_logger import WorkerLogger


class Worker:
    """Base class for deferred jobs.

    Subclasses implement ``perform(*args)`` and may define the optional
    ``on_error(error)`` and ``on_dead(error)`` hooks. Register subclasses
    with ``cloudtasker.register_worker`` so payloads can be decoded.

    ``job_retries`` is owned by the transport: it is incremented between
    delivery attempts and only read here to tell retryable failures from
    dead ones.
    """

    def __init__(
        self,
        job_args: Sequence[Any] | None = None,
        job_id: str | None = None,
        job_meta: Mapping[Any, Any] | MetaStore | None = None,
        job_retries: int | None = 0,
    ) -> None:
        if job_args is None:
            job_args = []
        if isinstance(job_args, str | bytes) or not isinstance(job_args, Sequence):
            raise TypeError("job_args must be a list of arguments")
        if job_retries is None:
            job_retries = 0
        if isinstance(job_retries, bool) or not isinstance(job_retries, int):
            raise TypeError("job_retries must be an integer")
        if job_retries < 0:
            raise ValueError("job_retries must be >= 0")

        if job_id is None:
            job_id = str(uuid4())
        if not isinstance(job_id, str) or not job_id.strip():
            raise ValueError("job_id must be a non-empty string")

        self.job_args: list[Any] = list(job_args)
        self._job_id: str = job_id
        self.job_meta = MetaStore(job_meta)
        self.job_retries: int = job_retries
        self.job_reenqueued: bool = False
        self._logger: WorkerLogger | None = None

    # ------------------------------------------------------------------
    # Type-level operations
    # ------------------------------------------------------------------

    @classmethod
    def worker_name(cls) -> str:
        """Return the type tag written into descriptors."""

        return worker_name(cls)

    @classmethod
    def cloudtasker_options(cls, **options: Any) -> dict[str, Any]:
        """Replace the per-type runtime options (e.g. ``max_retries``)."""

        return set_worker_options(cls, **options)

    @classmethod
    def cloudtasker_options_hash(cls) -> dict[str, Any]:
        return get_worker_options(cls)

    @classmethod
    def max_retries(cls) -> int:
        """Return the retry budget: per-type override, else the process default."""

        override = get_worker_options(cls).get("max_retries")
        if override is not None:
            return int(override)
        return get_config().max_retries

    @classmethod
    def perform_async(cls, *args: Any) -> Any:
        """Schedule a new job for immediate processing."""

        return cls.perform_in(None, *args)

    @classmethod
    def perform_in(cls, interval: Interval | None, *args: Any) -> Any:
        """Schedule a new job to run after ``interval`` seconds."""

        return cls(job_args=args).schedule(interval=interval)

    @classmethod
    def perform_at(cls, time_at: TimeAt | None, *args: Any) -> Any:
        """Schedule a new job to run at ``time_at``."""

        return cls(job_args=args).schedule(time_at=time_at)

    # ------------------------------------------------------------------
    # Instance operations
    # ------------------------------------------------------------------

    @property
    def job_id(self) -> str:
        return self._job_id

    @property
    def logger(self) -> WorkerLogger:
        if self._logger is None:
            self._logger = WorkerLogger(self)
        return self._logger

    def perform(self, *args: Any) -> Any:
        raise NotImplementedError(f"{type(self).__qualname__} must implement perform()")

    def execute(self) -> Any:
        """Run ``perform`` inside the server middleware chain.

        Failures with retries left are re-raised unchanged. Once the retry
        budget is exhausted the failure is re-raised as ``DeadWorkerError``.
        """

        self.logger.info("Starting job...")
        result = get_config().server_middleware.invoke(self, self._perform_with_retry_policy)
        self.logger.info("Job done")
        return result

    def schedule(
        self,
        interval: Interval | None = None,
        time_at: TimeAt | None = None,
    ) -> Any:
        """Hand this job to the dispatcher through the client middleware chain.

        With neither ``interval`` nor ``time_at`` the job is dispatched
        immediately. Returns whatever the dispatcher returns.
        """

        if interval is not None and time_at is not None:
            raise ValueError("Pass either interval or time_at, not both.")

        def _dispatch() -> Any:
            dispatcher = get_config().dispatcher
            if dispatcher is None:
                raise MissingDispatcherError(
                    "No dispatcher configured. Call cloudtasker.configure(dispatcher=...).",
                )
            return dispatcher.schedule(self.to_descriptor(), interval=interval, time_at=time_at)

        return get_config().client_middleware.invoke(self, _dispatch)

    def reenqueue(self, interval: Interval | None) -> Any:
        """Schedule this job again with the same ``job_id``.

        Used when a job must pause, e.g. because a third-party API is
        throttling it. This is not a retry: ``job_retries`` is unchanged.
        """

        self.job_reenqueued = True
        return self.schedule(interval=interval)

    def new_instance(self) -> Worker:
        """Return a copy with the same args and metadata but a fresh identity."""

        return type(self)(job_args=self.job_args, job_meta=self.job_meta)

    def job_dead(self) -> bool:
        """Return True when the retry budget is exhausted."""

        return self.job_retries >= type(self).max_retries()

    def to_descriptor(self) -> JobDescriptor:
        return JobDescriptor(
            worker=self.worker_name(),
            job_id=self.job_id,
            job_args=list(self.job_args),
            job_meta=self.job_meta.to_dict(),
            job_retries=self.job_retries,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.to_descriptor().to_dict()

    def to_json(self) -> str:
        return self.to_descriptor().to_json()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Worker):
            return NotImplemented
        return type(other) is type(self) and other.job_id == self.job_id

    def __hash__(self) -> int:
        return hash((type(self), self.job_id))

    def __repr__(self) -> str:
        return (
            f"{type(self).__qualname__}(job_id={self.job_id!r}, job_args={self.job_args!r}, "
            f"job_retries={self.job_retries})"
        )

    def _perform_with_retry_policy(self) -> Any:
        try:
            return self.perform(*self.job_args)
        except Exception as error:
            self._run_hook("on_error", error)
            if not self.job_dead():
                raise

            self.logger.info("Job dead")
            self._run_hook("on_dead", error)
            raise DeadWorkerError(error) from error

    def _run_hook(self, name: str, error: Exception) -> None:
        hook = getattr(self, name, None)
        if hook is None:
            return
        try:
            hook(error)
        except Exception as hook_error:  # noqa: BLE001
            self.logger.warning("%s hook failed: %s", name, hook_error, exc_info=True)
            self._report_hook_error(hook_error)

    def _report_hook_error(self, hook_error: Exception) -> None:
        reporter = get_config().error_reporter
        if reporter is None:
            return
        try:
            reporter(hook_error, self)
        except Exception:  # noqa: BLE001
            self.logger.exception("Error reporter failed")
