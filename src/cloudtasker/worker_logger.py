"""Logger adapter that stamps every record with worker context."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cloudtasker.worker import Worker

logger = logging.getLogger("cloudtasker")


class WorkerLogger(logging.LoggerAdapter):
    """Prefix messages with ``[Cloudtasker][<worker>][<job_id>]``.

    The worker tag, job id and metadata are also attached as ``extra`` so
    structured handlers can index them.
    """

    def __init__(self, worker: Worker, base: logging.Logger | None = None) -> None:
        super().__init__(base or logger, {})
        self.worker = worker

    def process(
        self,
        msg: Any,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[Any, MutableMapping[str, Any]]:
        tag = self.worker.worker_name()
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("worker", tag)
        extra.setdefault("job_id", self.worker.job_id)
        extra.setdefault("job_meta", self.worker.job_meta.to_dict())
        kwargs["extra"] = extra
        return f"[Cloudtasker][{tag}][{self.worker.job_id}] {msg}", kwargs
