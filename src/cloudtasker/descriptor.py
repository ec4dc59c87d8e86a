"""Serializable snapshot of a worker invocation."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cloudtasker.errors import JobEncodeError


@dataclass(slots=True)
class JobDescriptor:
    """Canonical wire shape of a worker.

    ``job_reenqueued`` is transient and intentionally absent.
    """

    worker: str
    job_id: str | None = None
    job_args: list[Any] = field(default_factory=list)
    job_meta: dict[str, Any] = field(default_factory=dict)
    job_retries: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the descriptor as a plain JSON-ready mapping."""

        return {
            "worker": self.worker,
            "job_id": self.job_id,
            "job_args": list(self.job_args),
            "job_meta": dict(self.job_meta),
            "job_retries": self.job_retries,
        }

    def to_json(self) -> str:
        """Encode the descriptor as JSON text."""

        try:
            return json.dumps(self.to_dict(), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as error:
            raise JobEncodeError(
                f"Worker {self.worker!r} ({self.job_id}) is not JSON-representable: {error}",
            ) from error

    @classmethod
    def from_mapping(cls, raw: Mapping[Any, Any]) -> JobDescriptor:
        """Validate a decoded mapping and build a descriptor.

        Keys are compared by their string form. Unknown keys are ignored.
        """

        payload = {str(getattr(key, "value", key)): value for key, value in raw.items()}
        worker = payload.get("worker")
        if not isinstance(worker, str) or not worker.strip():
            raise ValueError("descriptor.worker must be a non-empty string")

        job_id = payload.get("job_id")
        if job_id is not None and not isinstance(job_id, str):
            raise TypeError("descriptor.job_id must be a string when provided")
        if job_id is not None and not job_id.strip():
            raise ValueError("descriptor.job_id must not be empty")

        job_args = payload.get("job_args")
        if job_args is None:
            job_args = []
        if not isinstance(job_args, list | tuple):
            raise TypeError("descriptor.job_args must be an array")

        job_meta = payload.get("job_meta")
        if job_meta is None:
            job_meta = {}
        if not isinstance(job_meta, Mapping):
            raise TypeError("descriptor.job_meta must be an object")

        job_retries = payload.get("job_retries")
        if job_retries is None:
            job_retries = 0
        if isinstance(job_retries, bool) or not isinstance(job_retries, int):
            raise TypeError("descriptor.job_retries must be an integer")
        if job_retries < 0:
            raise ValueError("descriptor.job_retries must be >= 0")

        return cls(
            worker=worker,
            job_id=job_id,
            job_args=list(job_args),
            job_meta=dict(job_meta),
            job_retries=job_retries,
        )
