"""Receiving-side entry point for delivered worker payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cloudtasker.codec import decode, decode_descriptor
from cloudtasker.errors import InvalidWorkerError


def execute_payload(
    payload: str | bytes | Mapping[str, Any],
    *,
    retries: int | None = None,
) -> Any:
    """Decode ``payload`` and execute the worker it describes.

    ``retries`` carries the transport's attempt counter (e.g. a retry-count
    header) and takes precedence over the value stored in the payload.
    Raises ``InvalidWorkerError`` when the payload does not resolve to a
    registered worker; execution errors propagate from ``Worker.execute``.
    """

    job = decode_descriptor(payload) if isinstance(payload, Mapping) else decode(payload)
    if job is None:
        raise InvalidWorkerError("Payload does not describe a registered worker")
    if retries is not None:
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
            raise InvalidWorkerError(f"Invalid retry count: {retries!r}")
        job.job_retries = retries
    return job.execute()
