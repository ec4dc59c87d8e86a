"""Encode workers to JSON and rebuild them from delivered payloads.

Decoding is a soft-failure boundary: payloads come from the transport and are
treated as untrusted, so every malformed input yields ``None`` instead of an
exception.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from cloudtasker.descriptor import JobDescriptor
from cloudtasker.registry import resolve_worker
from cloudtasker.worker import Worker

logger = logging.getLogger(__name__)


def descriptor_of(job: Worker) -> JobDescriptor:
    """Return the descriptor snapshot of ``job``."""

    return job.to_descriptor()


def encode(job: Worker) -> str:
    """Return the JSON text of ``job``'s descriptor.

    Raises ``JobEncodeError`` when an argument or metadata value is not
    JSON-representable.
    """

    return descriptor_of(job).to_json()


def decode(text: str | bytes) -> Worker | None:
    """Rebuild a worker from JSON text, or return None."""

    try:
        raw = json.loads(text, parse_constant=_reject_constant)
    except (TypeError, ValueError, RecursionError):
        logger.warning("Discarding worker payload: not valid JSON")
        return None
    if not isinstance(raw, Mapping):
        logger.warning("Discarding worker payload: expected a JSON object")
        return None
    return decode_descriptor(raw)


def decode_descriptor(raw: object) -> Worker | None:
    """Rebuild a worker from a structured descriptor, or return None.

    Only ``job_args``, ``job_id``, ``job_meta`` and ``job_retries`` are used;
    other fields are ignored.
    """

    if not isinstance(raw, Mapping | JobDescriptor):
        logger.warning(
            "Discarding worker payload: expected a mapping, got %s",
            type(raw).__name__,
        )
        return None
    try:
        descriptor = raw if isinstance(raw, JobDescriptor) else JobDescriptor.from_mapping(raw)
    except (TypeError, ValueError) as error:
        logger.warning("Discarding worker payload: %s", error)
        return None

    worker_cls = resolve_worker(descriptor.worker)
    if worker_cls is None:
        logger.warning("Discarding worker payload: unknown worker %r", descriptor.worker)
        return None
    if not _implements_worker(worker_cls):
        logger.warning(
            "Discarding worker payload: %r does not implement a worker",
            descriptor.worker,
        )
        return None

    try:
        return worker_cls(
            job_args=descriptor.job_args,
            job_id=descriptor.job_id,
            job_meta=descriptor.job_meta,
            job_retries=descriptor.job_retries,
        )
    except (TypeError, ValueError, RecursionError) as error:
        logger.warning("Discarding worker payload for %r: %s", descriptor.worker, error)
        return None


def _reject_constant(token: str) -> float:
    raise ValueError(f"Non-standard JSON constant {token}")


def _implements_worker(candidate: object) -> bool:
    if not isinstance(candidate, type) or not issubclass(candidate, Worker):
        return False
    return callable(getattr(candidate, "perform", None)) and candidate.perform is not Worker.perform
