from __future__ import annotations

import json
from datetime import datetime

import allure
import pytest

from cloudtasker.codec import decode, decode_descriptor, encode
from cloudtasker.descriptor import JobDescriptor
from cloudtasker.errors import JobEncodeError
from sample_workers import HookedWorker, NoPerformWorker, SendEmail, UnregisteredWorker

pytestmark = [
    allure.epic("Worker Runtime"),
    allure.feature("Job Codec"),
]


def test_encode_writes_descriptor_with_type_tag() -> None:
    job = SendEmail(job_args=["a@x.com"], job_id="abc", job_meta={"trace": "t-1"})

    assert json.loads(encode(job)) == {
        "worker": "SendEmail",
        "job_id": "abc",
        "job_args": ["a@x.com"],
        "job_meta": {"trace": "t-1"},
        "job_retries": 0,
    }


def test_decode_round_trip_preserves_identity_args_and_meta() -> None:
    job = SendEmail(
        job_args=["a@x.com", "welcome"],
        job_meta={"nested": {"ids": [1, 2]}},
        job_retries=3,
    )

    decoded = decode(encode(job))

    assert isinstance(decoded, SendEmail)
    assert decoded == job
    assert decoded.job_args == ["a@x.com", "welcome"]
    assert decoded.job_meta == {"nested": {"ids": [1, 2]}}
    assert decoded.job_retries == 3
    assert decoded.job_reenqueued is False


def test_decoded_send_email_is_not_dead_by_default() -> None:
    decoded = decode(SendEmail(job_args=["a@x.com"], job_id="abc").to_json())

    assert decoded is not None
    assert decoded.job_id == "abc"
    assert decoded.job_dead() is False


def test_reencoding_decoded_payload_reproduces_descriptor() -> None:
    payload = {
        "worker": "SendEmail",
        "job_id": "abc",
        "job_args": ["a@x.com"],
        "job_meta": {"k": "v"},
        "job_retries": 2,
    }

    decoded = decode(json.dumps(payload))

    assert decoded is not None
    assert decoded.to_dict() == payload


def test_encode_rejects_non_json_arguments() -> None:
    job = SendEmail(job_args=[datetime(2026, 1, 1)])

    with pytest.raises(JobEncodeError, match="not JSON-representable"):
        encode(job)
    with pytest.raises(TypeError):
        job.to_json()


@pytest.mark.parametrize(
    "text",
    [
        "",
        '{"worker": "SendEmail", "job_id": "abc"',
        "[1, 2, 3]",
        '"SendEmail"',
        "null",
        b"\xff\xfe",
    ],
)
def test_decode_returns_none_for_malformed_text(text: str | bytes) -> None:
    assert decode(text) is None


@pytest.mark.parametrize(
    "payload",
    [
        {"job_id": "abc", "job_args": []},
        {"worker": None},
        {"worker": ""},
        {"worker": 42},
        {"worker": "NoSuchWorker"},
        {"worker": "os.system", "job_args": ["rm -rf /"]},
        {"worker": "NoPerformWorker"},
        {"worker": "SendEmail", "job_args": "a@x.com"},
        {"worker": "SendEmail", "job_meta": ["not", "a", "map"]},
        {"worker": "SendEmail", "job_retries": -1},
        {"worker": "SendEmail", "job_retries": "3"},
        {"worker": "SendEmail", "job_id": 123},
        {"worker": "SendEmail", "job_id": ""},
    ],
)
def test_decode_descriptor_fails_soft(payload: dict[str, object]) -> None:
    assert decode_descriptor(payload) is None
    assert decode(json.dumps(payload)) is None


@pytest.mark.parametrize("raw", [None, ["SendEmail"], "SendEmail", 42])
def test_decode_descriptor_returns_none_for_non_mapping(raw: object) -> None:
    assert decode_descriptor(raw) is None


def test_decode_returns_none_for_deeply_nested_payload() -> None:
    depth = 100_000
    text = '{"worker": "SendEmail", "job_args": ' + "[" * depth + "]" * depth + "}"

    assert decode(text) is None


def test_decode_descriptor_returns_none_for_deeply_nested_meta() -> None:
    meta: dict[str, object] = {}
    node = meta
    for _ in range(100_000):
        child: dict[str, object] = {}
        node["child"] = child
        node = child

    assert decode_descriptor({"worker": "SendEmail", "job_meta": meta}) is None


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_decode_rejects_non_standard_json_constants(constant: str) -> None:
    assert decode(f'{{"worker": "SendEmail", "job_args": [{constant}]}}') is None


def test_decoded_payload_with_floats_reencodes() -> None:
    decoded = decode('{"worker": "SendEmail", "job_args": [1.5, 1e300]}')

    assert decoded is not None
    assert json.loads(encode(decoded))["job_args"] == [1.5, 1e300]


def test_decode_descriptor_rejects_unregistered_class_name() -> None:
    payload = UnregisteredWorker().to_dict()

    assert decode_descriptor(payload) is None


def test_registered_class_without_perform_is_not_a_worker() -> None:
    assert decode_descriptor(NoPerformWorker().to_dict()) is None


def test_decode_descriptor_ignores_extra_fields_and_normalizes_missing_values() -> None:
    decoded = decode_descriptor(
        {
            "worker": "SendEmail",
            "job_args": ["a@x.com"],
            "job_retries": None,
            "queue": "mailers",
            "priority": 7,
        },
    )

    assert isinstance(decoded, SendEmail)
    assert decoded.job_retries == 0
    assert decoded.job_meta == {}
    assert decoded.job_id


def test_decode_descriptor_accepts_descriptor_objects() -> None:
    descriptor = JobDescriptor(worker="HookedWorker", job_id="h-1", job_args=["boom"])

    decoded = decode_descriptor(descriptor)

    assert isinstance(decoded, HookedWorker)
    assert decoded.job_id == "h-1"
    assert decoded.error_calls == []
