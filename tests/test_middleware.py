from __future__ import annotations

import allure
import pytest

from cloudtasker.config import configure
from cloudtasker.errors import DeadWorkerError
from cloudtasker.middleware import MiddlewareChain
from sample_workers import FailingWorker, SendEmail

pytestmark = [
    allure.epic("Worker Runtime"),
    allure.feature("Middleware"),
]


def _tracer(label: str, trace: list[str]):
    def _middleware(job, call_next):
        trace.append(f"{label}:in")
        result = call_next()
        trace.append(f"{label}:out")
        return result

    return _middleware


class _Prefix:
    def __init__(self, prefix: str = ">") -> None:
        self.prefix = prefix

    def __call__(self, job, call_next):
        return f"{self.prefix}{call_next()}"


def test_chain_runs_outermost_first() -> None:
    trace: list[str] = []
    chain = MiddlewareChain()
    chain.add(_tracer("a", trace))
    chain.add(_tracer("b", trace))

    result = chain.invoke(object(), lambda: trace.append("terminal") or "ok")

    assert result == "ok"
    assert trace == ["a:in", "b:in", "terminal", "b:out", "a:out"]


def test_empty_chain_calls_terminal() -> None:
    assert MiddlewareChain().invoke(object(), lambda: 42) == 42


def test_chain_management_operations() -> None:
    first, second, third, fourth = (object() for _ in range(4))
    chain = MiddlewareChain()
    chain.add(second)
    chain.prepend(first)
    chain.insert_after(second, fourth)
    chain.insert_before(fourth, third)

    assert list(chain) == [first, second, third, fourth]
    assert chain.exists(third)

    chain.add(first)
    assert list(chain) == [second, third, fourth, first]

    chain.remove(third)
    assert not chain.exists(third)
    assert len(chain) == 3

    chain.clear()
    assert len(chain) == 0


def test_insert_relative_to_missing_entry_falls_back_to_edges() -> None:
    anchor, head, tail = object(), object(), object()
    chain = MiddlewareChain()
    chain.add(anchor)
    chain.insert_before(object(), head)
    chain.insert_after(object(), tail)

    assert list(chain) == [head, anchor, tail]


def test_class_middleware_is_built_with_registration_kwargs() -> None:
    chain = MiddlewareChain()
    chain.add(_Prefix, prefix="[job] ")

    assert chain.invoke(object(), lambda: "done") == "[job] done"


def test_copy_is_independent() -> None:
    chain = MiddlewareChain()
    chain.add(_Prefix)
    clone = chain.copy()
    clone.clear()

    assert len(chain) == 1


def test_server_middleware_wraps_execute() -> None:
    seen: list[tuple[str, str]] = []

    def _observe(job, call_next):
        seen.append(("start", job.job_id))
        return call_next()

    config = configure()
    config.server_middleware.add(_observe)
    config.server_middleware.add(_Prefix, prefix="wrapped:")

    job = SendEmail(job_args=["a@x.com"], job_id="abc")
    result = job.execute()

    assert seen == [("start", "abc")]
    assert result == "wrapped:{'to': 'a@x.com', 'subject': 'hello'}"


def test_server_middleware_sees_dead_worker_error() -> None:
    captured: list[BaseException] = []

    def _capture(job, call_next):
        try:
            return call_next()
        except Exception as error:
            captured.append(error)
            raise

    configure(max_retries=0).server_middleware.add(_capture)

    with pytest.raises(DeadWorkerError):
        FailingWorker(job_args=["boom"]).execute()

    assert len(captured) == 1
    assert isinstance(captured[0], DeadWorkerError)


def test_server_middleware_can_short_circuit_execution() -> None:
    configure(max_retries=0).server_middleware.add(lambda job, call_next: "skipped")

    assert FailingWorker(job_args=["boom"]).execute() == "skipped"
