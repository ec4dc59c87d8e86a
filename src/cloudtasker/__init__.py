"""Job lifecycle runtime for push-based task queues."""

from cloudtasker.codec import decode, decode_descriptor, encode
from cloudtasker.config import Config, Settings, configure, get_config, reset_config
from cloudtasker.descriptor import JobDescriptor
from cloudtasker.dispatcher import Dispatcher, InlineDispatcher, ScheduledTask
from cloudtasker.errors import (
    CloudtaskerError,
    DeadWorkerError,
    FailureKind,
    InvalidWorkerError,
    JobEncodeError,
    MissingDispatcherError,
    failure_kind,
)
from cloudtasker.handler import execute_payload
from cloudtasker.meta_store import MetaStore
from cloudtasker.middleware import MiddlewareChain
from cloudtasker.registry import register_worker, resolve_worker
from cloudtasker.worker import Worker

__version__ = "0.1.0"

__all__ = [
    "CloudtaskerError",
    "Config",
    "DeadWorkerError",
    "Dispatcher",
    "FailureKind",
    "InlineDispatcher",
    "InvalidWorkerError",
    "JobDescriptor",
    "JobEncodeError",
    "MetaStore",
    "MiddlewareChain",
    "MissingDispatcherError",
    "ScheduledTask",
    "Settings",
    "Worker",
    "__version__",
    "configure",
    "decode",
    "decode_descriptor",
    "encode",
    "execute_payload",
    "failure_kind",
    "get_config",
    "register_worker",
    "reset_config",
    "resolve_worker",
]
