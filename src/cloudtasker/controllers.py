"""Controllers for worker payload CLI commands."""

from __future__ import annotations

import importlib
import json
from dataclasses import dataclass

from cloudtasker.codec import decode
from cloudtasker.config import Settings, configure, normalize_module_names
from cloudtasker.errors import DeadWorkerError, InvalidWorkerError
from cloudtasker.handler import execute_payload


@dataclass(slots=True)
class InspectPayloadCommand:
    """CLI input for payload inspection."""

    payload: str
    worker_modules: tuple[str, ...] = ()


@dataclass(slots=True)
class RunPayloadCommand:
    """CLI input for payload execution."""

    payload: str
    worker_modules: tuple[str, ...] = ()
    retries: int | None = None


@dataclass(slots=True)
class CommandResult:
    """Lines to render in CLI plus the exit status."""

    lines: list[str]
    success: bool


class WorkerCliController:
    """Decodes and executes worker payloads from the command line."""

    def inspect_payload(self, command: InspectPayloadCommand) -> CommandResult:
        self._prepare(command.worker_modules)
        job = decode(command.payload)
        if job is None:
            return CommandResult(
                lines=["Invalid payload: does not describe a registered worker."],
                success=False,
            )
        return CommandResult(
            lines=[
                f"Worker: {job.worker_name()}",
                f"Job id: {job.job_id}",
                f"Args: {json.dumps(job.job_args, ensure_ascii=False)}",
                f"Meta: {json.dumps(job.job_meta.to_dict(), ensure_ascii=False, sort_keys=True)}",
                f"Retries: {job.job_retries}/{job.max_retries()}",
                f"Dead: {'yes' if job.job_dead() else 'no'}",
            ],
            success=True,
        )

    def run_payload(self, command: RunPayloadCommand) -> CommandResult:
        self._prepare(command.worker_modules)
        try:
            result = execute_payload(command.payload, retries=command.retries)
        except InvalidWorkerError as error:
            return CommandResult(lines=[f"Invalid payload: {error}"], success=False)
        except DeadWorkerError as error:
            return CommandResult(
                lines=[f"Job dead: {type(error.original).__name__}: {error.original}"],
                success=False,
            )
        except Exception as error:  # noqa: BLE001
            return CommandResult(
                lines=[f"Job failed (will retry): {type(error).__name__}: {error}"],
                success=False,
            )
        return CommandResult(
            lines=["Job done", f"Result: {json.dumps(result, ensure_ascii=False, default=repr)}"],
            success=True,
        )

    def _prepare(self, worker_modules: tuple[str, ...]) -> None:
        settings = Settings.from_env()
        configure(max_retries=settings.max_retries)
        for module_name in normalize_module_names(
            list(worker_modules) + list(settings.worker_modules),
        ):
            try:
                importlib.import_module(module_name)
            except ImportError as error:
                raise ValueError(f"Cannot import worker module {module_name!r}") from error
