"""CLI entrypoint for cloudtasker."""

from collections.abc import Callable

import rich_click as click

from cloudtasker import __version__
from cloudtasker.controllers import (
    CommandResult,
    InspectPayloadCommand,
    RunPayloadCommand,
    WorkerCliController,
)

click.rich_click.USE_MARKDOWN = True
WORKER_CONTROLLER = WorkerCliController()

_worker_module_option = click.option(
    "--worker-module",
    "worker_modules",
    multiple=True,
    help="Module to import so its workers get registered. Can be repeated.",
)


@click.group()
@click.version_option(version=__version__, prog_name="cloudtasker")
def cloudtasker() -> None:
    """Cloudtasker worker payload tools."""


@cloudtasker.command("inspect")
@click.argument("payload", type=click.File("r"))
@_worker_module_option
def inspect_payload(payload, worker_modules: tuple[str, ...]) -> None:
    """Decode a worker payload file (`-` for stdin) and describe it."""

    _emit(
        _run_controller(
            lambda: WORKER_CONTROLLER.inspect_payload(
                InspectPayloadCommand(payload=payload.read(), worker_modules=worker_modules),
            ),
        ),
        failure_message="Payload is not a valid worker.",
    )


@cloudtasker.command("run")
@click.argument("payload", type=click.File("r"))
@_worker_module_option
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=None,
    help="Attempt counter from the transport. Overrides job_retries in the payload.",
)
def run_payload(payload, worker_modules: tuple[str, ...], retries: int | None) -> None:
    """Execute a worker payload file (`-` for stdin) in this process."""

    _emit(
        _run_controller(
            lambda: WORKER_CONTROLLER.run_payload(
                RunPayloadCommand(
                    payload=payload.read(),
                    worker_modules=worker_modules,
                    retries=retries,
                ),
            ),
        ),
        failure_message="Job execution failed.",
    )


def _run_controller(action: Callable[[], CommandResult]) -> CommandResult:
    try:
        return action()
    except ValueError as error:
        raise click.ClickException(str(error)) from error


def _emit(result: CommandResult, *, failure_message: str) -> None:
    for line in result.lines:
        click.echo(line)
    if not result.success:
        raise click.ClickException(failure_message)


if __name__ == "__main__":  # pragma: no cover
    cloudtasker()
