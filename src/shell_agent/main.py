"""CLI entrypoint for the agent pipeline primitive."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
from click import get_binary_stream

from shell_agent import __version__
from shell_agent.config import Settings
from shell_agent.errors import AgentError, ConfigError
from shell_agent.logging_setup import configure_logging
from shell_agent.models import BackendName, ExitCode, Request
from shell_agent.prompt import assemble_prompt, load_system_prompt, read_piped_input
from shell_agent.routing import dispatch, parse_backend

click.rich_click.OPTIONS_PANEL_TITLE = "OPTIONS"
PROG_NAME = "agent"

logger = logging.getLogger(__name__)


class AgentCommand(click.RichCommand):
    """Command that maps every usage or runtime error to exit status 1.

    Click reports usage errors with status 2; scripts built on this tool
    only distinguish success from failure, and expect ``agent: <message>``
    on stderr.
    """

    def main(  # type: ignore[override]
        self,
        args: Any = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        try:
            result = super().main(
                args=args,
                prog_name=prog_name or PROG_NAME,
                complete_var=complete_var,
                standalone_mode=False,
                **extra,
            )
        except click.ClickException as error:
            _report_error(error.format_message())
            result = ExitCode.FAILURE
        except click.Abort:
            _report_error("aborted")
            result = ExitCode.FAILURE
        if not standalone_mode:
            return result
        sys.exit(int(result or ExitCode.SUCCESS))


@click.command(
    cls=AgentCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option(
    "--backend",
    type=click.Choice(BackendName.choices(), case_sensitive=False),
    default=None,
    help="Backend to use. Defaults to AGENT_BACKEND, then auto-detection.",
)
@click.option(
    "--model",
    default=None,
    help="Model id passed to the backend. Defaults to AGENT_MODEL or a per-backend default.",
)
@click.option(
    "--system",
    "system_prompt",
    default=None,
    help="Inline system prompt, placed before piped input and the task.",
)
@click.option(
    "--system-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Read the system prompt from a file.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Trace backend selection and invocation to stderr.",
)
@click.argument("prompt", nargs=-1)
def agent(  # noqa: PLR0913
    backend: str | None,
    model: str | None,
    system_prompt: str | None,
    system_file: Path | None,
    verbose: bool,
    prompt: tuple[str, ...],
) -> ExitCode:
    """Send a prompt to an LLM backend and print the reply on stdout.

    SYNOPSIS: agent OPTIONS PROMPT, optionally fed by a pipe.

    The request is built from up to three layers, always in this order:
    system prompt, piped stdin, then PROMPT. At least one of stdin or PROMPT
    is required.

    Backends: claude-code, llm, api, stub, or auto (claude CLI on PATH, then
    llm CLI on PATH, then ANTHROPIC_API_KEY). Diagnostics go to stderr only.
    Exit status is 0 on success and 1 on any error.
    """

    return run(
        backend=backend,
        model=model,
        system_prompt=system_prompt,
        system_file=system_file,
        verbose=verbose,
        task=" ".join(prompt) if prompt else None,
    )


def run(  # noqa: PLR0913
    *,
    backend: str | None,
    model: str | None,
    system_prompt: str | None,
    system_file: Path | None,
    verbose: bool,
    task: str | None,
) -> ExitCode:
    """Assemble, dispatch once and write the response; returns the exit status."""

    configure_logging(verbose=verbose)
    try:
        settings = _load_settings()
        if settings.verbose and not verbose:
            configure_logging(verbose=True)
        request = Request(
            system_prompt=load_system_prompt(system_prompt, system_file),
            piped_input=read_piped_input(get_binary_stream("stdin")),
            task=task,
            backend=parse_backend(backend or settings.backend),
            model=model,
            verbose=verbose or settings.verbose,
        )
        logger.debug(
            "request: backend=%s model=%s system=%s input=%s task=%s",
            request.backend.value,
            request.model or "-",
            request.system_prompt is not None,
            request.piped_input is not None,
            request.task is not None,
        )
        assembled = assemble_prompt(request)
        response = dispatch(request, assembled, settings)
    except AgentError as error:
        _report_error(str(error))
        return error.exit_code

    click.echo(response.text, nl=not response.text.endswith("\n"), color=True)
    return response.exit_code


def _load_settings() -> Settings:
    try:
        settings = Settings.from_env()
        settings.validate()
    except ValueError as error:
        raise ConfigError(str(error)) from error
    return settings


def _report_error(message: str) -> None:
    click.echo(f"{PROG_NAME}: {message}", err=True)


if __name__ == "__main__":  # pragma: no cover
    agent()
