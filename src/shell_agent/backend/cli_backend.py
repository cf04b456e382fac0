"""Subprocess-based backend for local LLM command-line tools."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess

from shell_agent.errors import BackendError, ConfigError, ResponseShapeError, TransportError
from shell_agent.models import AssembledPrompt, Response

logger = logging.getLogger(__name__)

_STDERR_TAIL_CHARS = 400


class CliAgentBackend:
    """Render a command template, run it once, and return its stdout.

    Templates may reference ``{model}`` and ``{prompt}``. When ``{prompt}``
    is absent the prompt is written to the child's stdin instead.
    """

    def __init__(self, *, name: str, command_template: str, model: str) -> None:
        self.name = name
        self.command_template = command_template
        self.model = model

    def invoke(self, prompt: AssembledPrompt) -> Response:
        """Run the rendered command once and return its stdout as the response."""

        argv, use_stdin = build_run_args(
            command_template=self.command_template,
            model=self.model,
            prompt=prompt.text,
        )
        logger.debug("running %s backend: %s", self.name, shlex.join(argv[:1]))
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                input=_encode(prompt.text) if use_stdin else None,
                stdin=None if use_stdin else subprocess.DEVNULL,
                capture_output=True,
                check=False,
                env=os.environ.copy(),
            )
        except FileNotFoundError as error:
            raise TransportError(f"{self.name} backend command not found: {argv[0]}") from error
        except OSError as error:
            raise TransportError(f"{self.name} backend failed to start: {error}") from error

        logger.debug("%s backend exited with code %d", self.name, completed.returncode)
        if completed.returncode != 0:
            detail = (
                _tail(_decode_lenient(completed.stderr))
                or _tail(_decode_lenient(completed.stdout))
                or "no output"
            )
            raise BackendError(
                f"{self.name} backend exited with code {completed.returncode}: {detail}",
            )
        try:
            text = completed.stdout.decode("utf-8")
        except UnicodeDecodeError as error:
            raise ResponseShapeError(f"{self.name} backend returned non-UTF-8 output") from error
        if not text.strip():
            raise ResponseShapeError(f"{self.name} backend returned an empty response")
        return Response(text=text)


def build_run_args(
    *,
    command_template: str,
    model: str,
    prompt: str,
) -> tuple[list[str], bool]:
    """Render a template into argv; the flag says whether stdin carries the prompt."""

    stripped = command_template.strip()
    if not stripped:
        raise ConfigError("CLI backend command template is empty.")

    use_stdin = "{prompt}" not in stripped
    try:
        rendered = stripped.format(
            model=shlex.quote(model),
            prompt=shlex.quote(prompt),
        )
    except (KeyError, IndexError) as error:
        raise ConfigError(f"Unsupported command template placeholder: {error}") from error

    try:
        argv = shlex.split(rendered)
    except ValueError as error:
        raise ConfigError(f"Invalid CLI backend command template: {error}") from error
    if not argv:
        raise ConfigError("CLI backend command template rendered empty command.")
    return argv, use_stdin


def command_head(command_template: str) -> str | None:
    """Return the executable named by a template, used for PATH probing."""

    try:
        parts = shlex.split(command_template)
    except ValueError:
        return None
    return parts[0] if parts else None


def _encode(text: str) -> bytes:
    # Piped input carries undecodable bytes as surrogate escapes.
    return text.encode("utf-8", errors="surrogateescape")


def _decode_lenient(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def _tail(value: str) -> str:
    compact = value.strip()
    if len(compact) <= _STDERR_TAIL_CHARS:
        return compact
    return "..." + compact[-_STDERR_TAIL_CHARS:]
