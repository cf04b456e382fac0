"""Error taxonomy surfaced by the agent CLI."""

from __future__ import annotations

from shell_agent.models import ExitCode


class AgentError(RuntimeError):
    """Fatal, process-terminating error with a stable diagnostic message."""

    exit_code: ExitCode = ExitCode.FAILURE


class InputError(AgentError):
    """No content to process."""


class ConfigError(AgentError):
    """No usable backend, bad option value, or missing referenced file."""


class TransportError(AgentError):
    """Backend process or service could not be reached."""


class BackendError(AgentError):
    """Backend reported an application-level error."""


class ResponseShapeError(AgentError):
    """Backend reply could not be turned into response text."""
