"""Request, prompt and response value types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ExitCode(IntEnum):
    """Process exit statuses callers script against."""

    SUCCESS = 0
    FAILURE = 1


class BackendName(str, Enum):
    """Closed set of backend strategies selectable from the CLI."""

    AUTO = "auto"
    CLAUDE_CODE = "claude-code"
    LLM = "llm"
    API = "api"
    STUB = "stub"

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True, slots=True)
class Request:
    """Inputs of one invocation, built once from flags, env and stdin."""

    system_prompt: str | None = None
    piped_input: str | None = None
    task: str | None = None
    backend: BackendName = BackendName.AUTO
    model: str | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class PromptLayer:
    """One non-empty section of the assembled prompt."""

    name: str
    text: str


@dataclass(frozen=True, slots=True)
class AssembledPrompt:
    """Ordered system/input/task layers and their joined payload."""

    layers: tuple[PromptLayer, ...]
    text: str

    @property
    def layer_names(self) -> tuple[str, ...]:
        return tuple(layer.name for layer in self.layers)


@dataclass(frozen=True, slots=True)
class Response:
    """Backend outcome written to stdout on success."""

    text: str
    exit_code: ExitCode = ExitCode.SUCCESS
