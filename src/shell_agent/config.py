"""Runtime configuration for backend selection and invocation."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CLAUDE_COMMAND_TEMPLATE = "claude -p --model {model}"
DEFAULT_LLM_COMMAND_TEMPLATE = "llm --model {model}"
DEFAULT_API_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_STUB_FILENAME = "agent-stub-counter"

DEFAULT_MODELS: dict[str, str] = {
    "claude-code": "sonnet",
    "llm": "gpt-4o-mini",
    "api": "claude-sonnet-4-20250514",
    "stub": "stub",
}


def _default_stub_path() -> Path:
    return Path(tempfile.gettempdir()) / DEFAULT_STUB_FILENAME


@dataclass(slots=True)
class StubSettings:
    """Deterministic stub backend settings."""

    counter_path: Path = field(default_factory=_default_stub_path)


@dataclass(slots=True)
class CliAgentSettings:
    """Command templates for local CLI backends."""

    claude_command_template: str = DEFAULT_CLAUDE_COMMAND_TEMPLATE
    llm_command_template: str = DEFAULT_LLM_COMMAND_TEMPLATE


@dataclass(slots=True)
class ApiSettings:
    """Direct HTTP API backend settings."""

    api_key: str | None = None
    base_url: str = DEFAULT_API_BASE_URL
    api_version: str = "2023-06-01"
    max_tokens: int = 4096
    request_timeout_seconds: float = 300.0


@dataclass(slots=True)
class Settings:
    """Application settings grouped by backend concern."""

    backend: str = "auto"
    model: str | None = None
    verbose: bool = False
    stub: StubSettings = field(default_factory=StubSettings)
    cli: CliAgentSettings = field(default_factory=CliAgentSettings)
    api: ApiSettings = field(default_factory=ApiSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults suited to interactive shells."""

        stub_file = os.getenv("AGENT_STUB_FILE", "").strip()
        return cls(
            backend=os.getenv("AGENT_BACKEND", "auto").strip().lower() or "auto",
            model=os.getenv("AGENT_MODEL", "").strip() or None,
            verbose=_env_bool("AGENT_VERBOSE", default=False),
            stub=StubSettings(
                counter_path=Path(stub_file) if stub_file else _default_stub_path(),
            ),
            cli=CliAgentSettings(
                claude_command_template=os.getenv(
                    "AGENT_CLAUDE_COMMAND",
                    DEFAULT_CLAUDE_COMMAND_TEMPLATE,
                ),
                llm_command_template=os.getenv(
                    "AGENT_LLM_COMMAND",
                    DEFAULT_LLM_COMMAND_TEMPLATE,
                ),
            ),
            api=ApiSettings(
                api_key=os.getenv("ANTHROPIC_API_KEY") or None,
                base_url=os.getenv("AGENT_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
                max_tokens=int(os.getenv("AGENT_API_MAX_TOKENS", "4096")),
                request_timeout_seconds=float(
                    os.getenv("AGENT_API_TIMEOUT_SECONDS", "300"),
                ),
            ),
        )

    def model_for(self, backend: str, override: str | None = None) -> str:
        """Return the explicit model, the env model, or the backend default."""

        return override or self.model or DEFAULT_MODELS.get(backend, "")

    def validate(self) -> None:
        """Raise configuration error for values that cannot drive a backend."""

        if self.api.max_tokens <= 0:
            raise ValueError("AGENT_API_MAX_TOKENS must be a positive integer.")
        if self.api.request_timeout_seconds <= 0:
            raise ValueError("AGENT_API_TIMEOUT_SECONDS must be > 0.")
        for name, template in (
            ("AGENT_CLAUDE_COMMAND", self.cli.claude_command_template),
            ("AGENT_LLM_COMMAND", self.cli.llm_command_template),
        ):
            if not template.strip():
                raise ValueError(f"{name} must not be empty.")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
