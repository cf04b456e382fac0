"""Shared test fixtures."""

from __future__ import annotations

import logging
import shlex
import sys
from pathlib import Path

import pytest

ECHO_AGENT_COMMAND = f"{shlex.quote(sys.executable)} -m shell_agent.backend.echo_agent"

_AGENT_ENV_VARS = (
    "AGENT_BACKEND",
    "AGENT_MODEL",
    "AGENT_STUB_FILE",
    "AGENT_VERBOSE",
    "AGENT_CLAUDE_COMMAND",
    "AGENT_LLM_COMMAND",
    "AGENT_API_BASE_URL",
    "AGENT_API_MAX_TOKENS",
    "AGENT_API_TIMEOUT_SECONDS",
    "ANTHROPIC_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolated_agent_env(monkeypatch):
    """Keep the developer's shell configuration out of every test."""
    for name in _AGENT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    package_logger = logging.getLogger("shell_agent")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture()
def echo_agent_command() -> str:
    """Command template prefix running the bundled echo agent."""
    return ECHO_AGENT_COMMAND


@pytest.fixture()
def stub_file(tmp_path: Path, monkeypatch) -> Path:
    """Select the stub backend with a fresh counter file."""
    path = tmp_path / "stub-counter"
    monkeypatch.setenv("AGENT_BACKEND", "stub")
    monkeypatch.setenv("AGENT_STUB_FILE", str(path))
    return path


@pytest.fixture()
def echo_llm(monkeypatch) -> str:
    """Point the llm backend at the bundled echo agent."""
    command = f"{ECHO_AGENT_COMMAND} --prefix '' "
    monkeypatch.setenv("AGENT_BACKEND", "llm")
    monkeypatch.setenv("AGENT_LLM_COMMAND", command)
    return command
