"""Backend strategy implementations."""

from shell_agent.backend.api_backend import ApiBackend
from shell_agent.backend.base import LlmBackend
from shell_agent.backend.cli_backend import CliAgentBackend
from shell_agent.backend.stub_backend import StubBackend, StubCounter

__all__ = [
    "ApiBackend",
    "CliAgentBackend",
    "LlmBackend",
    "StubBackend",
    "StubCounter",
]
