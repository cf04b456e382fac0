"""Backend interface for prompt dispatch."""

from __future__ import annotations

from typing import Protocol

from shell_agent.models import AssembledPrompt, Response


class LlmBackend(Protocol):
    """Protocol implemented by backend strategies."""

    name: str

    def invoke(self, prompt: AssembledPrompt) -> Response:
        """Send one assembled prompt and return the normalized response."""
