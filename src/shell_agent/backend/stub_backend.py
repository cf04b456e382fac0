"""Deterministic, network-free backend backed by a file counter."""

from __future__ import annotations

import logging
from pathlib import Path

from shell_agent.errors import ConfigError
from shell_agent.models import AssembledPrompt, Response

logger = logging.getLogger(__name__)

STUB_RESPONSE_TEMPLATE = "LLM return {count}"


class StubCounter:
    """Persistent counter kept as a decimal integer in a single small file.

    A missing or empty file reads as zero, so deleting the file restarts
    the sequence at 1. Increments are sequential only; concurrent
    invocations may observe the same value.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> int:
        try:
            raw = self.path.read_text("utf-8").strip()
        except FileNotFoundError:
            return 0
        except OSError as error:
            raise ConfigError(f"cannot read stub counter {self.path}: {error}") from error
        except UnicodeDecodeError as error:
            raise ConfigError(f"stub counter file is corrupt: {self.path}") from error
        if not raw:
            return 0
        try:
            value = int(raw)
        except ValueError as error:
            raise ConfigError(f"stub counter file is corrupt: {self.path}") from error
        if value < 0:
            raise ConfigError(f"stub counter file is corrupt: {self.path}")
        return value

    def increment(self) -> int:
        value = self.read() + 1
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(f"{value}\n", "utf-8")
        except OSError as error:
            raise ConfigError(f"cannot write stub counter {self.path}: {error}") from error
        return value

    def reset(self) -> None:
        self.path.unlink(missing_ok=True)


class StubBackend:
    """Return a templated string embedding the next counter value."""

    name = "stub"

    def __init__(self, counter: StubCounter) -> None:
        self._counter = counter

    def invoke(self, prompt: AssembledPrompt) -> Response:
        count = self._counter.increment()
        logger.debug(
            "stub invocation %d (counter=%s, prompt chars=%d)",
            count,
            self._counter.path,
            len(prompt.text),
        )
        return Response(text=STUB_RESPONSE_TEMPLATE.format(count=count))
