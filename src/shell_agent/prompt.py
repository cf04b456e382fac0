"""Three-layer prompt assembly: system, piped input, task."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from shell_agent.errors import ConfigError, InputError
from shell_agent.models import AssembledPrompt, PromptLayer, Request

logger = logging.getLogger(__name__)

LAYER_SEPARATOR = "\n\n"
NEEDS_INPUT_MESSAGE = "no input provided (try 'agent --help')"


def load_system_prompt(inline: str | None, path: Path | None) -> str | None:
    """Return the system prompt from an inline value or a file."""

    if inline is not None and path is not None:
        raise ConfigError("use either --system or --system-file, not both")
    if path is None:
        return inline
    try:
        return path.read_text("utf-8")
    except FileNotFoundError as error:
        raise ConfigError(f"system prompt file not found: {path}") from error
    except UnicodeDecodeError as error:
        raise ConfigError(f"system prompt file is not valid UTF-8: {path}") from error
    except OSError as error:
        raise ConfigError(f"cannot read system prompt file {path}: {error}") from error


def read_piped_input(stream: BinaryIO) -> str | None:
    """Consume stdin when it is a pipe or file; a terminal yields no input.

    Bytes are decoded without newline translation, and undecodable bytes
    are kept as surrogate escapes so they can be re-encoded unchanged.
    """

    if stream.isatty():
        return None
    return stream.read().decode("utf-8", errors="surrogateescape")


def assemble_prompt(request: Request) -> AssembledPrompt:
    """Join the present layers in fixed system, input, task order.

    Empty or whitespace-only layers are dropped entirely, so no stray
    separators appear. Layer text itself is forwarded unchanged.
    """

    if not _present(request.piped_input) and not _present(request.task):
        raise InputError(NEEDS_INPUT_MESSAGE)

    candidates = (
        ("system", request.system_prompt),
        ("input", request.piped_input),
        ("task", request.task),
    )
    layers = tuple(
        PromptLayer(name=name, text=text)
        for name, text in candidates
        if text is not None and _present(text)
    )
    prompt = AssembledPrompt(
        layers=layers,
        text=LAYER_SEPARATOR.join(layer.text for layer in layers),
    )
    logger.debug(
        "assembled prompt: layers=%s chars=%d",
        ",".join(prompt.layer_names),
        len(prompt.text),
    )
    return prompt


def _present(value: str | None) -> bool:
    return value is not None and bool(value.strip())
