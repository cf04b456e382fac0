"""Backend resolution and single-shot dispatch."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from shell_agent.backend import ApiBackend, CliAgentBackend, LlmBackend, StubBackend, StubCounter
from shell_agent.backend.cli_backend import command_head
from shell_agent.config import Settings
from shell_agent.errors import ConfigError
from shell_agent.models import AssembledPrompt, BackendName, Request, Response

logger = logging.getLogger(__name__)

Which = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class BackendProbe:
    """One auto-resolution candidate: a concrete backend and its availability check."""

    backend: BackendName
    description: str
    is_available: Callable[[], bool]


def auto_probes(
    settings: Settings,
    *,
    which: Which,
    environ: Mapping[str, str],
) -> list[BackendProbe]:
    """Build the ordered probe list: claude CLI, llm CLI, then API credentials."""

    def on_path(template: str) -> Callable[[], bool]:
        def probe() -> bool:
            executable = command_head(template)
            return executable is not None and which(executable) is not None

        return probe

    claude_exe = command_head(settings.cli.claude_command_template) or "claude"
    llm_exe = command_head(settings.cli.llm_command_template) or "llm"
    return [
        BackendProbe(
            backend=BackendName.CLAUDE_CODE,
            description=f"{claude_exe} on PATH",
            is_available=on_path(settings.cli.claude_command_template),
        ),
        BackendProbe(
            backend=BackendName.LLM,
            description=f"{llm_exe} on PATH",
            is_available=on_path(settings.cli.llm_command_template),
        ),
        BackendProbe(
            backend=BackendName.API,
            description="ANTHROPIC_API_KEY set",
            is_available=lambda: bool(
                settings.api.api_key or environ.get("ANTHROPIC_API_KEY", "").strip(),
            ),
        ),
    ]


def resolve_backend(
    name: BackendName | str,
    settings: Settings,
    *,
    which: Which = shutil.which,
    environ: Mapping[str, str] | None = None,
) -> BackendName:
    """Turn a requested backend into a concrete one; ``auto`` probes in order."""

    requested = parse_backend(name)
    if requested is not BackendName.AUTO:
        return requested

    probes = auto_probes(
        settings,
        which=which,
        environ=os.environ if environ is None else environ,
    )
    for probe in probes:
        if probe.is_available():
            logger.debug("auto backend: %s (%s)", probe.backend.value, probe.description)
            return probe.backend
        logger.debug("auto backend: skip %s (no %s)", probe.backend.value, probe.description)

    tried = ", ".join(probe.description for probe in probes)
    raise ConfigError(
        f"no usable backend found (tried: {tried}); "
        "set --backend or AGENT_BACKEND",
    )


def build_backend(
    name: BackendName,
    settings: Settings,
    *,
    model: str | None = None,
) -> LlmBackend:
    """Instantiate the strategy for a concrete backend name."""

    resolved_model = settings.model_for(name.value, model)
    if name is BackendName.STUB:
        return StubBackend(StubCounter(settings.stub.counter_path))
    if name is BackendName.CLAUDE_CODE:
        return CliAgentBackend(
            name=name.value,
            command_template=settings.cli.claude_command_template,
            model=resolved_model,
        )
    if name is BackendName.LLM:
        return CliAgentBackend(
            name=name.value,
            command_template=settings.cli.llm_command_template,
            model=resolved_model,
        )
    if name is BackendName.API:
        return ApiBackend(settings=settings.api, model=resolved_model)
    raise ConfigError(f"backend {name.value!r} cannot be invoked directly")


def dispatch(
    request: Request,
    prompt: AssembledPrompt,
    settings: Settings,
    *,
    which: Which = shutil.which,
    environ: Mapping[str, str] | None = None,
) -> Response:
    """Resolve, build and invoke exactly one backend for the request."""

    backend_name = resolve_backend(request.backend, settings, which=which, environ=environ)
    backend = build_backend(backend_name, settings, model=request.model)
    logger.debug(
        "dispatching to %s (model=%s)",
        backend_name.value,
        settings.model_for(backend_name.value, request.model),
    )
    return backend.invoke(prompt)


def parse_backend(name: BackendName | str) -> BackendName:
    """Map a flag or env value onto the closed backend set."""

    if isinstance(name, BackendName):
        return name
    try:
        return BackendName(name.strip().lower())
    except ValueError as error:
        raise ConfigError(
            f"unknown backend {name!r} (choose from {', '.join(BackendName.choices())})",
        ) from error
