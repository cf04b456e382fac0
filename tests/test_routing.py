from __future__ import annotations

from pathlib import Path

import allure
import pytest

from shell_agent.backend import ApiBackend, CliAgentBackend, StubBackend
from shell_agent.config import ApiSettings, CliAgentSettings, Settings, StubSettings
from shell_agent.errors import ConfigError
from shell_agent.models import AssembledPrompt, BackendName, PromptLayer, Request
from shell_agent.routing import build_backend, dispatch, parse_backend, resolve_backend

pytestmark = [
    allure.epic("Backend Dispatch"),
    allure.feature("Auto Resolution & Routing"),
]


def _which(*available: str):
    def which(executable: str) -> str | None:
        return f"/usr/bin/{executable}" if executable in available else None

    return which


def _settings(tmp_path: Path, *, api_key: str | None = None) -> Settings:
    return Settings(
        stub=StubSettings(counter_path=tmp_path / "counter"),
        api=ApiSettings(api_key=api_key),
    )


@pytest.mark.parametrize(
    ("executables", "environ", "expected"),
    [
        (("claude", "llm"), {"ANTHROPIC_API_KEY": "k"}, BackendName.CLAUDE_CODE),
        (("llm",), {"ANTHROPIC_API_KEY": "k"}, BackendName.LLM),
        ((), {"ANTHROPIC_API_KEY": "k"}, BackendName.API),
        (("claude",), {}, BackendName.CLAUDE_CODE),
    ],
)
def test_auto_resolution_follows_probe_priority(
    tmp_path: Path,
    executables: tuple[str, ...],
    environ: dict[str, str],
    expected: BackendName,
) -> None:
    resolved = resolve_backend(
        "auto",
        _settings(tmp_path),
        which=_which(*executables),
        environ=environ,
    )

    assert resolved is expected


def test_auto_resolution_uses_configured_api_key(tmp_path: Path) -> None:
    resolved = resolve_backend(
        BackendName.AUTO,
        _settings(tmp_path, api_key="sk-configured"),
        which=_which(),
        environ={},
    )

    assert resolved is BackendName.API


def test_auto_resolution_probes_configured_command_head(tmp_path: Path) -> None:
    settings = Settings(
        cli=CliAgentSettings(claude_command_template="/opt/bin/claude-wrapper {prompt}"),
    )

    resolved = resolve_backend(
        "auto",
        settings,
        which=_which("/opt/bin/claude-wrapper"),
        environ={},
    )

    assert resolved is BackendName.CLAUDE_CODE


def test_auto_resolution_without_candidates_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="no usable backend found"):
        resolve_backend(
            "auto",
            _settings(tmp_path),
            which=_which(),
            environ={"ANTHROPIC_API_KEY": "   "},
        )


def test_explicit_backend_skips_probing(tmp_path: Path) -> None:
    def which(executable: str) -> str | None:
        raise AssertionError("explicit backends must not probe")

    assert resolve_backend("stub", _settings(tmp_path), which=which, environ={}) is (
        BackendName.STUB
    )


def test_parse_backend_rejects_unknown_name() -> None:
    with pytest.raises(ConfigError, match="unknown backend 'gpt'"):
        parse_backend("gpt")


def test_parse_backend_is_case_insensitive() -> None:
    assert parse_backend(" Claude-Code ") is BackendName.CLAUDE_CODE


def test_build_backend_maps_every_concrete_name(tmp_path: Path) -> None:
    settings = _settings(tmp_path)

    assert isinstance(build_backend(BackendName.STUB, settings), StubBackend)
    assert isinstance(build_backend(BackendName.API, settings), ApiBackend)
    claude = build_backend(BackendName.CLAUDE_CODE, settings, model="opus")
    llm = build_backend(BackendName.LLM, settings)
    assert isinstance(claude, CliAgentBackend)
    assert isinstance(llm, CliAgentBackend)
    assert claude.model == "opus"
    assert llm.model == "gpt-4o-mini"


def test_build_backend_refuses_auto(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="cannot be invoked directly"):
        build_backend(BackendName.AUTO, _settings(tmp_path))


def test_dispatch_invokes_resolved_backend_once(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    request = Request(task="hello", backend=BackendName.STUB)
    prompt = AssembledPrompt(layers=(PromptLayer(name="task", text="hello"),), text="hello")

    first = dispatch(request, prompt, settings)
    second = dispatch(request, prompt, settings)

    assert (first.text, second.text) == ("LLM return 1", "LLM return 2")
