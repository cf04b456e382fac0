"""Direct HTTP backend for the Anthropic Messages API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from shell_agent.config import ApiSettings
from shell_agent.errors import BackendError, ConfigError, ResponseShapeError, TransportError
from shell_agent.models import AssembledPrompt, Response

logger = logging.getLogger(__name__)


class ApiBackend:
    """Single-shot Messages API client; the assembled prompt is one user turn."""

    name = "api"

    def __init__(
        self,
        *,
        settings: ApiSettings,
        model: str,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._model = model
        self._transport = transport

    def invoke(self, prompt: AssembledPrompt) -> Response:
        """POST the prompt as one user message and return the concatenated text blocks."""

        if not self._settings.api_key:
            raise ConfigError("api backend requires ANTHROPIC_API_KEY")

        url = f"{self._settings.base_url}/messages"
        payload = {
            "model": self._model,
            "max_tokens": self._settings.max_tokens,
            "messages": [{"role": "user", "content": _json_safe(prompt.text)}],
        }
        logger.debug("POST %s model=%s", url, self._model)
        with self._client() as client:
            try:
                response = client.post(url, json=payload)
            except httpx.HTTPError as error:
                raise TransportError(f"api backend request failed: {error}") from error

        logger.debug("api backend status %d", response.status_code)
        data = _decode_json(response)
        error_message = _error_message(data)
        if error_message is not None:
            raise BackendError(f"api backend error: {error_message}")
        if not response.is_success:
            raise BackendError(f"api backend error: HTTP {response.status_code}")
        return Response(text=extract_text(data))

    def _client(self) -> httpx.Client:
        transport = self._transport or httpx.HTTPTransport(retries=0)
        return httpx.Client(
            timeout=httpx.Timeout(self._settings.request_timeout_seconds, connect=10.0),
            headers={
                "x-api-key": self._settings.api_key or "",
                "anthropic-version": self._settings.api_version,
                "content-type": "application/json",
            },
            transport=transport,
        )


def extract_text(data: Any) -> str:
    """Concatenate text content blocks from a Messages API reply."""

    if not isinstance(data, dict):
        raise ResponseShapeError("api backend returned a non-object response")
    blocks = data.get("content")
    if not isinstance(blocks, list):
        raise ResponseShapeError("api backend response has no content list")
    parts = [
        block["text"]
        for block in blocks
        if isinstance(block, dict)
        and block.get("type") == "text"
        and isinstance(block.get("text"), str)
    ]
    if not parts:
        raise ResponseShapeError("api backend response has no text content")
    return "".join(parts)


def _json_safe(text: str) -> str:
    # JSON cannot carry the surrogate escapes left by undecodable stdin bytes.
    return text.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace")


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as error:
        if not response.is_success:
            raise BackendError(f"api backend error: HTTP {response.status_code}") from error
        raise ResponseShapeError("api backend returned invalid JSON") from error


def _error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if error is None and data.get("type") != "error":
        return None
    if isinstance(error, dict):
        kind = error.get("type")
        message = error.get("message") or "unknown error"
        return f"{kind}: {message}" if kind else str(message)
    return str(error or "unknown error")
