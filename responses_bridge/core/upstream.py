"""HTTP client for the chat-completion backend."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..types.chat import ChatCompletionRequest, ChatCompletionResponse
from .exceptions import UpstreamError

logger = logging.getLogger("responses-bridge")

DEFAULT_TIMEOUT = 60.0


def format_httpx_error(exc: Exception, url: str, timeout: float) -> str:
    """Produce a detailed description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)
    parts.append(f"url={url}")
    if isinstance(exc, httpx.TimeoutException):
        parts.append(f"timeout={timeout}s")
    return "; ".join(parts)


class ChatCompletionClient:
    """Synchronous client for an OpenAI-compatible chat completions endpoint.

    Only non-streaming calls are made; the backend is expected to return one
    JSON completion with aggregate usage.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def create_chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """Send ``request`` and return the decoded completion.

        Raises:
            UpstreamError: On transport failure, timeout, a non-2xx status, or
                a body that is not a JSON object.
        """
        url = self.completions_url
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(url, json=request, headers=self._headers())
                resp.raise_for_status()
                payload: Any = resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error(f"Upstream returned HTTP {status} for {url}")
            raise UpstreamError(
                f"Upstream returned HTTP {status}: {exc.response.text[:500]}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            detail = format_httpx_error(exc, url, self.timeout)
            logger.error(f"Upstream request failed: {detail}")
            raise UpstreamError(f"Upstream request failed: {detail}") from exc
        except ValueError as exc:
            raise UpstreamError(f"Upstream returned invalid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise UpstreamError("Upstream returned a non-object completion body")
        return payload  # type: ignore[return-value]
