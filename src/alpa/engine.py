"""Streaming text-generation client for any OpenAI-compatible API."""

from __future__ import annotations

import enum
import json
import logging
from typing import Callable

import httpx

from alpa.exceptions import EngineError

logger = logging.getLogger(__name__)


class Feedback(enum.Enum):
    """Returned by a token callback to keep or stop the stream."""

    CONTINUE = "continue"
    HALT = "halt"


TokenCallback = Callable[[str], Feedback]

_DONE = "[DONE]"


class CompletionEngine:
    """Synchronous streaming completion client.

    Tokens are delivered to a callback on the calling thread as the server
    produces them.  Returning :attr:`Feedback.HALT` from the callback closes
    the response and ends the generation early.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.8,
        max_tokens: int = 512,
        stop: list[str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the engine client.

        Args:
            base_url: API base URL (e.g. "http://localhost:8080/v1").
            api_key: API key for the provider (may be empty for local servers).
            model: Model name to request.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            stop: Optional stop sequences passed to the server.
            transport: Optional httpx transport, used by tests.
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.stop = list(stop or [])

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            headers=headers,
            timeout=httpx.Timeout(connect=30.0, read=120.0, write=30.0, pool=30.0),
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def stream_generate(self, prompt: str, on_token: TokenCallback) -> None:
        """Stream a completion of *prompt*, calling *on_token* per chunk.

        Returns when the server finishes or the callback halts.

        Raises:
            EngineError: On transport errors, 4xx / 5xx responses or a
                malformed event stream.
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": True,
        }
        if self.stop:
            payload["stop"] = self.stop

        logger.debug("Streaming completion (%d prompt chars)", len(prompt))
        try:
            with self._client.stream("POST", "/completions", json=payload) as response:
                if response.is_error:
                    response.read()
                    logger.error(
                        "Engine HTTP error %s: %s", response.status_code, response.text
                    )
                    raise EngineError(
                        f"Engine returned HTTP {response.status_code}"
                    )
                for text in _iter_event_text(response.iter_lines()):
                    if on_token(text) is Feedback.HALT:
                        logger.debug("Generation halted by callback")
                        return
        except httpx.TimeoutException as exc:
            logger.error("Engine request timed out: %s", exc)
            raise EngineError(f"Engine request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("Engine request failed: %s", exc)
            raise EngineError(f"Engine request failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


def _iter_event_text(lines):
    """Yield completion text from server-sent event *lines*.

    Raises:
        EngineError: If an event payload is not valid completion JSON.
    """
    for line in lines:
        if not line or not line.startswith("data:"):
            continue
        data = line[len("data:"):].strip()
        if data == _DONE:
            return
        try:
            chunk = json.loads(data)
            text = chunk["choices"][0].get("text", "")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            # ValueError covers json.JSONDecodeError
            logger.error("Malformed engine event: %s", data[:500])
            raise EngineError(f"Malformed engine event: {exc}") from exc
        if text:
            yield text
