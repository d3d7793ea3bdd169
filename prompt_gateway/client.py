"""
Upstream Client - HTTP client for the chat-completion endpoint.

Each call to send() makes one POST with no retry, and returns a tagged
result instead of raising:

    result = await client.send(messages)
    if isinstance(result, Failed):
        ...  # result.cause
    else:
        ...  # result.response
"""
import time
import logging
from dataclasses import dataclass
from typing import Optional, Union

import httpx
from pydantic import ValidationError

from .config import Settings
from .models import CompletionRequest, CompletionResponse, Message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completed:
    """The upstream answered with a decodable completion."""
    response: CompletionResponse


@dataclass(frozen=True)
class Failed:
    """The upstream call failed; cause is ready to show to the caller."""
    cause: str


SendResult = Union[Completed, Failed]


def strip_quotes(token: str) -> str:
    """
    Drop one pair of literal double quotes wrapping a token.

    Only a matched pair is removed: '"abc"' becomes 'abc', '""abc""' becomes
    '"abc"', and an unpaired quote as in '"abc' is left alone.
    """
    if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
        return token[1:-1]
    return token


class UpstreamClient:
    """Async client for the configured completion endpoint."""

    _op = "send"

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = settings.gpt_url
        self._model = settings.gpt_model
        self._max_tokens = settings.gpt_max_tokens
        self._headers = {
            "Authorization": f"Bearer {strip_quotes(settings.gpt_token)}",
            "Content-Type": "application/json",
        }
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.gpt_timeout),
            transport=transport,
        )

        logger.info("Upstream client initialized: %s (model=%s)", self._url, self._model)

    @property
    def model_name(self) -> str:
        return self._model

    def build_request(self, messages: list[Message]) -> CompletionRequest:
        return CompletionRequest(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens or None,
        )

    async def send(self, messages: list[Message]) -> SendResult:
        """
        Send one completion request upstream.

        Args:
            messages: Ordered conversation, system message first

        Returns:
            Completed with the decoded response, or Failed with a wrapped cause
        """
        start_time = time.time()
        payload = self.build_request(messages).to_wire()

        logger.debug(
            "Upstream request: model=%s, messages=%d, max_tokens=%s",
            self._model, len(messages), payload.get("max_tokens"),
        )

        try:
            response = await self._client.post(self._url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            # No response exists on this path
            return self._fail(start_time, f"{type(e).__name__}: {e}")

        if response.is_error:
            return self._fail(
                start_time,
                f"upstream returned HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            completion = CompletionResponse.model_validate_json(response.content)
        except ValidationError as e:
            return self._fail(start_time, f"invalid upstream response: {e}")

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            "Upstream response: latency=%dms, model=%s, choices=%d, tokens=%d",
            latency_ms, completion.model, len(completion.choices), completion.usage.total_tokens,
        )
        return Completed(completion)

    def _fail(self, start_time: float, cause: str) -> Failed:
        latency_ms = int((time.time() - start_time) * 1000)
        logger.error("Upstream error after %dms: %s", latency_ms, cause)
        return Failed(f"{self._op}: {cause}")

    async def aclose(self) -> None:
        await self._client.aclose()
