"""Single-shot chat completions through the Requesty router.

Each call sends one request and returns the first choice's text. There is no
streaming, no retry and no conversation state; callers pass the full message
history on every call.
"""

import json
from typing import Any, Literal, TypedDict

import httpx

from requesty_ai.config import get_settings
from requesty_ai.credentials import (
    CredentialProvider,
    MissingCredentialError,
    RequestyError,
    mask_api_key,
    resolve_api_key,
)
from requesty_ai.logging import get_logger

log = get_logger("requesty_ai.chat.client")

# Fixed sampling temperature for every request
COMPLETION_TEMPERATURE = 0.7


class Message(TypedDict):
    """One chat message."""

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionError(RequestyError):
    """Base exception for completion errors. Always names the model."""

    def __init__(self, model: str, reason: str):
        self.model = model
        self.reason = reason
        super().__init__(f"Failed to get response from {model}: {reason}")


class RequestFailedError(CompletionError):
    """The request failed or the router returned an unusable body.

    ``raw_body`` holds the response text exactly as received, if any.
    """

    def __init__(
        self,
        model: str,
        reason: str,
        raw_body: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(model, reason)
        self.raw_body = raw_body
        self.status_code = status_code


class EmptyCompletionError(CompletionError):
    """The router answered successfully but returned no choices."""

    def __init__(self, model: str):
        super().__init__(model, "response contained no choices")


class CompletionClient:
    """Sends chat completion requests to the Requesty router."""

    def __init__(
        self,
        credentials: CredentialProvider,
        completion_url: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize the completion client.

        Args:
            credentials: Source of the Requesty API key.
            completion_url: Completion endpoint. Defaults to the configured URL.
            timeout: HTTP timeout in seconds. Defaults to the configured value.
        """
        settings = get_settings()
        self._credentials = credentials
        self._completion_url = completion_url or settings.requesty_completion_url
        self._timeout = timeout or settings.http_timeout
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def complete(self, model: str, messages: list[Message]) -> str:
        """Run one chat completion and return the assistant's reply.

        The reply is returned verbatim, without trimming.

        Args:
            model: Model identifier, e.g. ``anthropic/claude-3-5-sonnet-latest``.
            messages: Ordered conversation messages.

        Raises:
            MissingCredentialError: If no API key is configured.
            RequestFailedError: On transport errors, non-success status, or
                a body that cannot be parsed.
            EmptyCompletionError: If the response has no choices.
        """
        try:
            api_key = await resolve_api_key(self._credentials)
        except MissingCredentialError:
            log.error("completion_failed", model=model, reason="missing API key")
            raise

        request_body = {
            "model": model,
            "messages": list(messages),
            "temperature": COMPLETION_TEMPERATURE,
        }
        log.debug(
            "completion_request",
            url=self._completion_url,
            model=model,
            message_count=len(messages),
            api_key=mask_api_key(api_key),
        )

        try:
            return await self._send(model, api_key, request_body)
        except CompletionError as e:
            log.error(
                "completion_failed",
                model=model,
                reason=e.reason,
                status=getattr(e, "status_code", None),
            )
            raise

    async def _send(self, model: str, api_key: str, request_body: dict[str, Any]) -> str:
        client = await self._get_client()
        try:
            response = await client.post(
                self._completion_url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {api_key}",
                },
                json=request_body,
            )
        except httpx.HTTPError as e:
            raise RequestFailedError(model, f"request error: {e}") from e

        # Keep the raw text so failures can report exactly what came back
        raw_body = response.text
        log.debug("completion_response", model=model, status=response.status_code, body=raw_body)

        if not response.is_success:
            raise RequestFailedError(
                model,
                f"API request failed: {raw_body}",
                raw_body=raw_body,
                status_code=response.status_code,
            )

        try:
            data = json.loads(raw_body)
        except ValueError as e:
            raise RequestFailedError(
                model,
                f"response is not valid JSON: {raw_body}",
                raw_body=raw_body,
                status_code=response.status_code,
            ) from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(data, dict) or (choices is not None and not isinstance(choices, list)):
            raise RequestFailedError(
                model,
                f"unexpected response shape: {raw_body}",
                raw_body=raw_body,
                status_code=response.status_code,
            )
        if not choices:
            raise EmptyCompletionError(model)

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise RequestFailedError(
                model,
                f"first choice has no message content: {raw_body}",
                raw_body=raw_body,
                status_code=response.status_code,
            )

        return content
