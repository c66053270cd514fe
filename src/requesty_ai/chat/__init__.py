"""Chat completion client."""

from requesty_ai.chat.client import (
    COMPLETION_TEMPERATURE,
    CompletionClient,
    CompletionError,
    EmptyCompletionError,
    Message,
    RequestFailedError,
)

__all__ = [
    "COMPLETION_TEMPERATURE",
    "CompletionClient",
    "CompletionError",
    "EmptyCompletionError",
    "Message",
    "RequestFailedError",
]
