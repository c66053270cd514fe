"""Client library for the Requesty LLM router.

Public surface:

- ``ModelCatalog.list_models()`` / ``ModelCatalog.get_pricing()``
- ``CompletionClient.complete()``
- ``CostEstimator.estimate()``
"""

from requesty_ai.chat import (
    COMPLETION_TEMPERATURE,
    CompletionClient,
    CompletionError,
    EmptyCompletionError,
    Message,
    RequestFailedError,
)
from requesty_ai.costs import CostBreakdown, CostEstimator, estimate_tokens
from requesty_ai.credentials import (
    CredentialError,
    CredentialProvider,
    MissingCredentialError,
    RequestyError,
    SettingsCredentialProvider,
    StaticCredentialProvider,
)
from requesty_ai.models import (
    DEFAULT_MODELS,
    CatalogCache,
    CatalogError,
    InvalidEntryError,
    MalformedCatalogError,
    ModelCatalog,
    ModelEntry,
    ModelPricing,
    UpstreamUnavailableError,
)

__all__ = [
    "COMPLETION_TEMPERATURE",
    "DEFAULT_MODELS",
    "CatalogCache",
    "CatalogError",
    "CompletionClient",
    "CompletionError",
    "CostBreakdown",
    "CostEstimator",
    "CredentialError",
    "CredentialProvider",
    "EmptyCompletionError",
    "InvalidEntryError",
    "MalformedCatalogError",
    "Message",
    "MissingCredentialError",
    "ModelCatalog",
    "ModelEntry",
    "ModelPricing",
    "RequestFailedError",
    "RequestyError",
    "SettingsCredentialProvider",
    "StaticCredentialProvider",
    "UpstreamUnavailableError",
    "estimate_tokens",
]
