"""Model catalog and pricing lookups for the Requesty router."""

from requesty_ai.models.catalog import (
    DEFAULT_MODELS,
    CatalogCache,
    CatalogError,
    InvalidEntryError,
    MalformedCatalogError,
    ModelCatalog,
    UpstreamUnavailableError,
)
from requesty_ai.models.entries import (
    PROVIDER_PRIORITY,
    ModelEntry,
    ModelPricing,
    last_segment,
    split_identifier,
)

__all__ = [
    "DEFAULT_MODELS",
    "PROVIDER_PRIORITY",
    "CatalogCache",
    "CatalogError",
    "InvalidEntryError",
    "MalformedCatalogError",
    "ModelCatalog",
    "ModelEntry",
    "ModelPricing",
    "UpstreamUnavailableError",
    "last_segment",
    "split_identifier",
]
