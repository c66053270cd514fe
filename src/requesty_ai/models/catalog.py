"""Model catalog fetched from the Requesty router.

The router returns a JSON array of priced models. The payload is not always
well behaved: it is sometimes encoded twice (a JSON string containing the
array), and prices arrive either as numbers or as numeric strings. This
module validates the whole payload up front and rejects it outright if any
row is malformed; a partial catalog is never cached.

The catalog is fetched once and then held for the lifetime of the
``ModelCatalog`` instance. There is no TTL and no background refresh.
"""

import asyncio
import json
import math
import re
from typing import Any

import httpx

from requesty_ai.config import get_settings
from requesty_ai.credentials import CredentialProvider, RequestyError, resolve_api_key
from requesty_ai.logging import get_logger
from requesty_ai.models.entries import ModelEntry, ModelPricing, sort_entries, split_identifier

log = get_logger("requesty_ai.models.catalog")

# Shown by callers that need a model list before the catalog has loaded
DEFAULT_MODELS: tuple[str, ...] = (
    "anthropic/claude-3-5-sonnet-latest",
    "openai/gpt-4o",
)

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class CatalogError(RequestyError):
    """Base exception for catalog errors."""

    pass


class MalformedCatalogError(CatalogError):
    """The catalog body is not JSON, or not a JSON array."""

    pass


class InvalidEntryError(CatalogError):
    """A catalog row failed validation. The whole catalog is rejected."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid catalog entry at index {index}: {reason}")


class UpstreamUnavailableError(CatalogError):
    """The catalog request failed or returned a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogCache:
    """Holds the normalized, sorted catalog once it has been fetched.

    Written at most once per catalog instance by ``ModelCatalog``. Entries
    are immutable, so readers need no synchronization.
    """

    def __init__(self, entries: list[ModelEntry] | None = None):
        self._entries: tuple[ModelEntry, ...] | None = (
            tuple(entries) if entries is not None else None
        )

    @property
    def is_populated(self) -> bool:
        return self._entries is not None

    def get(self) -> tuple[ModelEntry, ...] | None:
        return self._entries

    def set(self, entries: list[ModelEntry]) -> None:
        self._entries = tuple(entries)

    def clear(self) -> None:
        self._entries = None


def decode_catalog(body: str) -> list[Any]:
    """Decode a catalog body into a list of raw rows.

    Decoding is attempted at most twice: once for the body itself, and once
    more if the first pass produced a string.

    Raises:
        MalformedCatalogError: If either decode fails or the result is not
            an array.
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedCatalogError(f"Catalog body is not valid JSON: {e}") from e

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise MalformedCatalogError(
                f"Catalog body is a JSON string that does not contain valid JSON: {e}"
            ) from e

    if not isinstance(data, list):
        raise MalformedCatalogError(
            f"Catalog must be a JSON array, got {type(data).__name__}"
        )
    return data


def parse_price(value: Any) -> float | None:
    """Normalize a price given as a number or numeric string.

    Returns None if the value is not a finite, non-negative number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            price = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_RE.match(text):
            return None
        price = float(text)
    else:
        return None

    if not math.isfinite(price) or price < 0:
        return None
    return price


def parse_entry(index: int, row: Any) -> ModelEntry:
    """Validate one raw catalog row and convert it to a ``ModelEntry``.

    Raises:
        InvalidEntryError: If the row is structurally invalid.
    """
    if not isinstance(row, dict):
        raise InvalidEntryError(index, f"expected an object, got {type(row).__name__}")

    for field in ("provider", "model"):
        value = row.get(field)
        if not isinstance(value, str) or not value:
            raise InvalidEntryError(index, f"'{field}' must be a non-empty string")

    prices: dict[str, float] = {}
    for field in ("input_price", "output_price"):
        price = parse_price(row.get(field))
        if price is None:
            raise InvalidEntryError(
                index,
                f"'{field}' must be a finite non-negative number, got {row.get(field)!r}",
            )
        prices[field] = price

    updated_at = row.get("updated_at")
    if not isinstance(updated_at, str):
        raise InvalidEntryError(index, "'updated_at' must be a string")

    return ModelEntry(
        provider=row["provider"],
        model=row["model"],
        input_price_per_million=prices["input_price"],
        output_price_per_million=prices["output_price"],
        updated_at=updated_at,
    )


class ModelCatalog:
    """Lists purchasable models and answers pricing lookups.

    The first call to ``list_models`` fetches the catalog; every later call
    is served from the cache. Pass a pre-seeded ``CatalogCache`` to skip the
    network entirely (e.g. in tests).
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        catalog_url: str | None = None,
        timeout: float | None = None,
        cache: CatalogCache | None = None,
    ):
        """Initialize the catalog.

        Args:
            credentials: Source of the Requesty API key.
            catalog_url: Catalog endpoint. Defaults to the configured URL.
            timeout: HTTP timeout in seconds. Defaults to the configured value.
            cache: Optional cache, possibly pre-seeded with entries.
        """
        settings = get_settings()
        self._credentials = credentials
        self._catalog_url = catalog_url or settings.requesty_catalog_url
        self._timeout = timeout or settings.http_timeout
        self._cache = cache if cache is not None else CatalogCache()
        self._http_client: httpx.AsyncClient | None = None
        self._populate_lock = asyncio.Lock()

    @property
    def cache(self) -> CatalogCache:
        return self._cache

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

    async def list_models(self) -> list[str]:
        """Return identifiers of all purchasable models in catalog order.

        Models with a zero price stay in the cache for pricing lookups but
        are not listed.

        Raises:
            MissingCredentialError: If no API key is configured.
            UpstreamUnavailableError: If the request fails.
            MalformedCatalogError: If the body is not a JSON array.
            InvalidEntryError: If any row is invalid.
        """
        entries = self._cache.get()
        if entries is None:
            async with self._populate_lock:
                # Another caller may have populated the cache while we waited
                entries = self._cache.get()
                if entries is None:
                    entries = await self._populate()

        return [entry.identifier for entry in entries if entry.is_purchasable]

    async def _populate(self) -> tuple[ModelEntry, ...]:
        body = await self._fetch()
        rows = decode_catalog(body)

        try:
            entries = [parse_entry(index, row) for index, row in enumerate(rows)]
        except InvalidEntryError as e:
            log.warning("catalog_rejected", index=e.index, reason=e.reason)
            raise

        self._cache.set(sort_entries(entries))
        log.info(
            "catalog_fetched",
            total=len(entries),
            purchasable=sum(1 for e in entries if e.is_purchasable),
        )
        return self._cache.get() or ()

    async def _fetch(self) -> str:
        """GET the catalog and return the raw body text."""
        api_key = await resolve_api_key(self._credentials)
        client = await self._get_client()
        try:
            response = await client.get(
                self._catalog_url,
                headers={"Authorization": f"Bearer {api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("catalog_fetch_failed", url=self._catalog_url, status=status)
            raise UpstreamUnavailableError(
                f"Catalog request failed: HTTP {status}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            log.warning("catalog_fetch_failed", url=self._catalog_url, error=str(e))
            raise UpstreamUnavailableError(f"Catalog request failed: {e}") from e

        return response.text

    def entries(self) -> tuple[ModelEntry, ...]:
        """All cached entries, including unpriced ones. Empty if not loaded."""
        return self._cache.get() or ()

    def get_pricing(self, identifier: str) -> ModelPricing | None:
        """Look up the price of a model by identifier.

        Never raises. Returns None if the catalog has not been loaded or no
        entry matches.

        Entries are matched by last path segment. When several match, a
        priced entry listed under ``identifier`` wins, then the entry with the
        exact model name, then any priced entry. Remaining ties keep catalog
        order.
        """
        _, model = split_identifier(identifier)
        candidates = [e for e in self._cache.get() or () if e.matches(identifier)]
        if not candidates:
            return None

        best = max(
            candidates,
            key=lambda e: (
                e.is_purchasable and e.identifier == identifier,
                e.model == model,
                e.is_purchasable,
            ),
        )
        return best.pricing
