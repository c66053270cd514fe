"""Pytest fixtures for requesty_ai tests."""

import json

import httpx
import pytest

from requesty_ai.credentials import StaticCredentialProvider
from requesty_ai.models.catalog import CatalogCache, ModelCatalog
from requesty_ai.models.entries import ModelEntry


def _make_response(status_code: int, text: str, method: str = "GET") -> httpx.Response:
    request = httpx.Request(method, "https://router.test/v1/endpoint")
    return httpx.Response(status_code, text=text, request=request)


@pytest.fixture
def make_response():
    """Factory building real httpx.Response objects bound to a dummy request."""
    return _make_response


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from the host environment and the settings cache."""
    from requesty_ai.config import get_settings

    monkeypatch.delenv("REQUESTY_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def credentials():
    """Credential provider holding a fixed test key."""
    return StaticCredentialProvider("rq-test-key-1234")


@pytest.fixture
def sample_catalog_rows():
    """Catalog rows in upstream (wire) format, deliberately unsorted."""
    return [
        {
            "provider": "together",
            "model": "meta-llama/Llama-3-70b-chat-hf",
            "input_price": "0.9",
            "output_price": "0.9",
            "updated_at": "2024-11-01T00:00:00Z",
        },
        {
            "provider": "openai",
            "model": "gpt-4o",
            "input_price": 2.5,
            "output_price": 10,
            "updated_at": "2024-11-01T00:00:00Z",
        },
        {
            "provider": "mistral",
            "model": "mistral-large",
            "input_price": 2,
            "output_price": 6,
            "updated_at": "2024-11-01T00:00:00Z",
        },
        {
            "provider": "anthropic",
            "model": "claude-3-5-sonnet-latest",
            "input_price": "3",
            "output_price": "15",
            "updated_at": "2024-11-01T00:00:00Z",
        },
        {
            "provider": "google",
            "model": "gemini-1.5-pro",
            "input_price": 0,
            "output_price": 0,
            "updated_at": "2024-11-01T00:00:00Z",
        },
        {
            "provider": "anthropic",
            "model": "claude-3-5-haiku-latest",
            "input_price": 0.8,
            "output_price": 4,
            "updated_at": "2024-11-01T00:00:00Z",
        },
        {
            "provider": "deepinfra",
            "model": "Qwen/Qwen2.5-72B-Instruct",
            "input_price": 0.35,
            "output_price": 0.4,
            "updated_at": "2024-11-01T00:00:00Z",
        },
    ]


@pytest.fixture
def sample_catalog_body(sample_catalog_rows):
    """Catalog body as a single-encoded JSON array."""
    return json.dumps(sample_catalog_rows)


@pytest.fixture
def sample_entries():
    """Normalized, sorted entries for pre-seeding a catalog cache."""
    return [
        ModelEntry("anthropic", "claude-3-5-sonnet-latest", 3.0, 15.0, "2024-11-01"),
        ModelEntry("openai", "gpt-4o", 2.5, 10.0, "2024-11-01"),
        ModelEntry("openai", "gpt-4o-preview", 0.0, 0.0, "2024-11-01"),
        ModelEntry("together", "meta-llama/Llama-3-70b-chat-hf", 0.9, 0.9, "2024-11-01"),
    ]


@pytest.fixture
def seeded_catalog(credentials, sample_entries):
    """A catalog whose cache is already populated; never touches the network."""
    return ModelCatalog(credentials, cache=CatalogCache(sample_entries))
