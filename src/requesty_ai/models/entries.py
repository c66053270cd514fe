"""Catalog entries and model identifier conventions.

A catalog entry is one priced model as returned by the router. Callers never
see entries directly; they select models through identifiers of the form
``"{provider}/{display_model}"``.

Providers disagree on naming. Most use a flat model name, but ``together``
nests models under organisation paths (``meta-llama/Llama-3-70b``), so only
the final path segment is shown to callers.
"""

from dataclasses import dataclass
from decimal import Decimal

# Presentation order for the catalog. Unknown providers sort after these.
PROVIDER_PRIORITY: tuple[str, ...] = (
    "anthropic",
    "openai",
    "google",
    "deepinfra",
    "together",
)

# Providers whose model names are shown by last path segment only
SEGMENTED_PROVIDERS = frozenset({"together"})


def last_segment(name: str) -> str:
    """Return the text after the final ``/``, or the whole string if none.

    Examples:
        "meta-llama/Llama-3-70b" -> "Llama-3-70b"
        "gpt-4o" -> "gpt-4o"
    """
    return name.rsplit("/", 1)[-1]


def split_identifier(identifier: str) -> tuple[str, str]:
    """Split an identifier at its first ``/`` into (provider, model).

    The model part may itself contain ``/``. An identifier without any
    separator yields an empty model part.
    """
    provider, _, model = identifier.partition("/")
    return provider, model


def provider_rank(provider: str) -> int:
    """Position of a provider in the presentation order."""
    try:
        return PROVIDER_PRIORITY.index(provider)
    except ValueError:
        return len(PROVIDER_PRIORITY)


def format_price(value: float) -> str:
    """Render a price in plain decimal notation without trailing zeros.

    Examples:
        3.0 -> "3"
        3e-07 -> "0.0000003"
    """
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class ModelPricing:
    """Price of a model in USD per million tokens."""

    input: float
    output: float

    @property
    def label(self) -> str:
        """Short price label, e.g. ``$3/M in • $15/M out``."""
        return f"${format_price(self.input)}/M in • ${format_price(self.output)}/M out"


@dataclass(frozen=True)
class ModelEntry:
    """A normalized catalog row."""

    provider: str
    model: str
    input_price_per_million: float
    output_price_per_million: float
    updated_at: str = ""

    @property
    def display_model(self) -> str:
        """Model name as shown to callers."""
        if self.provider in SEGMENTED_PROVIDERS:
            return last_segment(self.model)
        return self.model

    @property
    def identifier(self) -> str:
        """Public ``provider/model`` identifier."""
        return f"{self.provider}/{self.display_model}"

    @property
    def is_purchasable(self) -> bool:
        """True when both prices are strictly positive."""
        return self.input_price_per_million > 0 and self.output_price_per_million > 0

    @property
    def pricing(self) -> ModelPricing:
        return ModelPricing(
            input=self.input_price_per_million,
            output=self.output_price_per_million,
        )

    def matches(self, identifier: str) -> bool:
        """Check whether an identifier refers to this entry.

        Providers must be equal. Model names are compared by last path
        segment so both the short and the fully qualified form match.
        """
        provider, model = split_identifier(identifier)
        if provider != self.provider or not model:
            return False
        return last_segment(self.model) == last_segment(model)


def sort_entries(entries: list[ModelEntry]) -> list[ModelEntry]:
    """Order entries by provider priority, then case-sensitive model name.

    Unknown providers share the last rank; their name only breaks exact
    model-name ties so the order never depends on input order.
    """
    return sorted(entries, key=lambda e: (provider_rank(e.provider), e.model, e.provider))
