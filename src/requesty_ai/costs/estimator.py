"""Cost estimation for a single prompt/reply exchange.

Token counts are approximated as one token per four characters. No real
tokenizer is used, so figures are estimates suitable for display only.

An unknown or unpriced model costs zero rather than raising, so a missing
catalog entry never breaks the caller's cost display.
"""

import math
from dataclasses import dataclass

from requesty_ai.logging import get_logger
from requesty_ai.models.catalog import ModelCatalog

log = get_logger("requesty_ai.costs.estimator")

CHARS_PER_TOKEN = 4
TOKENS_PER_PRICE_UNIT = 1_000_000


@dataclass(frozen=True)
class CostBreakdown:
    """Estimated cost of an exchange in USD."""

    input_cost: float
    output_cost: float
    total: float

    @classmethod
    def zero(cls) -> "CostBreakdown":
        return cls(input_cost=0.0, output_cost=0.0, total=0.0)


def estimate_tokens(text: str) -> int:
    """Approximate the token count of a text as ``ceil(len / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class CostEstimator:
    """Prices exchanges using the catalog's per-million-token rates."""

    def __init__(self, catalog: ModelCatalog):
        self._catalog = catalog

    def estimate(self, input_text: str, output_text: str, model: str) -> CostBreakdown:
        """Estimate the cost of sending ``input_text`` and receiving ``output_text``.

        Args:
            input_text: Prompt text sent to the model.
            output_text: Reply text received from the model.
            model: Model identifier.

        Returns:
            CostBreakdown, all zeros if the model has no known pricing.
        """
        pricing = self._catalog.get_pricing(model)
        if pricing is None:
            log.debug("pricing_not_found", model=model)
            return CostBreakdown.zero()

        input_cost = (estimate_tokens(input_text) / TOKENS_PER_PRICE_UNIT) * pricing.input
        output_cost = (estimate_tokens(output_text) / TOKENS_PER_PRICE_UNIT) * pricing.output

        return CostBreakdown(
            input_cost=input_cost,
            output_cost=output_cost,
            total=input_cost + output_cost,
        )
