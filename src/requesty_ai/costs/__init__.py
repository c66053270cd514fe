"""Cost estimation for chat exchanges."""

from requesty_ai.costs.estimator import CostBreakdown, CostEstimator, estimate_tokens

__all__ = [
    "CostBreakdown",
    "CostEstimator",
    "estimate_tokens",
]
