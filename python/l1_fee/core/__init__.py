"""
Core fee components: context construction and cost calculation.
"""

from .fee_context import FeeContext, build_context, scale_decimals
from .l1_cost import L1CostCalculator, estimate_gas, convert, l1_cost

__all__ = [
    "FeeContext",
    "build_context",
    "scale_decimals",
    "L1CostCalculator",
    "estimate_gas",
    "convert",
    "l1_cost",
]
