"""
L1 Data Fee Implementation

Computes the fee a rollup charges a transaction for publishing its data to
the settlement layer (L1):

- Fee context: base fee, overhead and scalar read from chain state
- Byte-cost estimator: L1 calldata gas for a serialized transaction
- Cost converter: gas * base fee * scalar, rounded up

All arithmetic is exact (integers and fractions.Fraction).
"""

__version__ = "1.0.0"

from .core.config import L1FeeConfig, StorageSlots, DEFAULT_SLOTS
from .core.fee_context import FeeContext, build_context, scale_decimals, decode_word
from .core.l1_cost import L1CostCalculator, count_bytes, estimate_gas, convert, l1_cost
from .core.validation import ParameterOverflowError, CostOverflowError
from .data.loader import PayloadLoader

__all__ = [
    "L1FeeConfig",
    "StorageSlots",
    "DEFAULT_SLOTS",
    "FeeContext",
    "build_context",
    "scale_decimals",
    "decode_word",
    "L1CostCalculator",
    "count_bytes",
    "estimate_gas",
    "convert",
    "l1_cost",
    "ParameterOverflowError",
    "CostOverflowError",
    "PayloadLoader",
]
