"""
L1 Cost Calculator

Prices the L1 data of a serialized transaction.

Byte-cost estimate (L1 calldata gas):
    gas = zeros * 4 + (nonzeros + 68) * 16 + overhead

Cost conversion:
    cost = ceil(gas * base_fee * scalar)

The +68 term stands for the signature bytes that the unsigned payload does
not carry; it is charged once the payload holds non-zero data. The cost is
always rounded up: undercharging the L1 publication cost is the disallowed
direction of error.
"""

import logging
import math
from typing import Dict, Iterable, Tuple, Union

import numpy as np

from .fee_context import FeeContext
from .units import (
    MAX_UINT256,
    SIGNATURE_NONZERO_BYTES,
    TX_DATA_NON_ZERO_GAS_EIP2028,
    TX_DATA_ZERO_GAS,
)
from .validation import (
    CostOverflowError,
    ScalarLike,
    to_fraction,
    validate_cost_output,
    validate_non_negative_int,
    validate_uint256,
)

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview]


def count_bytes(payload: Payload) -> Tuple[int, int]:
    """
    Count zero and non-zero bytes of a payload.

    Returns:
        (zero_bytes, nonzero_bytes)

    Raises:
        TypeError: If payload is not bytes-like
    """
    data = memoryview(payload).tobytes()
    zeros = data.count(0)
    return zeros, len(data) - zeros


def estimate_gas(payload: Payload, overhead: int) -> int:
    """
    Estimate the L1 gas used to include a payload as calldata.

    Only the zero / non-zero byte counts matter, so the result does not
    depend on byte order.

    Args:
        payload: Serialized transaction bytes
        overhead: Fixed gas surcharge per transaction

    Returns:
        L1 gas used

    Raises:
        CostOverflowError: If the gas exceeds uint256
    """
    validate_non_negative_int(overhead, "overhead")
    zeros, nonzeros = count_bytes(payload)

    zeros_gas = zeros * TX_DATA_ZERO_GAS
    if nonzeros > 0:
        ones_gas = (nonzeros + SIGNATURE_NONZERO_BYTES) * TX_DATA_NON_ZERO_GAS_EIP2028
    else:
        ones_gas = 0

    return validate_uint256(zeros_gas + ones_gas + overhead, "l1_gas_used")


@validate_cost_output
def convert(gas: int, base_fee: int, scalar: ScalarLike) -> int:
    """
    Convert an L1 gas amount into a cost in wei.

    gas * base_fee is computed as an exact integer, multiplied by the exact
    scalar and rounded up.

    Args:
        gas: L1 gas used
        base_fee: L1 base fee in wei per gas
        scalar: Fee scalar (Fraction, int, float, Decimal or str)

    Returns:
        ceil(gas * base_fee * scalar) in wei

    Raises:
        CostOverflowError: If gas, gas * base_fee or the cost exceeds uint256
        ValueError: If an input is negative
    """
    validate_uint256(gas, "gas")
    validate_non_negative_int(base_fee, "base_fee")
    factor = to_fraction(scalar)

    raw_cost = gas * base_fee
    if raw_cost > MAX_UINT256:
        raise CostOverflowError(f"L1 cost {gas:,} gas * {base_fee:,} wei/gas exceeds uint256")

    return math.ceil(raw_cost * factor)


def l1_cost(payload: Payload, context: FeeContext) -> int:
    """
    Return the L1 data fee of a serialized transaction.

    Args:
        payload: Serialized transaction bytes
        context: Fee parameters in effect

    Returns:
        L1 fee in wei
    """
    gas = estimate_gas(payload, context.overhead)
    return convert(gas, context.base_fee, context.scalar)


class L1CostCalculator:
    """
    L1 data fee calculator bound to one fee context.

    Attributes:
        context: Fee parameters used for every computation
    """

    def __init__(self, context: FeeContext):
        """
        Initialize the calculator.

        Args:
            context: Fee parameters in effect

        Raises:
            ValueError: If context is not a FeeContext
        """
        if not isinstance(context, FeeContext):
            raise ValueError(f"context must be a FeeContext, got {type(context).__name__}")

        self.context = context

    def gas_used(self, payload: Payload) -> int:
        """L1 gas used by a payload, including overhead."""
        return estimate_gas(payload, self.context.overhead)

    def cost(self, payload: Payload) -> int:
        """L1 fee of a payload in wei."""
        return l1_cost(payload, self.context)

    def breakdown(self, payload: Payload) -> Dict[str, int]:
        """
        Itemized L1 fee computation for a payload.

        Returns:
            Dictionary with zero_bytes, nonzero_bytes, l1_gas_used,
            raw_cost_wei (gas * base_fee) and l1_fee_wei
        """
        zeros, nonzeros = count_bytes(payload)
        gas = self.gas_used(payload)
        return {
            'zero_bytes': zeros,
            'nonzero_bytes': nonzeros,
            'l1_gas_used': gas,
            'raw_cost_wei': gas * self.context.base_fee,
            'l1_fee_wei': convert(gas, self.context.base_fee, self.context.scalar),
        }

    def process_series(self, payloads: Iterable[Payload]) -> np.ndarray:
        """
        Price a series of payloads.

        Costs can exceed 64 bits, so the result is an object array of
        Python ints.

        Args:
            payloads: Serialized transactions

        Returns:
            Array of L1 fees in wei, one per payload
        """
        costs = [self.cost(payload) for payload in payloads]
        logger.debug(f"Priced {len(costs)} payloads")

        result = np.empty(len(costs), dtype=object)
        result[:] = costs
        return result

    def __str__(self) -> str:
        """String representation of the calculator."""
        ctx = self.context
        return (f"L1CostCalculator(base_fee={ctx.base_fee}, overhead={ctx.overhead}, "
                f"scalar={ctx.scalar})")

    def __repr__(self) -> str:
        """Detailed representation of the calculator."""
        return self.__str__()
