"""
Fee Context Builder

Derives the economic parameters in effect for an execution context:

- base_fee: L1 base fee (wei per gas), read from the L1 block info contract
- overhead: fixed per-transaction gas surcharge, from the gas price oracle
- scalar:   raw_scalar / 10**decimals, from the gas price oracle

A context is immutable; when parameters change a new one is built.
"""

import logging
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Optional, Protocol, Union

from .config import L1FeeConfig, StorageSlots, DEFAULT_SLOTS
from .units import MAX_DECIMALS, WeiPerGas
from .validation import (
    ParameterOverflowError,
    ScalarLike,
    to_fraction,
    validate_non_negative_int,
    validate_uint256,
)

logger = logging.getLogger(__name__)

Word = Union[int, bytes, bytearray, str]


class ParameterReader(Protocol):
    """Read-only access to contract storage."""

    def read(self, address: str, slot: int) -> Word:
        ...


@dataclass(frozen=True)
class FeeContext:
    """
    Parameters needed to price the L1 data of a transaction.

    Attributes:
        base_fee: L1 base fee in wei per gas
        overhead: Fixed gas added to every transaction
        scalar: Multiplier applied to gas * base_fee
    """
    base_fee: int = 0
    overhead: int = 0
    scalar: ScalarLike = field(default_factory=Fraction)

    def __post_init__(self):
        validate_non_negative_int(self.base_fee, "base_fee")
        validate_non_negative_int(self.overhead, "overhead")
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "scalar", to_fraction(self.scalar))

    @classmethod
    def zero(cls) -> "FeeContext":
        """Context of a chain that does not charge the L1 data fee."""
        return cls(base_fee=0, overhead=0, scalar=Fraction(0))

    def is_zero(self) -> bool:
        return self.base_fee == 0 and self.overhead == 0 and self.scalar == 0

    def summary(self) -> str:
        """Human-readable description of the context."""
        scalar = float(self.scalar)
        return (f"L1 base fee: {WeiPerGas(self.base_fee)} ({self.base_fee:,} wei/gas)\n"
                f"Overhead:    {self.overhead:,} gas\n"
                f"Scalar:      {scalar:.6g} ({self.scalar})")


# === PARAMETER DECODING ===

def decode_word(word: Word, name: str = "word") -> int:
    """
    Decode a storage word into an unsigned integer.

    Accepts an int, up to 32 big-endian bytes, or a 0x-prefixed hex string
    (as returned by eth_getStorageAt). Empty values decode to zero, matching
    a never-written slot.

    Raises:
        ParameterOverflowError: If the word does not fit in 256 bits
        ValueError: If the word is negative or cannot be parsed
    """
    if isinstance(word, (bytes, bytearray)):
        if len(word) > 32:
            raise ParameterOverflowError(f"{name} is {len(word)} bytes, expected at most 32")
        return int.from_bytes(word, "big")

    if isinstance(word, str):
        text = word.strip()
        if not text.lower().startswith("0x"):
            raise ValueError(f"{name} {word!r} is not a 0x-prefixed hex string")
        digits = text[2:]
        if not digits:
            return 0
        try:
            value = int(digits, 16)
        except ValueError as e:
            raise ValueError(f"{name} {word!r} is not valid hex") from e
        return validate_uint256(value, name, ParameterOverflowError)

    return validate_uint256(word, name, ParameterOverflowError)


def scale_decimals(raw_scalar: int, decimals: int) -> Fraction:
    """
    Scale a raw integer scalar by 10**decimals.

    The divisor is an exact integer power and the result an exact
    Fraction, so no precision is lost before the final rounding step.

    Args:
        raw_scalar: Scalar as stored on chain
        decimals: Number of decimal places in raw_scalar

    Returns:
        raw_scalar / 10**decimals

    Raises:
        ParameterOverflowError: If decimals > 77 or raw_scalar exceeds uint256
        ValueError: If either input is negative
    """
    validate_uint256(raw_scalar, "raw_scalar", ParameterOverflowError)
    validate_non_negative_int(decimals, "decimals")

    if decimals > MAX_DECIMALS:
        raise ParameterOverflowError(
            f"decimals {decimals:,} too large: 10**decimals exceeds uint256 (max {MAX_DECIMALS})"
        )

    divisor = 10 ** decimals
    return Fraction(raw_scalar, divisor)


# === CONTEXT CONSTRUCTION ===

def build_context(
    config: Optional[L1FeeConfig],
    reader: ParameterReader,
    slots: StorageSlots = DEFAULT_SLOTS,
) -> FeeContext:
    """
    Build the fee context for the current execution context.

    When the fee mechanism is disabled (or config is None) the zero context
    is returned and the reader is not touched. Otherwise exactly four reads
    are issued, in order: base fee from the L1 block contract, then
    overhead, scalar and decimals from the gas price oracle. The caller is
    responsible for the four reads observing one consistent state.

    Args:
        config: L1 fee configuration, or None if the chain has none
        reader: Storage read capability
        slots: Storage slot layout of the fee parameters

    Returns:
        Immutable FeeContext

    Raises:
        ParameterOverflowError: If a parameter is out of range
    """
    if config is None or not config.fee_mechanism_enabled:
        logger.debug("L1 fee mechanism disabled, using zero context")
        return FeeContext.zero()

    l1_block = config.l1_block_address
    oracle = config.gas_price_oracle_address

    base_fee = decode_word(reader.read(l1_block, slots.base_fee), "base_fee")
    overhead = decode_word(reader.read(oracle, slots.overhead), "overhead")
    raw_scalar = decode_word(reader.read(oracle, slots.scalar), "scalar")
    decimals = decode_word(reader.read(oracle, slots.decimals), "decimals")

    scalar = scale_decimals(raw_scalar, decimals)

    logger.debug(
        f"L1 fee context: base_fee={base_fee} overhead={overhead} "
        f"scalar={raw_scalar}/10**{decimals}"
    )

    return FeeContext(base_fee=base_fee, overhead=overhead, scalar=scalar)
