"""
Type-safe unit system for L1 fee calculations

This module provides strongly-typed wrappers for the units used by the
L1 data fee, plus the settlement-layer gas schedule constants.
All values are exact integers; floats only appear in display helpers.
"""

from typing import NewType
from dataclasses import dataclass


# === BASE UNIT TYPES ===

Wei = NewType('Wei', int)                # Base unit: wei (10^-18 ETH)
EthAmount = NewType('EthAmount', float)  # 1 ETH = 10^18 wei


# === EVM WORD BOUNDS ===

MAX_UINT256 = 2 ** 256 - 1

# Largest n such that 10**n fits in a uint256
MAX_DECIMALS = 77


# === L1 GAS SCHEDULE ===

TX_DATA_ZERO_GAS = 4                # Per zero calldata byte
TX_DATA_NON_ZERO_GAS_EIP2028 = 16   # Per non-zero calldata byte (EIP-2028)
SIGNATURE_NONZERO_BYTES = 68        # Signature bytes missing from the unsigned payload


@dataclass(frozen=True)
class WeiPerGas:
    """Fee rate: wei per gas unit"""
    value: int

    def to_gwei_per_gas(self) -> float:
        """Convert to gwei per gas for display"""
        return self.value / 1e9

    def __str__(self) -> str:
        return f"{self.to_gwei_per_gas():.6f} gwei/gas"


# === CONVERSION UTILITIES ===

def wei_to_eth(wei: Wei) -> EthAmount:
    """Convert wei to ETH"""
    return EthAmount(wei / 1e18)
