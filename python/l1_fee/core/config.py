"""
L1 fee configuration

Chain-level settings deciding whether the L1 data fee is charged, and where
its parameters live in state.
"""

import os
import re
from dataclasses import dataclass
from typing import Optional, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


# OP-stack predeploy addresses
L1_BLOCK_ADDRESS = "0x4200000000000000000000000000000000000015"
GAS_PRICE_ORACLE_ADDRESS = "0x420000000000000000000000000000000000000F"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class StorageSlots:
    """Storage slot identifiers of the four fee parameters."""
    base_fee: int = 2
    overhead: int = 3
    scalar: int = 4
    decimals: int = 5


DEFAULT_SLOTS = StorageSlots()


class L1FeeConfig(BaseModel):
    """
    Configuration of the L1 data fee mechanism.

    Attributes:
        fee_mechanism_enabled: Whether the L1 data fee is charged at all
        l1_block_address: Contract holding the L1 base fee
        gas_price_oracle_address: Contract holding overhead, scalar and decimals
    """

    fee_mechanism_enabled: bool = Field(True, description="Charge the L1 data fee")
    l1_block_address: str = Field(L1_BLOCK_ADDRESS, description="L1 block info contract")
    gas_price_oracle_address: str = Field(GAS_PRICE_ORACLE_ADDRESS, description="Gas price oracle contract")

    model_config = ConfigDict(frozen=True, validate_default=True)

    @field_validator("l1_block_address", "gas_price_oracle_address")
    @classmethod
    def _normalize_address(cls, v: str) -> str:
        """Require 0x-prefixed 20-byte hex addresses, stored lowercase."""
        if not _ADDRESS_RE.match(v):
            raise ValueError(f"Invalid address {v!r}: expected 0x followed by 40 hex characters")
        return v.lower()

    @classmethod
    def disabled(cls) -> "L1FeeConfig":
        """Configuration for a chain that does not charge the L1 data fee."""
        return cls(fee_mechanism_enabled=False)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "L1FeeConfig":
        """
        Build a configuration from environment variables.

        Reads L1FEE_ENABLED, L1FEE_L1_BLOCK_ADDRESS and
        L1FEE_GAS_PRICE_ORACLE_ADDRESS. Unset variables keep their defaults.

        Raises:
            ValueError: If L1FEE_ENABLED is not a recognised boolean
        """
        env = os.environ if environ is None else environ
        values = {}

        enabled = env.get("L1FEE_ENABLED")
        if enabled is not None:
            flag = enabled.strip().lower()
            if flag in _TRUE_VALUES:
                values["fee_mechanism_enabled"] = True
            elif flag in _FALSE_VALUES:
                values["fee_mechanism_enabled"] = False
            else:
                raise ValueError(f"L1FEE_ENABLED must be a boolean, got {enabled!r}")

        if "L1FEE_L1_BLOCK_ADDRESS" in env:
            values["l1_block_address"] = env["L1FEE_L1_BLOCK_ADDRESS"]
        if "L1FEE_GAS_PRICE_ORACLE_ADDRESS" in env:
            values["gas_price_oracle_address"] = env["L1FEE_GAS_PRICE_ORACLE_ADDRESS"]

        return cls(**values)
