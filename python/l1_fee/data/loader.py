"""
Payload Loader for batch L1 fee pricing

Loads serialized transactions from CSV and prices each one against a fee
context.

CSV Format:
tx_hash,payload
0xabc...,0x02f8b1...

The payload column holds the fully serialized transaction as hex (the
0x prefix is optional). Other columns are carried through unchanged.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import pandas as pd

from ..core.fee_context import FeeContext
from ..core.l1_cost import L1CostCalculator

logger = logging.getLogger(__name__)

PAYLOAD_COLUMN = 'payload'

COST_COLUMNS = ['zero_bytes', 'nonzero_bytes', 'l1_gas_used', 'raw_cost_wei', 'l1_fee_wei']


def parse_payload(text: str) -> bytes:
    """
    Decode a hex payload.

    Raises:
        ValueError: If the text is not valid hex
    """
    hex_str = text.strip()
    if hex_str[:2].lower() == '0x':
        hex_str = hex_str[2:]
    try:
        return bytes.fromhex(hex_str)
    except ValueError as e:
        raise ValueError(f"Invalid hex payload {text[:20]!r}: {e}") from e


class PayloadLoader:
    """
    Batch pricer for serialized transactions.
    """

    def __init__(self, context: FeeContext):
        """
        Initialize the loader.

        Args:
            context: Fee parameters used to price every transaction
        """
        self.calculator = L1CostCalculator(context)

    def load_csv(self, file_path: Union[str, Path]) -> pd.DataFrame:
        """
        Load a transactions CSV and price every row.

        Args:
            file_path: Path to CSV file

        Returns:
            DataFrame with the input columns plus the cost columns

        Raises:
            ValueError: If the file format is invalid
            FileNotFoundError: If the file doesn't exist
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Data file not found: {file_path}")

        try:
            df = pd.read_csv(file_path, dtype={PAYLOAD_COLUMN: str}, keep_default_na=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to read CSV file: {e}") from e

        if PAYLOAD_COLUMN not in df.columns:
            raise ValueError(f"Missing required column: {PAYLOAD_COLUMN}")

        logger.info(f"Loaded {len(df)} transactions from {file_path}")
        return self.price_frame(df)

    def price_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Add cost columns to a DataFrame with a hex payload column.

        Cost values can exceed 64 bits and are stored as Python ints in
        object columns.

        Args:
            df: DataFrame with a payload column

        Returns:
            Copy of df with zero_bytes, nonzero_bytes, l1_gas_used,
            raw_cost_wei and l1_fee_wei columns
        """
        result = df.copy()
        rows = [self.calculator.breakdown(parse_payload(p)) for p in result[PAYLOAD_COLUMN]]

        for column in COST_COLUMNS:
            values = np.empty(len(rows), dtype=object)
            values[:] = [row[column] for row in rows]
            result[column] = values

        return result

    def get_statistics(self, df: pd.DataFrame) -> Dict[str, Any]:
        """
        Summary statistics of a priced DataFrame.

        Args:
            df: Output of load_csv or price_frame

        Returns:
            Dictionary with count, total, min, max and mean L1 fee (wei),
            and total L1 gas
        """
        if len(df) == 0:
            return {'count': 0, 'total_fee_wei': 0, 'total_gas': 0}

        fees = [int(v) for v in df['l1_fee_wei']]
        return {
            'count': len(fees),
            'total_fee_wei': sum(fees),
            'min_fee_wei': min(fees),
            'max_fee_wei': max(fees),
            'mean_fee_wei': sum(fees) / len(fees),
            'total_gas': sum(int(v) for v in df['l1_gas_used']),
        }

    def save_to_csv(self, df: pd.DataFrame, file_path: Union[str, Path]) -> None:
        """
        Save a priced DataFrame to CSV.

        Raises:
            OSError: If the file cannot be written
        """
        df.to_csv(file_path, index=False)
        logger.info(f"Saved {len(df)} priced transactions to {file_path}")
