"""
Runtime validation and error types

Range checks for the integer and rational quantities that flow through the
L1 fee pipeline. Overflow is never silent: a value that does not fit in an
EVM word is an error, since a wrapped cost could undercharge.
"""

import logging
from decimal import Decimal
from fractions import Fraction
from functools import wraps
from typing import Union

from .units import MAX_UINT256

logger = logging.getLogger(__name__)


class ParameterOverflowError(OverflowError):
    """Raised when a fee parameter (decimals, scalar, storage word) is out of range"""
    pass


class CostOverflowError(OverflowError):
    """Raised when gas or cost arithmetic exceeds the uint256 range"""
    pass


ScalarLike = Union[Fraction, int, float, Decimal, str]


# === VALIDATION FUNCTIONS ===

def validate_non_negative_int(value: int, name: str) -> int:
    """
    Validate an integer input is non-negative

    Args:
        value: Value to validate
        name: Name for error messages

    Returns:
        Validated value

    Raises:
        ValueError: If value is not an integer or is negative
    """
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")

    return value


def validate_uint256(value: int, name: str, error: type = CostOverflowError) -> int:
    """
    Validate an integer fits in an unsigned 256-bit word

    Args:
        value: Value to validate
        name: Name for error messages
        error: Exception type raised on overflow

    Returns:
        Validated value

    Raises:
        ValueError: If value is negative or not an integer
        OverflowError: (of type ``error``) if value exceeds 2**256 - 1
    """
    validate_non_negative_int(value, name)

    if value > MAX_UINT256:
        raise error(f"{name} {value:,} exceeds uint256 range")

    return value


def to_fraction(scalar: ScalarLike, name: str = "scalar") -> Fraction:
    """
    Convert a scalar to an exact non-negative Fraction

    Floats and Decimals convert exactly (no rounding); strings are parsed
    by Fraction, so "1.5" and "3/2" are both accepted.

    Raises:
        ValueError: If the scalar is negative, NaN/infinite or unparseable
    """
    if isinstance(scalar, bool):
        raise ValueError(f"{name} must be numeric, got bool")

    try:
        result = Fraction(scalar)
    except (TypeError, ValueError, OverflowError, ZeroDivisionError) as e:
        raise ValueError(f"{name} {scalar!r} is not a finite number: {e}") from e

    if result < 0:
        raise ValueError(f"{name} cannot be negative, got {scalar}")

    return result


# === DECORATORS ===

def validate_cost_output(func):
    """Decorator checking that a cost function returns a uint256 value"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        result = func(*args, **kwargs)
        validate_uint256(result, f"{func.__name__} result")
        if result == 0:
            logger.debug(f"{func.__name__}: zero cost")
        return result

    return wrapper
