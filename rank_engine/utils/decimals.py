# rank_engine/utils/decimals.py
"""
Decimal coercion helpers shared by the calculator and the ledger.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import config


def toDecimal(value: Any) -> Optional[Decimal]:
    """
    Convert user input to a finite Decimal.

    Floats go through str() so 0.1 stays 0.1.
    Returns None for booleans, non-numeric values, NaN and infinities.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not result.is_finite():
        return None
    return result


def roundCC(value: Decimal) -> Decimal:
    """Round to CC precision (3 places), half-up."""
    return value.quantize(config.CC_QUANTUM, rounding=ROUND_HALF_UP)


def roundAmount(value: Decimal) -> Decimal:
    """Round a sale amount to cents, half-up."""
    return value.quantize(config.AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
