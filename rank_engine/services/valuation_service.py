# rank_engine/services/valuation_service.py
"""
Sale valuation: converts a sale amount into Case Credits.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

import config
from rank_engine.errors import EngineError, EngineErrorKind
from rank_engine.sale import SaleRecord, SaleStatus, SaleType
from rank_engine.utils.decimals import toDecimal, roundCC, roundAmount
from rank_engine.utils.time_machine import timeMachine


def _divisorFor(saleType: SaleType) -> Decimal:
    if saleType is SaleType.RETAIL:
        return config.RETAIL_DIVISOR
    return config.WHOLESALE_DIVISOR


def parseAmount(amount: Any) -> Decimal:
    """
    Sale amount as Decimal.

    INVALID_AMOUNT for negative or non-finite input and for amounts above
    config.MAX_SALE_AMOUNT (the largest value the sales table can hold).
    """
    value = toDecimal(amount)
    if value is None or value < 0 or value > config.MAX_SALE_AMOUNT:
        raise EngineError(EngineErrorKind.INVALID_AMOUNT, f"amount={amount!r}")
    return value


def parseSaleType(saleType: Union[SaleType, str]) -> SaleType:
    if isinstance(saleType, SaleType):
        return saleType
    if isinstance(saleType, str):
        try:
            return SaleType(saleType)
        except ValueError:
            pass
    raise EngineError(EngineErrorKind.INVALID_SALE_TYPE, f"saleType={saleType!r}")


def parseSaleStatus(status: Union[SaleStatus, str]) -> SaleStatus:
    if isinstance(status, SaleStatus):
        return status
    try:
        return SaleStatus(status)
    except ValueError:
        raise EngineError(EngineErrorKind.INVALID_SALE_STATUS, f"status={status!r}")


def calculateCC(amount: Any, saleType: Union[SaleType, str]) -> Decimal:
    """
    CC earned by a sale: round(amount / divisor, 3), half-up.

    RETAIL divides by 346, WHOLESALE by 242.
    The amount is validated before the sale type.
    """
    value = parseAmount(amount)
    kind = parseSaleType(saleType)

    if value == 0:
        return roundCC(Decimal("0"))

    return roundCC(value / _divisorFor(kind))


def createSaleRecord(
        amount: Any,
        saleType: Union[SaleType, str],
        transactionId: str,
        status: Union[SaleStatus, str] = SaleStatus.APPROVED,
        timestamp: Optional[datetime] = None,
        receiptUrl: Optional[str] = None
) -> SaleRecord:
    """
    Validated SaleRecord with ccEarned derived from amount and type.
    The amount is rounded to cents first, so the stored amount is the valued one.
    """
    value = roundAmount(parseAmount(amount))
    kind = parseSaleType(saleType)
    return SaleRecord(
        amount=value,
        saleType=kind,
        ccEarned=calculateCC(value, kind),
        transactionId=transactionId,
        timestamp=timestamp or timeMachine.now,
        status=parseSaleStatus(status),
        receiptUrl=receiptUrl
    )
