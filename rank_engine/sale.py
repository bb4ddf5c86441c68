# rank_engine/sale.py
"""
Sale records submitted by the sales-reporting screens.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class SaleType(Enum):
    RETAIL = "RETAIL"
    WHOLESALE = "WHOLESALE"


class SaleStatus(Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class SaleRecord:
    amount: Decimal
    saleType: SaleType
    ccEarned: Decimal
    transactionId: str
    timestamp: datetime
    status: SaleStatus = SaleStatus.APPROVED
    receiptUrl: Optional[str] = None
