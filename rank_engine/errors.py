# rank_engine/errors.py
"""
Error kinds raised by the credit & rank engine.
"""
from enum import Enum
from typing import Optional


class EngineErrorKind(Enum):
    INVALID_AMOUNT = "invalid_amount"
    INVALID_SALE_TYPE = "invalid_sale_type"
    INVALID_DELTA = "invalid_delta"
    MISSING_RANK_DEFINITION = "missing_rank_definition"  # recovered, never raised

    UNKNOWN_PARTICIPANT = "unknown_participant"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_SALE = "unknown_sale"
    INVALID_SALE_STATUS = "invalid_sale_status"


class EngineError(ValueError):
    """Rejected engine input. The participant record was not touched."""

    def __init__(self, kind: EngineErrorKind, details: Optional[str] = None):
        self.kind = kind
        self.details = details
        message = kind.value if not details else f"{kind.value}: {details}"
        super().__init__(message)


class ConfigurationError(Exception):
    """Invalid rank table or role mapping."""
    pass
