# tests/test_valuation_service.py
"""
Tests for sale valuation (amount → Case Credits).

    RETAIL:    round(amount / 346, 3)
    WHOLESALE: round(amount / 242, 3)
"""
from decimal import Decimal, ROUND_HALF_UP

import pytest

from rank_engine.errors import EngineError, EngineErrorKind
from rank_engine.sale import SaleStatus, SaleType
from rank_engine.services.valuation_service import calculateCC, createSaleRecord


def expected_cc(amount, divisor):
    return (Decimal(str(amount)) / Decimal(divisor)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)


# =============================================================================
# TEST CLASS: formula
# =============================================================================

class TestCalculateCC:
    """Divisor formula and rounding."""

    def test_retail_692_is_two_cc(self):
        """
        TEST: 692 RETAIL → 2.0 CC (692 / 346).
        """
        assert calculateCC(692, SaleType.RETAIL) == Decimal("2.0")

    def test_wholesale_242_is_one_cc(self):
        assert calculateCC(242, SaleType.WHOLESALE) == Decimal("1.0")

    def test_zero_amount(self):
        assert calculateCC(0, SaleType.RETAIL) == Decimal("0")
        assert calculateCC(0, SaleType.WHOLESALE) == Decimal("0")

    @pytest.mark.parametrize("amount", [1, 17.5, "99.99", 346, 1000, Decimal("12345.67")])
    def test_matches_formula(self, amount):
        """
        TEST: Both sale types follow round(amount / divisor, 3).
        """
        assert calculateCC(amount, SaleType.RETAIL) == expected_cc(amount, 346)
        assert calculateCC(amount, SaleType.WHOLESALE) == expected_cc(amount, 242)

    def test_three_decimal_places(self):
        result = calculateCC(100, SaleType.RETAIL)

        assert result == Decimal("0.289")
        assert result.as_tuple().exponent == -3

    def test_rounds_half_up(self):
        """
        TEST: Exact half at the 4th place rounds up, not to even.

        0.173 / 346 = 0.0005 → 0.001
        0.121 / 242 = 0.0005 → 0.001
        """
        assert calculateCC("0.173", SaleType.RETAIL) == Decimal("0.001")
        assert calculateCC("0.121", SaleType.WHOLESALE) == Decimal("0.001")

    def test_string_sale_type_accepted(self):
        assert calculateCC("692", "RETAIL") == Decimal("2")
        assert calculateCC("242", "WHOLESALE") == Decimal("1")

    def test_float_amount_uses_decimal_text(self):
        assert calculateCC(0.1, SaleType.RETAIL) == expected_cc("0.1", 346)


# =============================================================================
# TEST CLASS: rejections
# =============================================================================

class TestCalculateCCRejections:
    """Invalid input is rejected with a typed error kind."""

    @pytest.mark.parametrize("amount", [-50, -0.001, "-1", Decimal("-3")])
    def test_negative_amount(self, amount):
        with pytest.raises(EngineError) as exc:
            calculateCC(amount, SaleType.RETAIL)

        assert exc.value.kind is EngineErrorKind.INVALID_AMOUNT

    @pytest.mark.parametrize("amount", [
        float("nan"), float("inf"), float("-inf"), Decimal("NaN"), "Infinity",
        "abc", "", None, True, [], object()
    ])
    def test_non_numeric_or_non_finite_amount(self, amount):
        with pytest.raises(EngineError) as exc:
            calculateCC(amount, SaleType.WHOLESALE)

        assert exc.value.kind is EngineErrorKind.INVALID_AMOUNT

    @pytest.mark.parametrize("saleType", ["CASH", "retail", "", None, 1])
    def test_unknown_sale_type(self, saleType):
        with pytest.raises(EngineError) as exc:
            calculateCC(100, saleType)

        assert exc.value.kind is EngineErrorKind.INVALID_SALE_TYPE

    def test_amount_checked_before_sale_type(self):
        """
        TEST: -50 is INVALID_AMOUNT whatever the sale type.
        """
        with pytest.raises(EngineError) as exc:
            calculateCC(-50, "NOT_A_TYPE")

        assert exc.value.kind is EngineErrorKind.INVALID_AMOUNT

    def test_error_message_carries_kind(self):
        with pytest.raises(EngineError) as exc:
            calculateCC(-50, SaleType.RETAIL)

        assert str(exc.value).startswith("invalid_amount")
        assert isinstance(exc.value, ValueError)


# =============================================================================
# TEST CLASS: sale records
# =============================================================================

class TestCreateSaleRecord:

    def test_derives_cc_and_defaults(self, frozen_time):
        sale = createSaleRecord("692", "RETAIL", "TX-1001")

        assert sale.amount == Decimal("692")
        assert sale.saleType is SaleType.RETAIL
        assert sale.ccEarned == Decimal("2.000")
        assert sale.transactionId == "TX-1001"
        assert sale.timestamp == frozen_time
        assert sale.status is SaleStatus.APPROVED
        assert sale.receiptUrl is None

    def test_pending_status_from_string(self):
        sale = createSaleRecord(242, SaleType.WHOLESALE, "TX-1002", status="PENDING")

        assert sale.status is SaleStatus.PENDING
        assert sale.ccEarned == Decimal("1.000")

    def test_unknown_status(self):
        with pytest.raises(EngineError) as exc:
            createSaleRecord(242, SaleType.WHOLESALE, "TX-1003", status="MAYBE")

        assert exc.value.kind is EngineErrorKind.INVALID_SALE_STATUS

    def test_negative_amount_rejected(self):
        with pytest.raises(EngineError) as exc:
            createSaleRecord(-50, SaleType.RETAIL, "TX-1004")

        assert exc.value.kind is EngineErrorKind.INVALID_AMOUNT

    def test_amount_rounded_to_cents_before_valuation(self):
        """
        TEST: 100.005 is stored as 100.01 and CC is derived from 100.01.
        """
        sale = createSaleRecord("100.005", SaleType.RETAIL, "TX-1005")

        assert sale.amount == Decimal("100.01")
        assert sale.amount.as_tuple().exponent == -2
        assert sale.ccEarned == calculateCC("100.01", SaleType.RETAIL)


# =============================================================================
# TEST CLASS: amount range
# =============================================================================

class TestAmountRange:
    """Amounts must fit the sales table: at most 999999999999.99."""

    def test_largest_amount_valued(self):
        assert calculateCC("999999999999.99", SaleType.WHOLESALE) == expected_cc("999999999999.99", 242)

    @pytest.mark.parametrize("amount", ["1e30", "1000000000000", Decimal("1E+12"), 10 ** 40, 1e300])
    def test_oversized_amount_rejected(self, amount):
        with pytest.raises(EngineError) as exc:
            calculateCC(amount, SaleType.RETAIL)

        assert exc.value.kind is EngineErrorKind.INVALID_AMOUNT

    def test_oversized_sale_record_rejected(self):
        with pytest.raises(EngineError) as exc:
            createSaleRecord("1e30", "RETAIL", "TX-1006")

        assert exc.value.kind is EngineErrorKind.INVALID_AMOUNT
