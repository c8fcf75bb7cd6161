"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import (
    Money,
    Page,
    Quantity,
    Reference,
    ReferenceType,
    check_paging,
)


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_from_int(self):
        assert Money.of(10).amount == Decimal("10")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_zero(self):
        assert Money.zero() == Money.of("0")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "15.00"
        assert str(Money.of("9.5")) == "9.50"


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_positive_accepted(self):
        assert Quantity(5).value == 5

    @pytest.mark.parametrize("value", [0, -3])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(value)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(2.5)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)


# ── Reference ────────────────────────────────────────────────────────────────


class TestReference:

    def test_parse(self):
        ref = Reference.parse("SalesOrder:SO-1001")
        assert ref == Reference(ReferenceType.SALES_ORDER, "SO-1001")
        assert str(ref) == "SalesOrder:SO-1001"

    def test_parse_unknown_type(self):
        with pytest.raises(ValidationError, match="Unknown reference type"):
            Reference.parse("Invoice:7")

    def test_parse_missing_separator(self):
        with pytest.raises(ValidationError, match="Expected 'Type:Id'"):
            Reference.parse("SalesOrder")

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError, match="id is required"):
            Reference(ReferenceType.SERVICE_ORDER, " ")


# ── Paging ───────────────────────────────────────────────────────────────────


class TestPaging:

    def test_slice(self):
        page = Page.slice(list(range(45)), page=3, limit=20)
        assert page.items == list(range(40, 45))
        assert page.pages == 3
        assert page.total == 45
        assert not page.has_next

    def test_empty_listing_has_one_page(self):
        page = Page.slice([], page=1, limit=20)
        assert page.items == []
        assert page.pages == 1

    def test_limit_is_capped(self):
        assert check_paging(1, 500) == 100

    @pytest.mark.parametrize("page,limit", [(0, 20), (1, 0)])
    def test_invalid_paging_rejected(self, page, limit):
        with pytest.raises(ValidationError, match="must be at least 1"):
            check_paging(page, limit)
