"""Tests for ad product sanitization."""

import pytest

from ads_manager.errors import ValidationError
from ads_manager.marketplace.product import (
    sanitize_payable_event,
    sanitize_placements,
    sanitize_price,
    sanitize_product_args,
    sanitize_sizes,
    sanitize_text_field,
)

class TestSizes:
    """Size strings."""

    @pytest.mark.parametrize("size", ["300x250", "728x90", "1x1", "320.5x50"])
    def test_valid_sizes_unchanged(self, size):
        assert sanitize_sizes([size]) == [size]

    @pytest.mark.parametrize("size", ["300", "300x250x600", "axb", "300x", "x250", "300X250", "fluid", ""])
    def test_invalid_sizes_dropped(self, size):
        assert sanitize_sizes([size]) == []

    def test_partial_lists_pass(self):
        assert sanitize_sizes(["300x250", "bogus", "728x90"]) == ["300x250", "728x90"]

    def test_markup_stripped(self):
        assert sanitize_sizes(["<b>300x250</b>"]) == ["300x250"]

    def test_empty(self):
        assert sanitize_sizes(None) == []

class TestPrice:
    """Prices."""

    @pytest.mark.parametrize("price", ["", None, 0, "abc", "12abc", "-", float("nan")])
    def test_empty_or_non_numeric(self, price):
        assert sanitize_price(price) == 0

    def test_rounded_to_cents(self):
        assert sanitize_price(3.14159) == 3.14
        assert sanitize_price("3.14159") == 3.14
        assert sanitize_price("2.675") == 2.68

    def test_integer_strings(self):
        assert sanitize_price("15") == 15.0

    def test_negative_clamped(self):
        assert sanitize_price("-5") == 0

    @pytest.mark.parametrize("price", ["1e30", 1e30, "1000000000000000000000000000000.004"])
    def test_large_values_rounded(self, price):
        assert sanitize_price(price) == 1e30

    def test_overflowing_string(self):
        assert sanitize_price("1e400") == 0

class TestPayableEvent:
    """Payable events."""

    @pytest.mark.parametrize("event", ["cpm", "cpc", "cpv", "cpd", "viewable_cpm"])
    def test_allowed(self, event):
        assert sanitize_payable_event(event) == event

    @pytest.mark.parametrize("event", ["bogus", "CPM", "", None])
    def test_rejected(self, event):
        assert sanitize_payable_event(event) == ""

def test_placements_sanitized():
    assert sanitize_placements([" sidebar ", "<i>above_header</i>", "in\narticle"]) == [
        "sidebar",
        "above_header",
        "in article",
    ]

def test_text_field():
    assert sanitize_text_field("  a\t\tb  ") == "a b"

def test_product_args():
    args = sanitize_product_args({
        "placements": ["sidebar"],
        "price": "10.999",
        "required_sizes": ["300x250", "nope"]
    })

    assert args == {
        "placements": ["sidebar"],
        "price": 11.0,
        "payable_event": "cpd",
        "required_sizes": ["300x250"]
    }

def test_product_args_missing_fields():
    with pytest.raises(ValidationError) as exc_info:
        sanitize_product_args({"placements": ["sidebar"]})

    assert exc_info.value.details["missing_fields"] == ["price", "required_sizes"]
