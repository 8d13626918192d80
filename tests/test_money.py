"""Tests for money conversion and base-currency normalization."""

from decimal import Decimal

from split_ledger.currency import sum_base, to_base
from split_ledger.models import Expense, Split
from split_ledger.money import (
    round_half_away,
    round_to_two,
    to_decimal,
    to_minor_units,
)


class TestToMinorUnits:
    """Test decimal -> cents conversion."""

    def test_converts_numbers(self):
        """Plain ints, floats and Decimals convert to cents."""
        assert to_minor_units(10.50) == 1050
        assert to_minor_units(0.99) == 99
        assert to_minor_units(100) == 10000
        assert to_minor_units(Decimal("12.34")) == 1234

    def test_converts_strings(self):
        """Numeric text converts the same way, surrounding spaces ignored."""
        assert to_minor_units("10.50") == 1050
        assert to_minor_units(" 0.99 ") == 99
        assert to_minor_units("100") == 10000

    def test_invalid_input_returns_zero(self):
        """Untrusted input never raises."""
        assert to_minor_units(0) == 0
        assert to_minor_units("invalid") == 0
        assert to_minor_units("") == 0
        assert to_minor_units(None) == 0
        assert to_minor_units(float("nan")) == 0
        assert to_minor_units(float("inf")) == 0
        assert to_minor_units("Infinity") == 0
        assert to_minor_units("NaN") == 0
        assert to_minor_units(True) == 0
        assert to_minor_units([1, 2]) == 0

    def test_rounds_half_away_from_zero(self):
        """Halves round away from zero at the cent boundary."""
        assert to_minor_units(10.555) == 1056
        assert to_minor_units(10.554) == 1055
        assert to_minor_units(-10.555) == -1056
        assert to_minor_units(Decimal("0.005")) == 1
        assert to_minor_units(Decimal("-0.005")) == -1


class TestToDecimal:
    """Test cents -> decimal conversion."""

    def test_converts_cents(self):
        """Cents come back as 2-place Decimals."""
        assert to_decimal(1050) == Decimal("10.50")
        assert str(to_decimal(1050)) == "10.50"
        assert to_decimal(99) == Decimal("0.99")
        assert str(to_decimal(10000)) == "100.00"

    def test_invalid_input_returns_zero(self):
        """Non-numeric cents become 0.00."""
        assert to_decimal(0) == Decimal("0")
        assert str(to_decimal("invalid")) == "0.00"
        assert str(to_decimal(None)) == "0.00"
        assert str(to_decimal(float("nan"))) == "0.00"

    def test_fractional_cents_are_rounded(self):
        """Fractional cents round to whole cents first."""
        assert to_decimal(1050.4) == Decimal("10.50")
        assert to_decimal(1050.5) == Decimal("10.51")


class TestRoundTrip:
    """Test the money boundary is idempotent."""

    def test_two_place_values_survive_round_trip(self):
        """Values with <= 2 fraction digits come back unchanged."""
        for text in ["10.50", "0.99", "100.01", "0.01", "999.99", "0", "12345.67"]:
            value = Decimal(text)
            assert to_decimal(to_minor_units(value)) == value

    def test_round_trip_is_idempotent(self):
        """Applying the round trip twice equals applying it once."""
        for value in [10.555, 0.333, 7, "19.999"]:
            once = to_decimal(to_minor_units(value))
            twice = to_decimal(to_minor_units(once))
            assert once == twice

    def test_round_to_two(self):
        """round_to_two uses the ledger's rounding rule."""
        assert round_to_two(10.555) == Decimal("10.56")
        assert round_to_two(10.554) == Decimal("10.55")
        assert str(round_to_two(10.5)) == "10.50"

    def test_round_half_away(self):
        """Integer rounding never uses banker's rounding."""
        assert round_half_away(Decimal("2.5")) == 3
        assert round_half_away(Decimal("3.5")) == 4
        assert round_half_away(Decimal("-2.5")) == -3
        assert round_half_away(Decimal("2.4999")) == 2


class TestToBase:
    """Test currency normalization."""

    def test_converts_with_rate(self):
        """Amounts are multiplied by the rate and rounded."""
        assert to_base(1000, 1.5) == 1500
        assert to_base(2500, 0.8) == 2000
        assert to_base(1000, 1.0) == 1000
        assert to_base(333, 0.5) == 167
        assert to_base(1000, Decimal("1.25")) == 1250

    def test_defaults_to_rate_of_one(self):
        """Missing rate is a no-op conversion."""
        assert to_base(1000) == 1000
        assert to_base(2500, None) == 2500

    def test_non_finite_input_returns_zero(self):
        """NaN and infinities never leak out."""
        assert to_base(float("nan"), 1.0) == 0
        assert to_base(1000, float("nan")) == 0
        assert to_base(float("inf"), 1.0) == 0
        assert to_base(1000, float("inf")) == 0
        assert to_base("abc", 1.0) == 0

    def test_sum_base(self):
        """sum_base totals expenses in the base currency."""
        expenses = [
            Expense(
                id="e1",
                amount_cents=1000,
                fx_rate_to_base=1.5,
                payer_id="a",
                participants=[Split(participant_id="a", amount_cents=1000)],
                occurred_at="2024-01-01T00:00:00Z",
            ),
            Expense(
                id="e2",
                amount_cents=500,
                payer_id="a",
                participants=[Split(participant_id="a", amount_cents=500)],
                occurred_at="2024-01-02T00:00:00Z",
            ),
        ]

        assert sum_base(expenses) == 2000
        assert sum_base([]) == 0


class TestOutOfRange:
    """Test amounts wider than the default decimal precision."""

    def test_huge_amounts_convert_exactly(self):
        """Large strings and floats still convert without raising."""
        assert to_minor_units("1e30") == 10**32
        assert to_minor_units(1e30) == 10**32
        assert to_minor_units("123456789012345678901234567890.125") == (
            12345678901234567890123456789013
        )

    def test_exponent_overflow_returns_zero(self):
        """Values past the decimal exponent range become 0."""
        assert to_minor_units("1e999999999") == 0
        assert to_minor_units("9e999998") == 0
        assert to_base("9e999998", 100) == 0

    def test_huge_base_conversion(self):
        """to_base keeps every digit of large amounts."""
        assert to_base(10**28, 1.5) == 15 * 10**27
        assert to_base(10**40 + 1, 0.5) == 5 * 10**39 + 1

    def test_huge_cents_back_to_decimal(self):
        """to_decimal handles cents wider than 28 digits."""
        assert str(to_decimal(10**30)) == "1" + "0" * 28 + ".00"
        assert to_decimal(to_minor_units("1e30")) == Decimal("1e30")
