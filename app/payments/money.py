"""
Exact conversion between provider minor units and stored major units.

Stripe reports amounts as integers in the currency's smallest unit
(cents for usd, yen for jpy, fils for kwd). Payments store major units
as decimals. Conversions go through Decimal only; a float never touches
an amount.

Usage:
    from payments.money import to_major_units, to_minor_units, format_major_units

    to_major_units(12345, "usd")        # Decimal("123.45")
    format_major_units(500, "jpy")      # "500"
    to_minor_units(Decimal("12.345"), "kwd")  # 12345
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from payments.exceptions import PaymentValidationError

# https://docs.stripe.com/currencies#zero-decimal
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "bif",
        "clp",
        "djf",
        "gnf",
        "jpy",
        "kmf",
        "krw",
        "mga",
        "pyg",
        "rwf",
        "ugx",
        "vnd",
        "vuv",
        "xaf",
        "xof",
        "xpf",
    }
)

# https://docs.stripe.com/currencies#three-decimal
THREE_DECIMAL_CURRENCIES = frozenset({"bhd", "jod", "kwd", "omr", "tnd"})


def currency_exponent(currency: str) -> int:
    """Number of decimal places the currency's minor unit represents."""
    code = (currency or "").lower()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def to_major_units(minor_amount: int, currency: str) -> Decimal:
    """
    Convert an integer minor-unit amount to an exact major-unit Decimal.

    The result is quantized to the currency's precision, so
    ``to_major_units(12300, "usd")`` is ``Decimal("123.00")``.

    Raises:
        PaymentValidationError: If the amount is not an integer or negative
    """
    if isinstance(minor_amount, bool) or not isinstance(minor_amount, int):
        raise PaymentValidationError(
            "Minor-unit amount must be an integer",
            details={"amount": repr(minor_amount)},
        )
    if minor_amount < 0:
        raise PaymentValidationError(
            "Minor-unit amount cannot be negative",
            details={"amount": minor_amount},
        )

    exponent = currency_exponent(currency)
    return Decimal(minor_amount).scaleb(-exponent).quantize(Decimal(1).scaleb(-exponent))


def format_major_units(minor_amount: int, currency: str) -> str:
    """Render a minor-unit amount as a major-unit string with fixed precision."""
    return f"{to_major_units(minor_amount, currency):f}"


def to_minor_units(major_amount: Decimal | str | int, currency: str) -> int:
    """
    Convert a major-unit amount to integer minor units for the provider.

    Amounts with more precision than the currency supports are rounded
    half-up to the nearest minor unit.
    """
    exponent = currency_exponent(currency)
    minor = Decimal(str(major_amount)).scaleb(exponent)
    return int(minor.quantize(Decimal(1), rounding=ROUND_HALF_UP))
