"""Fixed-point USDT amounts.

Settlement amounts are stored and compared as integers of ``1 / SCALE`` USDT
so that an amount computed at allocation time and one decoded from a ledger
transfer are equal exactly when they denote the same on-chain value.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation

DECIMAL_PLACES = 4
SCALE = 10**DECIMAL_PLACES
QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)

# One slot step is the smallest representable amount (0.0001 USDT).
INCREMENT_UNITS = 1


def to_units(amount: Decimal | int | str) -> int:
    """Convert an amount to units, truncating anything below 0.0001."""
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"invalid amount: {amount!r}")
    return int((value * SCALE).to_integral_value(rounding=ROUND_DOWN))


def from_units(units: int) -> Decimal:
    return (Decimal(units) / SCALE).quantize(QUANTUM)


def fiat_to_units(amount: Decimal, rate: Decimal) -> int:
    """``floor(amount / rate * 10^4)``: the payer is never quoted upwards."""
    if rate <= 0:
        raise ValueError(f"rate must be positive, got {rate}")
    return int((Decimal(amount) * SCALE / Decimal(rate)).to_integral_value(rounding=ROUND_DOWN))


def ledger_raw_to_units(raw: int | str, decimals: int) -> int | None:
    """Convert a ledger-native integer amount.

    Returns ``None`` when the transfer carries precision finer than one unit;
    such an amount can never equal an allocated slot.
    """
    raw_value = int(raw)
    if decimals >= DECIMAL_PLACES:
        divisor = 10 ** (decimals - DECIMAL_PLACES)
        units, remainder = divmod(raw_value, divisor)
        if remainder:
            return None
        return units
    return raw_value * 10 ** (DECIMAL_PLACES - decimals)


def format_units(units: int) -> str:
    return f"{from_units(units):f}"


__all__ = [
    "DECIMAL_PLACES",
    "INCREMENT_UNITS",
    "SCALE",
    "fiat_to_units",
    "format_units",
    "from_units",
    "ledger_raw_to_units",
    "to_units",
]
