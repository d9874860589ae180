"""
Value unit conversion

All balances are integers in base units (wei). Human-facing amounts are
Decimals so conversions never lose precision.
"""

from decimal import Decimal

UNITS = {
    "wei": 0,
    "gwei": 9,
    "ether": 18,
}


def to_wei(amount: Decimal | int | str, unit: str = "ether") -> int:
    """
    Convert an amount expressed in ``unit`` to base units

    Raises:
        ValueError: If the unit is unknown or the amount has sub-wei precision
    """
    if unit not in UNITS:
        raise ValueError(f"Unknown unit '{unit}'. Known units: {list(UNITS)}")
    value = Decimal(str(amount)).scaleb(UNITS[unit])
    if value != value.to_integral_value():
        raise ValueError(f"Amount {amount} {unit} is not a whole number of wei")
    return int(value)


def from_wei(value: int, unit: str = "ether") -> Decimal:
    """Convert base units to a Decimal amount in ``unit``"""
    if unit not in UNITS:
        raise ValueError(f"Unknown unit '{unit}'. Known units: {list(UNITS)}")
    return Decimal(value).scaleb(-UNITS[unit])
