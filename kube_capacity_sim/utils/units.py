from __future__ import annotations

import re
from decimal import ROUND_CEILING, Decimal, InvalidOperation


_QUANTITY_PATTERN = re.compile(
    r"^(?P<val>[+-]?(?:\d+(?:\.\d*)?|\.\d+))"
    r"(?P<suffix>Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E|[eE][+-]?\d+)?$"
)

_BINARY_SUFFIXES = {
    "Ki": Decimal(2) ** 10,
    "Mi": Decimal(2) ** 20,
    "Gi": Decimal(2) ** 30,
    "Ti": Decimal(2) ** 40,
    "Pi": Decimal(2) ** 50,
    "Ei": Decimal(2) ** 60,
}

_DECIMAL_EXPONENTS = {
    "n": -9,
    "u": -6,
    "m": -3,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}


def parse_quantity(value: str | int | float | Decimal) -> Decimal:
    """Parse a Kubernetes quantity into an exact Decimal in base units.

    - 400m => 0.4
    - 10e6 => 10000000
    - 1Gi => 1073741824
    - 2 => 2
    """
    if isinstance(value, bool):
        raise ValueError(f"Unknown quantity: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    s = str(value).strip()
    m = _QUANTITY_PATTERN.match(s)
    if not m:
        raise ValueError(f"Unknown quantity: {value}")
    try:
        val = Decimal(m.group("val"))
    except InvalidOperation as e:  # pragma: no cover - redundant due to regex
        raise ValueError(f"Unknown quantity: {value}") from e

    suffix = m.group("suffix") or ""
    if not suffix:
        return val
    if suffix in _BINARY_SUFFIXES:
        return val * _BINARY_SUFFIXES[suffix]
    if suffix in _DECIMAL_EXPONENTS:
        return val.scaleb(_DECIMAL_EXPONENTS[suffix])
    # e/E exponent notation
    return val.scaleb(int(suffix[1:]))


def milli_value(value: Decimal) -> int:
    """Return the quantity in milli-units, rounding up like Kubernetes does."""
    scaled = value.scaleb(3)
    integral = scaled.to_integral_value(rounding=ROUND_CEILING)
    return int(integral)


def format_quantity(name: str, value: Decimal) -> str:
    """Render a quantity the way kubectl would show it for the resource.

    CPU with a fractional core is shown in milli-units; everything else is
    shown as a plain integer when it is whole.
    """
    if value == value.to_integral_value():
        return str(int(value))
    if name == "cpu":
        return f"{milli_value(value)}m"
    return format(value.normalize(), "f")
