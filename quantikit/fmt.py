"""Formatting of quantities in a chosen unit and display style."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from fractions import Fraction

from .quantity import Quantity
from .storage import StorageType, _to_f32
from .system import Dimension
from .unit import Unit

_SPEC = re.compile(
    r"^(?:(?P<fill>.)?(?P<align>[<>^=]))?"
    r"(?P<sign>[+\- ])?(?P<alt>#)?(?P<zero>0)?(?P<width>\d+)?"
    r"(?:\.(?P<precision>\d+))?(?P<type>[a-zA-Z%])?$"
)


class DisplayStyle(Enum):
    """How the unit is written after the value."""

    ABBREVIATION = "abbreviation"
    DESCRIPTION = "description"


def _shortest(magnitude: float, single: bool) -> str:
    """Shortest decimal text that reads back as ``magnitude``."""
    if single:
        for digits in range(1, 10):
            text = f"{magnitude:.{digits}g}"
            if _to_f32(float(text)) == magnitude:
                return text
    return repr(magnitude)


def _plain(text: str) -> str:
    result = format(Decimal(text), "f")
    if "." in result:
        result = result.rstrip("0").rstrip(".")
    return result


def _exponent_form(text: str, upper: bool) -> str:
    decimal = Decimal(text)
    marker = "E" if upper else "e"
    if decimal == 0:
        return f"0{marker}0"
    _, digits, exponent = decimal.normalize().as_tuple()
    chars = "".join(str(d) for d in digits)
    power = exponent + len(chars) - 1
    mantissa = chars[0] + ("." + chars[1:] if len(chars) > 1 else "")
    return f"{mantissa}{marker}{power}"


def _fixed_exponent(magnitude: float, precision: int, upper: bool) -> str:
    mantissa, _, power = f"{magnitude:.{precision}e}".partition("e")
    marker = "E" if upper else "e"
    return f"{mantissa}{marker}{int(power)}"


def _float_body(value: float, single: bool, kind: str | None,
                precision: int | None) -> tuple[bool, str, bool]:
    """Sign, digits and whether the digits are a finite number."""
    if math.isnan(value):
        return False, "NaN", False
    negative = math.copysign(1.0, value) < 0
    magnitude = abs(value)
    if math.isinf(value):
        return negative, "inf", False
    if kind in ("e", "E"):
        if precision is None:
            body = _exponent_form(_shortest(magnitude, single), kind == "E")
        else:
            body = _fixed_exponent(magnitude, precision, kind == "E")
    elif precision is None:
        body = _plain(_shortest(magnitude, single))
    else:
        body = f"{magnitude:.{precision}f}"
    return negative, body, True


def _pad(negative: bool, body: str, numeric: bool, spec: re.Match) -> str:
    sign = "-" if negative else ("+" if spec["sign"] == "+" else "")
    width = int(spec["width"] or 0)
    text = sign + body
    missing = width - len(text)
    if missing <= 0:
        return text
    align = spec["align"]
    fill = spec["fill"] or " "
    if spec["zero"] and not align and numeric:
        return sign + "0" * missing + body
    if align == "=":
        return sign + fill * missing + body
    return format(text, f"{fill}{align or '>'}{width}")


def _render(value, storage: StorageType, spec: str) -> str:
    match = _SPEC.match(spec)
    if match is None:
        raise ValueError(f"invalid format specification: {spec!r}")
    kind = match["type"]
    precision = None if match["precision"] is None else int(match["precision"])
    if storage.is_float() and kind in (None, "e", "E"):
        negative, body, numeric = _float_body(
            value, storage is StorageType.F32, kind, precision)
        return _pad(negative, body, numeric, match)
    if isinstance(value, Fraction) and kind is None and precision is None:
        return _pad(value < 0, str(abs(value)), True, match)
    return format(value, spec)


@dataclass(frozen=True, eq=False)
class Arguments:
    """A unit and display style, to be bound to a quantity for formatting."""

    unit: Unit
    style: DisplayStyle = DisplayStyle.ABBREVIATION
    dimension: Dimension | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.unit, Unit):
            raise TypeError(f"expected a unit: {self.unit!r}")
        object.__setattr__(self, "style", DisplayStyle(self.style))

    def bind(self, quantity: Quantity) -> QuantityArguments:
        """Pair these arguments with a quantity."""
        if not isinstance(quantity, Quantity):
            raise TypeError(f"expected a quantity: {quantity!r}")
        if self.dimension is not None and (
            self.dimension.names != quantity.dimension.names
            or self.dimension.exponents != quantity.dimension.exponents
        ):
            raise TypeError("quantity has a different dimension than the arguments")
        return QuantityArguments(self, quantity)


@dataclass(frozen=True, eq=False)
class QuantityArguments:
    """A quantity with the unit and style it is displayed in."""

    arguments: Arguments
    quantity: Quantity

    def value(self):
        """The quantity's value expressed in the display unit."""
        return self.quantity.get(self.arguments.unit)

    def label(self) -> str:
        """The unit text: abbreviation, or singular/plural description."""
        unit = self.arguments.unit
        if self.arguments.style is DisplayStyle.ABBREVIATION:
            return unit.abbreviation
        return unit.singular if self.value() == 1 else unit.plural

    def __format__(self, spec: str) -> str:
        value = self.value()
        return f"{_render(value, self.quantity.storage, spec)} {self.label()}"

    def __str__(self) -> str:
        return format(self, "")

    def __repr__(self) -> str:
        return f"{self.value()!r} {self.label()}"


def format_args(quantity: Quantity, unit: Unit, style: DisplayStyle | str) -> QuantityArguments:
    """Bind ``quantity`` for display in ``unit`` with ``style``."""
    return Arguments(unit, DisplayStyle(style), quantity.dimension).bind(quantity)