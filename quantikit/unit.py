"""Measurement units and their conversion to a quantity's base unit."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from enum import Enum

from .storage import StorageType, conversion_factor


class ConstantOp(Enum):
    """Direction of a conversion that applies a unit's constant term."""

    ADD = "add"
    SUB = "sub"


@dataclass(frozen=True)
class Unit:
    """A measurement unit with its descriptions and conversion to the base unit."""

    name: str
    abbreviation: str
    singular: str
    plural: str
    coefficient: float
    constant: float | None = None
    quantity: str = ""

    def coefficient_for(self, storage: StorageType | str):
        """The unit's coefficient as a factor for ``storage``."""
        return conversion_factor(self.coefficient, storage)

    def constant_for(self, op: ConstantOp | str, storage: StorageType | str):
        """The unit's constant term as a factor for ``storage``.

        Units without a constant yield -0.0 when adding and 0.0 when subtracting.
        """
        op = ConstantOp(op)
        if self.constant is not None:
            raw = self.constant
        elif op is ConstantOp.ADD:
            raw = -0.0
        else:
            raw = 0.0
        return conversion_factor(raw, storage)


def _split_conversion(conversion) -> tuple[float, float | None]:
    if isinstance(conversion, numbers.Real):
        return float(conversion), None
    try:
        parts = tuple(conversion)
    except TypeError as exc:
        raise ValueError(f"invalid conversion: {conversion!r}") from exc
    if not 1 <= len(parts) <= 2 or not all(isinstance(p, numbers.Real) for p in parts):
        raise ValueError(
            f"conversion must be a coefficient and an optional constant: {conversion!r}"
        )
    coefficient = float(parts[0])
    constant = float(parts[1]) if len(parts) == 2 else None
    return coefficient, constant


def define_units(quantity: str, *args) -> dict[str, Unit]:
    """Define units of ``quantity``.

    Each argument is ``(name, conversion, abbreviation, singular, plural)``
    where ``conversion`` is a coefficient or a ``(coefficient, constant)`` pair.
    Returns the units by name, in definition order.
    """
    if not args:
        raise ValueError("at least one unit must be defined")
    units: dict[str, Unit] = {}
    for spec in args:
        try:
            name, conversion, abbreviation, singular, plural = spec
        except (TypeError, ValueError) as exc:
            raise ValueError(
                "unit definition must be (name, conversion, abbreviation, singular, plural): "
                f"{spec!r}"
            ) from exc
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"invalid unit name: {name!r}")
        if name in units:
            raise ValueError(f"unit defined twice: {name}")
        for text in (abbreviation, singular, plural):
            if not isinstance(text, str):
                raise TypeError(f"unit descriptions must be strings: {text!r}")
        coefficient, constant = _split_conversion(conversion)
        units[name] = Unit(
            name=name,
            abbreviation=abbreviation,
            singular=singular,
            plural=plural,
            coefficient=coefficient,
            constant=constant,
            quantity=quantity,
        )
    return units