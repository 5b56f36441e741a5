"""Systems of quantities: dimensions, base units and conversion of stored values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from fractions import Fraction
from types import MappingProxyType

from .storage import StorageType, coerce, conversion_factor
from .unit import ConstantOp, Unit


def _storage(storage: StorageType | str) -> StorageType:
    if isinstance(storage, StorageType):
        return storage
    if isinstance(storage, str):
        for member in StorageType:
            if member.value.lower() == storage.lower():
                return member
    raise ValueError(f"unknown storage type: {storage!r}")


@dataclass(frozen=True)
class BaseQuantity:
    """A base quantity of a system: its name, base unit, dimension symbol and units."""

    name: str
    unit: str
    symbol: str
    units: Mapping[str, Unit] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        for text in (self.name, self.unit, self.symbol):
            if not isinstance(text, str) or not text.isidentifier():
                raise ValueError(f"invalid identifier: {text!r}")
        if not self.units:
            raise ValueError(f"base quantity {self.name} has no units")
        if self.unit not in self.units:
            raise ValueError(f"base unit {self.unit} is not a unit of {self.name}")
        object.__setattr__(self, "units", MappingProxyType(dict(self.units)))


@dataclass(frozen=True)
class Dimension:
    """Exponents of a quantity's base quantities, plus an optional kind."""

    names: tuple[str, ...]
    exponents: tuple[int, ...]
    kind: str | None = None

    def __post_init__(self) -> None:
        names = tuple(self.names)
        exponents = tuple(self.exponents)
        if len(names) != len(exponents):
            raise ValueError("every base quantity needs exactly one exponent")
        if len(set(names)) != len(names):
            raise ValueError("base quantity names must be unique")
        for exponent in exponents:
            if isinstance(exponent, bool) or not isinstance(exponent, int):
                raise TypeError(f"exponent must be an integer: {exponent!r}")
        object.__setattr__(self, "names", names)
        object.__setattr__(self, "exponents", exponents)

    def exponent(self, name: str) -> int:
        """The exponent of the named base quantity."""
        try:
            return self.exponents[self.names.index(name)]
        except ValueError:
            raise KeyError(name) from None

    def _with(self, exponents: Iterable[int]) -> Dimension:
        return Dimension(self.names, tuple(exponents))

    def recip(self) -> Dimension:
        """The dimension of the reciprocal."""
        return self._with(-e for e in self.exponents)

    def powi(self, exponent: int) -> Dimension:
        """The dimension raised to an integer power."""
        if isinstance(exponent, bool) or not isinstance(exponent, int):
            raise TypeError(f"power must be an integer: {exponent!r}")
        return self._with(e * exponent for e in self.exponents)

    def root(self, degree: int) -> Dimension:
        """The dimension of the ``degree``-th root; every exponent must divide evenly."""
        if isinstance(degree, bool) or not isinstance(degree, int) or degree <= 0:
            raise ValueError(f"root degree must be a positive integer: {degree!r}")
        if any(e % degree for e in self.exponents):
            raise ValueError(f"dimension exponents are not divisible by {degree}")
        return self._with(e // degree for e in self.exponents)

    def is_one(self) -> bool:
        """True for dimension one, where every exponent is zero."""
        return not any(self.exponents)

    def _combine(self, other: Dimension, sign: int) -> Dimension:
        if self.names != other.names:
            raise ValueError("dimensions belong to different systems")
        return self._with(a + sign * b for a, b in zip(self.exponents, other.exponents))

    def __mul__(self, other: object) -> Dimension:
        if not isinstance(other, Dimension):
            return NotImplemented
        return self._combine(other, 1)

    def __truediv__(self, other: object) -> Dimension:
        if not isinstance(other, Dimension):
            return NotImplemented
        return self._combine(other, -1)


class System:
    """A system of quantities together with the units of its base quantities."""

    def __init__(self, quantities: Iterable[BaseQuantity], *, name: str = "Q",
                 units_name: str = "U") -> None:
        self.quantities: tuple[BaseQuantity, ...] = tuple(quantities)
        if not self.quantities:
            raise ValueError("a system needs at least one base quantity")
        self.name = name
        self.units_name = units_name
        self._by_key: dict[str, BaseQuantity] = {}
        for quantity in self.quantities:
            for key in (quantity.name, quantity.symbol):
                known = self._by_key.get(key)
                if known is not None and known is not quantity:
                    raise ValueError(f"base quantity key used twice: {key}")
                self._by_key[key] = quantity

    @property
    def names(self) -> tuple[str, ...]:
        """Names of the base quantities, in system order."""
        return tuple(q.name for q in self.quantities)

    def _lookup(self, key: str) -> BaseQuantity:
        try:
            return self._by_key[key]
        except KeyError:
            raise KeyError(key) from None

    def _index(self, key: str) -> int:
        return self.quantities.index(self._lookup(key))

    def _keyword(self, key: str) -> int:
        try:
            return self._index(key)
        except KeyError:
            raise TypeError(f"unknown base quantity: {key}") from None

    def dimension(self, **kwargs) -> Dimension:
        """A dimension from exponents given by base quantity name or symbol.

        The keyword ``kind`` labels the kind of quantity.
        """
        kind = kwargs.pop("kind", None)
        exponents = [0] * len(self.quantities)
        seen: set[int] = set()
        for key, exponent in kwargs.items():
            index = self._keyword(key)
            if index in seen:
                raise TypeError(f"exponent given twice for {self.quantities[index].name}")
            if isinstance(exponent, bool) or not isinstance(exponent, int):
                raise TypeError(f"exponent must be an integer: {exponent!r}")
            seen.add(index)
            exponents[index] = exponent
        return Dimension(self.names, tuple(exponents), kind)

    def dimension_one(self) -> Dimension:
        """The dimension whose exponents are all zero."""
        return Dimension(self.names, (0,) * len(self.quantities))

    def base_units(self) -> Units:
        """The system's own base units."""
        return Units(self, tuple(q.units[q.unit] for q in self.quantities))

    def units(self, **kwargs) -> Units:
        """Base units with some replaced, keyed by base quantity name or symbol."""
        chosen = list(self.base_units().base)
        seen: set[int] = set()
        for key, value in kwargs.items():
            index = self._keyword(key)
            if index in seen:
                raise TypeError(f"unit given twice for {self.quantities[index].name}")
            seen.add(index)
            quantity = self.quantities[index]
            if isinstance(value, Unit):
                if quantity.units.get(value.name) != value:
                    raise ValueError(f"{value.name} is not a unit of {quantity.name}")
                chosen[index] = value
            elif isinstance(value, str):
                unit = quantity.units.get(value)
                if unit is None:
                    raise ValueError(f"{value} is not a unit of {quantity.name}")
                chosen[index] = unit
            else:
                raise TypeError(f"unit must be a Unit or a unit name: {value!r}")
        return Units(self, tuple(chosen))

    def __repr__(self) -> str:
        return f"System({self.name}: {', '.join(self.names)})"


@dataclass(frozen=True)
class Units:
    """A system of units: one base unit for each base quantity of a system."""

    system: System
    base: tuple[Unit, ...]

    def __post_init__(self) -> None:
        base = tuple(self.base)
        if len(base) != len(self.system.quantities):
            raise ValueError("every base quantity needs exactly one base unit")
        for quantity, unit in zip(self.system.quantities, base):
            if quantity.units.get(unit.name) != unit:
                raise ValueError(f"{unit.name} is not a unit of {quantity.name}")
        object.__setattr__(self, "base", base)

    def unit(self, name: str) -> Unit:
        """The base unit of the base quantity with this name or symbol."""
        return self.base[self.system._index(name)]

    def factor(self, dimension: Dimension, storage: StorageType | str):
        """Conversion factor of these base units for ``dimension``."""
        storage = _storage(storage)
        _check_dimension(self.system, dimension)
        result = conversion_factor(1, storage)
        for unit, exponent in zip(self.base, dimension.exponents):
            result = result * unit.coefficient_for(storage) ** exponent
        return result


def _check_dimension(system: System, dimension: Dimension) -> None:
    if dimension.names != system.names:
        raise ValueError("dimension does not belong to this system")


def _conversion(value, storage: StorageType):
    value = coerce(value, storage)
    if storage.is_integer():
        return Fraction(value)
    return value


def from_base(value, dimension: Dimension, units: Units, unit: Unit,
              storage: StorageType | str):
    """Convert a value held in ``units`` into ``unit``."""
    storage = _storage(storage)
    v = _conversion(value, storage)
    n_coef = unit.coefficient_for(storage)
    f = units.factor(dimension, storage)
    n_cons = unit.constant_for(ConstantOp.SUB, storage)
    if n_coef < f:
        result = v * (f / n_coef) - n_cons
    else:
        result = v / (n_coef / f) - n_cons
    return coerce(result, storage)


def to_base(value, dimension: Dimension, units: Units, unit: Unit,
            storage: StorageType | str):
    """Convert a value given in ``unit`` into ``units``."""
    storage = _storage(storage)
    v = _conversion(value, storage)
    n_coef = unit.coefficient_for(storage)
    f = units.factor(dimension, storage)
    n_cons = unit.constant_for(ConstantOp.ADD, storage)
    if n_coef >= f:
        result = (v + n_cons) * (n_coef / f)
    else:
        result = ((v + n_cons) * n_coef) / f
    return coerce(result, storage)


def change_base(value, dimension: Dimension, left: Units, right: Units,
                storage: StorageType | str):
    """Convert a value held in ``right`` base units into ``left`` base units."""
    storage = _storage(storage)
    if left.system is not right.system:
        raise ValueError("units belong to different systems")
    _check_dimension(left.system, dimension)
    x = _conversion(value, storage)
    for l_unit, r_unit, exponent in zip(left.base, right.base, dimension.exponents):
        x = x * r_unit.coefficient_for(storage) ** exponent
        x = x / l_unit.coefficient_for(storage) ** exponent
    return coerce(x, storage)