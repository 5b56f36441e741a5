"""Quantities: a value stored in base units together with its dimension."""

from __future__ import annotations

import cmath
import math
import numbers
from collections.abc import Iterable
from dataclasses import dataclass
from fractions import Fraction

from .storage import _INT_BOUNDS, StorageType, coerce
from .system import Dimension, Units, change_base, from_base, to_base
from .unit import Unit

_F32_MIN_POSITIVE = 2.0 ** -126
_F64_MIN_POSITIVE = 2.2250738585072014e-308


def _resolve(storage: StorageType | str) -> StorageType:
    if isinstance(storage, StorageType):
        return storage
    for member in StorageType:
        if isinstance(storage, str) and member.value.lower() == storage.lower():
            return member
    raise ValueError(f"unknown storage type: {storage!r}")


def _same_dimension(a: Dimension, b: Dimension) -> bool:
    return a.names == b.names and a.exponents == b.exponents


def _trunc_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _div(a, b, storage: StorageType):
    if storage.is_integer():
        return _trunc_div(int(a), int(b))
    if storage.is_float():
        try:
            return a / b
        except ZeroDivisionError:
            if math.isnan(a) or a == 0:
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _rem(a, b, storage: StorageType):
    if storage.is_float():
        if b == 0:
            return math.nan
        return math.fmod(a, b)
    if storage.is_complex():
        raise TypeError("remainder is not defined for complex storage")
    if storage.is_integer():
        return a - b * _trunc_div(a, b)
    if b == 0:
        raise ZeroDivisionError("division by zero")
    return a - b * math.trunc(a / b)


def _min_positive(storage: StorageType) -> float:
    single = storage in (StorageType.F32, StorageType.COMPLEX32)
    return _F32_MIN_POSITIVE if single else _F64_MIN_POSITIVE


def _float_normal(x: float, storage: StorageType) -> bool:
    return math.isfinite(x) and x != 0 and abs(x) >= _min_positive(storage)


def _cbrt(x: float) -> float:
    if math.isnan(x) or math.isinf(x) or x == 0:
        return x
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


@dataclass(frozen=True, eq=False, repr=False)
class Quantity:
    """A value held in a system's base units, with the quantity's dimension."""

    dimension: Dimension
    units: Units
    value: object
    storage: StorageType = StorageType.F64

    def __post_init__(self) -> None:
        storage = _resolve(self.storage)
        if self.dimension.names != self.units.system.names:
            raise ValueError("dimension does not belong to the units' system")
        object.__setattr__(self, "storage", storage)
        object.__setattr__(self, "value", coerce(self.value, storage))

    # construction and access

    @classmethod
    def new(cls, value, unit: Unit, dimension: Dimension, units: Units,
            storage: StorageType | str = StorageType.F64) -> Quantity:
        """A quantity from a value given in ``unit``."""
        storage = _resolve(storage)
        return cls(dimension, units, to_base(value, dimension, units, unit, storage), storage)

    def get(self, unit: Unit):
        """The value expressed in ``unit``."""
        return from_base(self.value, self.dimension, self.units, unit, self.storage)

    @staticmethod
    def zero(dimension: Dimension, units: Units,
             storage: StorageType | str = StorageType.F64) -> Quantity:
        """The zero quantity."""
        return Quantity(dimension, units, 0, storage)

    def is_zero(self) -> bool:
        """True when the value is zero."""
        return self.value == 0

    # helpers

    def _make(self, dimension: Dimension, value) -> Quantity:
        return Quantity(dimension, self.units, value, self.storage)

    def _converted(self, other: Quantity, dimension: Dimension | None = None):
        if not isinstance(other, Quantity):
            raise TypeError(f"expected a quantity: {other!r}")
        if other.storage is not self.storage:
            raise TypeError("quantities use different storage types")
        dim = other.dimension if dimension is None else dimension
        return change_base(other.value, dim, self.units, other.units, self.storage)

    def _same(self, other: Quantity):
        if not isinstance(other, Quantity):
            raise TypeError(f"expected a quantity: {other!r}")
        if not _same_dimension(self.dimension, other.dimension):
            raise TypeError("quantities have different dimensions")
        return self._converted(other)

    def _require(self, ok: bool, what: str) -> None:
        if not ok:
            raise TypeError(f"{what} is not available for {self.storage.value} storage")

    def _require_float(self, what: str) -> None:
        self._require(self.storage.is_float(), what)

    def _require_floating(self, what: str) -> None:
        self._require(self.storage.is_float() or self.storage.is_complex(), what)

    # arithmetic

    def __add__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        return self._make(self.dimension, self.value + self._same(other))

    def __sub__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        return self._make(self.dimension, self.value - self._same(other))

    def __mul__(self, other):
        if isinstance(other, Quantity):
            rhs = self._converted(other)
            return self._make(self.dimension * other.dimension, self.value * rhs)
        if isinstance(other, numbers.Number):
            return self._make(self.dimension, self.value * coerce(other, self.storage))
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self._make(self.dimension, coerce(other, self.storage) * self.value)
        return NotImplemented

    def __truediv__(self, other):
        if isinstance(other, Quantity):
            rhs = self._converted(other)
            return self._make(self.dimension / other.dimension,
                              _div(self.value, rhs, self.storage))
        if isinstance(other, numbers.Number):
            return self._make(self.dimension,
                              _div(self.value, coerce(other, self.storage), self.storage))
        return NotImplemented

    def __rtruediv__(self, other):
        if isinstance(other, numbers.Number):
            return self._make(self.dimension.recip(),
                              _div(coerce(other, self.storage), self.value, self.storage))
        return NotImplemented

    def __mod__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        return self._make(self.dimension, _rem(self.value, self._same(other), self.storage))

    def __neg__(self) -> Quantity:
        self._require(self.storage.is_signed() or self.storage.is_complex(), "negation")
        return self._make(self.dimension, -self.value)

    # comparison

    def __eq__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        if not _same_dimension(self.dimension, other.dimension):
            return False
        return self.value == self._converted(other)

    def __hash__(self) -> int:
        return hash(self.value)

    def _ordered(self, other):
        if not isinstance(other, Quantity):
            raise TypeError(f"expected a quantity: {other!r}")
        self._require(not self.storage.is_complex(), "ordering")
        return self._same(other)

    def __lt__(self, other):
        return self.value < self._ordered(other)

    def __le__(self, other):
        return self.value <= self._ordered(other)

    def __gt__(self, other):
        return self.value > self._ordered(other)

    def __ge__(self, other):
        return self.value >= self._ordered(other)

    def __repr__(self) -> str:
        parts = [repr(self.value)]
        for unit, exponent in zip(self.units.base, self.dimension.exponents):
            if exponent:
                parts.append(f"{unit.abbreviation}^{exponent}")
        return " ".join(parts)

    # numeric methods

    def classify(self) -> str:
        """Floating point category: nan, infinite, zero, subnormal or normal."""
        self._require_float("classify")
        x = self.value
        if math.isnan(x):
            return "nan"
        if math.isinf(x):
            return "infinite"
        if x == 0:
            return "zero"
        return "normal" if _float_normal(x, self.storage) else "subnormal"

    def hypot(self, other: Quantity) -> Quantity:
        """Length of the hypotenuse given the two legs."""
        self._require_float("hypot")
        return self._make(self.dimension, math.hypot(self.value, self._same(other)))

    def abs(self) -> Quantity:
        """The absolute value."""
        self._require(self.storage.is_signed(), "abs")
        return self._make(self.dimension, abs(self.value))

    def signum(self) -> Quantity:
        """The sign of the value as a quantity of magnitude one (or zero for exact types)."""
        self._require(self.storage.is_signed(), "signum")
        x = self.value
        if self.storage.is_float():
            result = x if math.isnan(x) else math.copysign(1.0, x)
        else:
            result = (x > 0) - (x < 0)
        return self._make(self.dimension, result)

    def is_sign_positive(self) -> bool:
        """True when the sign bit is clear, including +0.0 and +inf."""
        self._require_float("is_sign_positive")
        return math.copysign(1.0, self.value) > 0

    def is_sign_negative(self) -> bool:
        """True when the sign bit is set, including -0.0 and -inf."""
        self._require_float("is_sign_negative")
        return math.copysign(1.0, self.value) < 0

    def recip(self) -> Quantity:
        """The reciprocal, with the reciprocal dimension."""
        self._require_float("recip")
        return self._make(self.dimension.recip(), _div(1.0, self.value, self.storage))

    def max(self, other: Quantity) -> Quantity:
        """The larger of two quantities; a NaN operand is ignored."""
        self._require(not self.storage.is_complex(), "max")
        rhs = self._same(other)
        if self.storage.is_float():
            if math.isnan(self.value):
                return self._make(self.dimension, rhs)
            if math.isnan(rhs):
                return self
        return self if self.value >= rhs else self._make(self.dimension, rhs)

    def min(self, other: Quantity) -> Quantity:
        """The smaller of two quantities; a NaN operand is ignored."""
        self._require(not self.storage.is_complex(), "min")
        rhs = self._same(other)
        if self.storage.is_float():
            if math.isnan(self.value):
                return self._make(self.dimension, rhs)
            if math.isnan(rhs):
                return self
        return self if self.value <= rhs else self._make(self.dimension, rhs)

    def is_nan(self) -> bool:
        """True when the value is NaN."""
        self._require_floating("is_nan")
        if self.storage.is_complex():
            return math.isnan(self.value.real) or math.isnan(self.value.imag)
        return math.isnan(self.value)

    def is_infinite(self) -> bool:
        """True when the value is infinite and not NaN."""
        self._require_floating("is_infinite")
        if self.storage.is_complex():
            return not self.is_nan() and (
                math.isinf(self.value.real) or math.isinf(self.value.imag))
        return math.isinf(self.value)

    def is_finite(self) -> bool:
        """True when the value is neither infinite nor NaN."""
        self._require_floating("is_finite")
        if self.storage.is_complex():
            return math.isfinite(self.value.real) and math.isfinite(self.value.imag)
        return math.isfinite(self.value)

    def is_normal(self) -> bool:
        """True when the value is neither zero, subnormal, infinite nor NaN."""
        self._require_floating("is_normal")
        if self.storage.is_complex():
            return all(c == 0 or _float_normal(c, self.storage)
                       for c in (self.value.real, self.value.imag))
        return _float_normal(self.value, self.storage)

    def cbrt(self) -> Quantity:
        """The cube root; every exponent of the dimension must be divisible by three."""
        self._require_floating("cbrt")
        dimension = self.dimension.root(3)
        if self.storage.is_complex():
            z = self.value
            value = 0j if z == 0 else cmath.exp(cmath.log(z) / 3)
        else:
            value = _cbrt(self.value)
        return self._make(dimension, value)

    def mul_add(self, a: Quantity, b: Quantity) -> Quantity:
        """``self * a + b`` with ``b`` of the product's dimension."""
        self._require_floating("mul_add")
        if not isinstance(a, Quantity) or not isinstance(b, Quantity):
            raise TypeError("mul_add expects quantities")
        dimension = self.dimension * a.dimension
        if not _same_dimension(dimension, b.dimension):
            raise TypeError("addend has the wrong dimension")
        return self._make(dimension, self.value * a.value + b.value)

    def powi(self, exponent: int) -> Quantity:
        """The quantity raised to an integer power."""
        self._require_floating("powi")
        dimension = self.dimension.powi(exponent)
        try:
            value = self.value ** exponent
        except ZeroDivisionError:
            value = math.inf if self.storage.is_float() else complex(math.inf, 0)
        except OverflowError:
            sign = -1.0 if self.value < 0 and exponent % 2 else 1.0
            value = sign * math.inf
        return self._make(dimension, value)

    def sqrt(self) -> Quantity:
        """The square root; NaN for negative real values."""
        self._require_floating("sqrt")
        dimension = self.dimension.root(2)
        if self.storage.is_complex():
            value = cmath.sqrt(self.value)
        elif self.value < 0:
            value = math.nan
        else:
            value = math.sqrt(self.value)
        return self._make(dimension, value)

    def _saturate(self, value: int) -> Quantity:
        low, high = _INT_BOUNDS[self.storage]
        if low is not None:
            value = max(low, value)
        if high is not None:
            value = min(high, value)
        return self._make(self.dimension, value)

    def saturating_add(self, other: Quantity) -> Quantity:
        """Addition clamped to the storage type's range."""
        self._require(self.storage.is_integer(), "saturating_add")
        return self._saturate(self.value + self._same(other))

    def saturating_sub(self, other: Quantity) -> Quantity:
        """Subtraction clamped to the storage type's range."""
        self._require(self.storage.is_integer(), "saturating_sub")
        return self._saturate(self.value - self._same(other))


def total(quantities: Iterable[Quantity], dimension: Dimension, units: Units,
          storage: StorageType | str = StorageType.F64) -> Quantity:
    """Sum of quantities; the zero quantity when there are none."""
    storage = _resolve(storage)
    result = Quantity.zero(dimension, units, storage)
    for quantity in quantities:
        result = result + quantity
    return result


_ = Fraction