"""Numeric storage types that quantity values can be held in."""

from __future__ import annotations

import math
import numbers
import struct
import sys
from collections.abc import Iterable
from enum import Enum
from fractions import Fraction


class StorageType(Enum):
    """Underlying numeric representation of a quantity's value."""

    USIZE = "usize"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    ISIZE = "isize"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    BIGINT = "BigInt"
    BIGUINT = "BigUint"
    RATIONAL = "Rational"
    RATIONAL32 = "Rational32"
    RATIONAL64 = "Rational64"
    BIGRATIONAL = "BigRational"
    COMPLEX32 = "Complex32"
    COMPLEX64 = "Complex64"
    F32 = "f32"
    F64 = "f64"

    def is_float(self) -> bool:
        """True for the real floating point types."""
        return self in _CATEGORIES["Float"]

    def is_complex(self) -> bool:
        """True for the complex floating point types."""
        return self in _CATEGORIES["Complex"]

    def is_integer(self) -> bool:
        """True for fixed-width and arbitrary-precision integers."""
        return self in _CATEGORIES["PrimInt"] or self in (
            StorageType.BIGINT,
            StorageType.BIGUINT,
        )

    def is_ratio(self) -> bool:
        """True for the rational number types."""
        return self in _CATEGORIES["Ratio"]

    def is_signed(self) -> bool:
        """True for types that can hold negative values (complex excluded)."""
        return self in _CATEGORIES["Signed"]

    def is_unsigned(self) -> bool:
        """True for the unsigned integer types."""
        return self in _CATEGORIES["Unsigned"]


_S = StorageType

_PRIM_INT = (
    _S.USIZE, _S.U8, _S.U16, _S.U32, _S.U64, _S.U128,
    _S.ISIZE, _S.I8, _S.I16, _S.I32, _S.I64, _S.I128,
)

_CATEGORIES: dict[str, tuple[StorageType, ...]] = {
    "All": tuple(StorageType),
    "PrimInt": _PRIM_INT,
    "Ratio": (_S.RATIONAL, _S.RATIONAL32, _S.RATIONAL64, _S.BIGRATIONAL),
    "Float": (_S.F32, _S.F64),
    "Signed": (
        _S.ISIZE, _S.I8, _S.I16, _S.I32, _S.I64, _S.I128, _S.BIGINT,
        _S.RATIONAL, _S.RATIONAL32, _S.RATIONAL64, _S.BIGRATIONAL,
        _S.F32, _S.F64,
    ),
    "Unsigned": (_S.USIZE, _S.U8, _S.U16, _S.U32, _S.U64, _S.U128, _S.BIGUINT),
    "Complex": (_S.COMPLEX32, _S.COMPLEX64),
}

_BY_NAME = {member.value.lower(): member for member in StorageType}


def _signed(bits: int) -> tuple[int, int]:
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def _unsigned(bits: int) -> tuple[int, int]:
    return 0, (1 << bits) - 1


_INT_BOUNDS: dict[StorageType, tuple[int | None, int | None]] = {
    _S.USIZE: _unsigned(64),
    _S.U8: _unsigned(8),
    _S.U16: _unsigned(16),
    _S.U32: _unsigned(32),
    _S.U64: _unsigned(64),
    _S.U128: _unsigned(128),
    _S.ISIZE: _signed(64),
    _S.I8: _signed(8),
    _S.I16: _signed(16),
    _S.I32: _signed(32),
    _S.I64: _signed(64),
    _S.I128: _signed(128),
    _S.BIGINT: (None, None),
    _S.BIGUINT: (0, None),
}

_RATIO_BOUNDS: dict[StorageType, tuple[int | None, int | None]] = {
    _S.RATIONAL: _signed(64),
    _S.RATIONAL32: _signed(32),
    _S.RATIONAL64: _signed(64),
    _S.BIGRATIONAL: (None, None),
}

_MAX_ERROR = 10e-20
_MAX_ITERATIONS = 30
_EPS_FACTOR = 0.5
_ULPS = 3
_F32_EPSILON = 2.0 ** -23
_F64_EPSILON = sys.float_info.epsilon


def _resolve(storage: StorageType | str) -> StorageType:
    if isinstance(storage, StorageType):
        return storage
    if isinstance(storage, str):
        found = _BY_NAME.get(storage.lower())
        if found is not None:
            return found
    raise ValueError(f"unknown storage type: {storage!r}")


def expand_types(names: Iterable[str | StorageType] | str | StorageType) -> tuple[StorageType, ...]:
    """Expand storage type names and categories into storage types, in order.

    An empty selection means every storage type.
    """
    if isinstance(names, (str, StorageType)):
        names = [names]
    names = list(names)
    if not names:
        names = ["All"]
    result: list[StorageType] = []
    for name in names:
        if isinstance(name, str) and name in _CATEGORIES:
            expanded = _CATEGORIES[name]
        else:
            expanded = (_resolve(name),)
        for storage in expanded:
            if storage in result:
                raise ValueError(f"storage type selected twice: {storage.value}")
            result.append(storage)
    return tuple(result)


def _to_f32(x: float) -> float:
    if not math.isfinite(x):
        return x
    try:
        return struct.unpack("<f", struct.pack("<f", x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


def _check(n: int, bounds: tuple[int | None, int | None], storage: StorageType) -> None:
    low, high = bounds
    if (low is not None and n < low) or (high is not None and n > high):
        raise OverflowError(f"{n} is out of range for {storage.value}")


def _require_finite(value: float, storage: StorageType) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{value!r} cannot be represented as {storage.value}")


def _exact(value: numbers.Real) -> Fraction:
    try:
        return Fraction(value)
    except TypeError:
        return Fraction(float(value))


def _approximate_float(value: float, limit: int, unsigned: bool) -> Fraction | None:
    """Continued-fraction approximation bounded by ``limit``; None when impossible."""
    if math.isnan(value):
        return None
    negative = math.copysign(1.0, value) < 0
    if negative and unsigned and value != 0:
        return None
    val = abs(value)
    limit_f = float(limit)
    if val > limit_f:
        return None
    epsilon = 1.0 / limit_f
    q = val
    n0, d0, n1, d1 = 0, 1, 1, 0
    for _ in range(_MAX_ITERATIONS):
        if not math.isfinite(q):
            break
        a = math.trunc(q)
        if a > limit:
            break
        f = q - float(a)
        if a != 0 and (
            n1 > limit // a
            or d1 > limit // a
            or a * n1 > limit - n0
            or a * d1 > limit - d0
        ):
            break
        n = a * n1 + n0
        d = a * d1 + d0
        n0, d0, n1, d1 = n1, d1, n, d
        g = math.gcd(n1, d1)
        if g:
            n1, d1 = n1 // g, d1 // g
        if abs(float(n) / float(d) - val) < _MAX_ERROR:
            break
        if f < epsilon:
            break
        q = 1.0 / f
    if d1 == 0:
        return None
    result = Fraction(n1, d1)
    return -result if negative else result


def _bounded_approximation(value: float, bounds: tuple[int | None, int | None],
                           storage: StorageType) -> Fraction:
    _require_finite(value, storage)
    low, high = bounds
    result = _approximate_float(value, high, low == 0)
    if result is None:
        raise OverflowError(f"{value!r} is out of range for {storage.value}")
    return result


def coerce(value: numbers.Number, storage: StorageType | str):
    """Convert a number into the representation used by ``storage``.

    Floats going into integer types are truncated toward zero; out-of-range
    values raise OverflowError and non-finite ones ValueError.
    """
    storage = _resolve(storage)
    if not isinstance(value, numbers.Number):
        raise TypeError(f"not a number: {value!r}")
    if storage.is_complex():
        z = complex(value)
        if storage is StorageType.COMPLEX32:
            z = complex(_to_f32(z.real), _to_f32(z.imag))
        return z
    if not isinstance(value, numbers.Real):
        raise TypeError(f"cannot store {value!r} as {storage.value}")
    if storage.is_float():
        x = float(value)
        return _to_f32(x) if storage is StorageType.F32 else x
    if storage.is_ratio():
        bounds = _RATIO_BOUNDS[storage]
        if isinstance(value, float):
            _require_finite(value, storage)
            if storage is StorageType.BIGRATIONAL:
                return Fraction(value)
            return _bounded_approximation(value, bounds, storage)
        frac = _exact(value)
        _check(frac.numerator, bounds, storage)
        _check(frac.denominator, bounds, storage)
        return frac
    if isinstance(value, float):
        _require_finite(value, storage)
    n = math.trunc(value)
    _check(n, _INT_BOUNDS[storage], storage)
    return n


def conversion_factor(value: numbers.Real, storage: StorageType | str):
    """Convert a unit's conversion number into the factor type used by ``storage``.

    Floats stay floats, complex types use their real component type, integer
    types use exact or bounded fractions.
    """
    storage = _resolve(storage)
    if not isinstance(value, numbers.Real):
        raise TypeError(f"conversion factor must be real: {value!r}")
    if storage.is_float() or storage.is_ratio():
        return coerce(value, storage)
    if storage.is_complex():
        x = float(value)
        return _to_f32(x) if storage is StorageType.COMPLEX32 else x
    if isinstance(value, float):
        _require_finite(value, storage)
    bounds = _INT_BOUNDS[storage]
    if storage in (StorageType.BIGINT, StorageType.BIGUINT):
        frac = _exact(value)
        _check(frac.numerator, bounds, storage)
        return frac
    return _bounded_approximation(float(value), bounds, storage)


def _bits(x: float, single: bool) -> int:
    if single:
        return struct.unpack("<i", struct.pack("<f", _to_f32(x)))[0]
    return struct.unpack("<q", struct.pack("<d", x))[0]


def _ulps_eq(lhs: float, rhs: float, single: bool) -> bool:
    epsilon = _EPS_FACTOR * (_F32_EPSILON if single else _F64_EPSILON)
    diff = lhs - rhs if lhs > rhs else rhs - lhs
    if diff <= epsilon:
        return True
    if math.isnan(lhs) or math.isnan(rhs):
        return False
    if math.copysign(1.0, lhs) != math.copysign(1.0, rhs):
        return False
    return abs(_bits(lhs, single) - _bits(rhs, single)) <= _ULPS


def _complex_nan(z: complex) -> bool:
    return math.isnan(z.real) or math.isnan(z.imag)


def approx_eq(lhs, rhs, storage: StorageType | str) -> bool:
    """Compare two values approximately for floating types, exactly otherwise.

    Two NaNs compare equal.
    """
    storage = _resolve(storage)
    if storage.is_float():
        single = storage is StorageType.F32
        a, b = float(lhs), float(rhs)
        if single:
            a, b = _to_f32(a), _to_f32(b)
        if math.isnan(a) and math.isnan(b):
            return True
        return _ulps_eq(a, b, single)
    if storage.is_complex():
        single = storage is StorageType.COMPLEX32
        a, b = complex(lhs), complex(rhs)
        if single:
            a = complex(_to_f32(a.real), _to_f32(a.imag))
            b = complex(_to_f32(b.real), _to_f32(b.imag))
        if _complex_nan(a) and _complex_nan(b):
            return True
        return _ulps_eq(a.real, b.real, single) and _ulps_eq(a.imag, b.imag, single)
    return lhs == rhs