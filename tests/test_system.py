from fractions import Fraction

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from quantikit.storage import StorageType, approx_eq
from quantikit.system import (
    BaseQuantity,
    Dimension,
    System,
    Units,
    change_base,
    from_base,
    to_base,
)
from quantikit.unit import ConstantOp, define_units

LENGTH_UNITS = define_units(
    "length",
    ("kilometer", 1.0e3, "km", "kilometer", "kilometers"),
    ("meter", 1.0, "m", "meter", "meters"),
)
MASS_UNITS = define_units("mass", ("kilogram", 1.0, "kg", "kilogram", "kilograms"))
TEMP_UNITS = define_units(
    "thermodynamic temperature",
    ("kelvin", 1.0, "K", "kelvin", "kelvins"),
    ("degree_fahrenheit", (5.0 / 9.0, 459.67), "°F", "degree Fahrenheit",
     "degrees Fahrenheit"),
)

KILOMETER = LENGTH_UNITS["kilometer"]
METER = LENGTH_UNITS["meter"]
KILOGRAM = MASS_UNITS["kilogram"]
KELVIN = TEMP_UNITS["kelvin"]
FAHRENHEIT = TEMP_UNITS["degree_fahrenheit"]

SYSTEM = System([
    BaseQuantity("length", "meter", "L", LENGTH_UNITS),
    BaseQuantity("mass", "kilogram", "M", MASS_UNITS),
    BaseQuantity("thermodynamic_temperature", "kelvin", "Th", TEMP_UNITS),
])
MK = SYSTEM.base_units()
KF = SYSTEM.units(length="kilometer", thermodynamic_temperature="degree_fahrenheit")
LENGTH = SYSTEM.dimension(L=1)
TEMPERATURE = SYSTEM.dimension(Th=1)

F64 = StorageType.F64
FLOATS = st.floats(min_value=-1e300, max_value=1e300, allow_nan=False)


@given(FLOATS)
def test_from_base_f64(v):
    km = KILOMETER.coefficient_for(F64)
    f_coef = FAHRENHEIT.coefficient_for(F64)
    f_cons = FAHRENHEIT.constant_for(ConstantOp.ADD, F64)
    assert approx_eq(v, from_base(v, LENGTH, MK, METER, F64), F64)
    assert approx_eq(v, from_base(v, LENGTH, KF, KILOMETER, F64), F64)
    assert approx_eq(v / km, from_base(v, LENGTH, MK, KILOMETER, F64), F64)
    assert approx_eq(v * km, from_base(v, LENGTH, KF, METER, F64), F64)
    assert approx_eq(v, from_base(v, TEMPERATURE, MK, KELVIN, F64), F64)
    assert approx_eq((v * (1.0 / f_coef)) - f_cons,
                     from_base(v, TEMPERATURE, MK, FAHRENHEIT, F64), F64)


@given(FLOATS)
def test_to_base_f64(v):
    km = KILOMETER.coefficient_for(F64)
    f_coef = FAHRENHEIT.coefficient_for(F64)
    f_cons = FAHRENHEIT.constant_for(ConstantOp.ADD, F64)
    assert approx_eq(v, to_base(v, LENGTH, MK, METER, F64), F64)
    assert approx_eq(v, to_base(v, LENGTH, KF, KILOMETER, F64), F64)
    assert approx_eq(v * km, to_base(v, LENGTH, MK, KILOMETER, F64), F64)
    assert approx_eq(v / km, to_base(v, LENGTH, KF, METER, F64), F64)
    assert approx_eq(v, to_base(v, TEMPERATURE, MK, KELVIN, F64), F64)
    assert approx_eq((v + f_cons) * f_coef,
                     to_base(v, TEMPERATURE, MK, FAHRENHEIT, F64), F64)


@given(FLOATS)
def test_change_base_f64(v):
    km = KILOMETER.coefficient_for(F64)
    assume(approx_eq(v, v * km / km, F64))
    assert approx_eq(v, change_base(v, LENGTH, MK, MK, F64), F64)
    assert approx_eq(v, change_base(v, LENGTH, KF, KF, F64), F64)
    assert approx_eq(v * km, change_base(v, LENGTH, MK, KF, F64), F64)
    assert approx_eq(v / km, change_base(v, LENGTH, KF, MK, F64), F64)


@given(st.integers(min_value=-(2 ** 63), max_value=2 ** 63 - 1))
def test_from_base_i64_same_unit(v):
    assert from_base(v, LENGTH, MK, METER, "i64") == v


def test_integer_conversions_truncate():
    assert from_base(1500, LENGTH, MK, KILOMETER, "i32") == 1
    assert from_base(-1500, LENGTH, MK, KILOMETER, "i32") == -1
    assert to_base(2, LENGTH, MK, KILOMETER, "i64") == 2000
    assert to_base(1500, LENGTH, KF, METER, "i64") == 1
    assert change_base(3, LENGTH, MK, KF, "i32") == 3000
    assert change_base(1, LENGTH, KF, MK, "i32") == 0
    assert from_base(300, TEMPERATURE, MK, FAHRENHEIT, "i64") == 80


def test_integer_overflow_raises():
    with pytest.raises(OverflowError):
        to_base(3_000_000, LENGTH, MK, KILOMETER, "i32")


def test_rational_and_complex_conversions():
    assert from_base(Fraction(3, 2), LENGTH, MK, KILOMETER, "BigRational") == Fraction(3, 2000)
    result = from_base(complex(2, 4), LENGTH, MK, KILOMETER, "Complex64")
    assert approx_eq(complex(0.002, 0.004), result, "Complex64")


def test_units_factor():
    assert MK.factor(LENGTH, F64) == 1.0
    assert KF.factor(LENGTH, F64) == 1000.0
    assert KF.factor(SYSTEM.dimension(L=-1), F64) == 0.001
    assert KF.factor(TEMPERATURE, "i32") == Fraction(5, 9)
    assert KF.factor(SYSTEM.dimension(L=2), "BigInt") == Fraction(1_000_000)


def test_units_lookup():
    assert KF.unit("length") == KILOMETER
    assert KF.unit("Th") == FAHRENHEIT
    assert MK.unit("M") == KILOGRAM
    with pytest.raises(KeyError):
        MK.unit("time")


def test_units_rejects_foreign_unit():
    with pytest.raises(ValueError):
        SYSTEM.units(length="kilogram")
    with pytest.raises(ValueError):
        SYSTEM.units(mass=KILOMETER)
    with pytest.raises(ValueError):
        Units(SYSTEM, (KILOGRAM, KILOGRAM, KELVIN))


def test_dimension_from_names_and_symbols():
    assert SYSTEM.dimension(length=1) == LENGTH
    assert SYSTEM.dimension(L=1, M=-2).exponents == (1, -2, 0)
    assert SYSTEM.dimension(kind="angle").kind == "angle"
    assert SYSTEM.dimension_one().is_one()
    with pytest.raises(TypeError):
        SYSTEM.dimension(L=1, length=2)
    with pytest.raises(TypeError):
        SYSTEM.dimension(T=1)
    with pytest.raises(TypeError):
        SYSTEM.dimension(L=1.5)


def test_dimension_operations():
    assert LENGTH.exponent("length") == 1
    assert LENGTH.exponent("mass") == 0
    with pytest.raises(KeyError):
        LENGTH.exponent("time")
    assert LENGTH.recip().exponents == (-1, 0, 0)
    assert LENGTH.powi(3).exponents == (3, 0, 0)
    assert SYSTEM.dimension(L=3).root(3) == LENGTH
    assert SYSTEM.dimension(L=-4, M=2).root(2).exponents == (-2, 1, 0)
    with pytest.raises(ValueError):
        SYSTEM.dimension(L=3).root(2)
    assert (LENGTH * TEMPERATURE).exponents == (1, 0, 1)
    assert (LENGTH / LENGTH).is_one()
    assert not LENGTH.is_one()


def test_dimension_mismatch():
    other = System([BaseQuantity("length", "meter", "L", LENGTH_UNITS)])
    with pytest.raises(ValueError):
        MK.factor(other.dimension(L=1), F64)
    with pytest.raises(ValueError):
        LENGTH * other.dimension(L=1)
    with pytest.raises(ValueError):
        Dimension(("a", "b"), (1,))


def test_system_validation():
    with pytest.raises(ValueError):
        System([])
    with pytest.raises(ValueError):
        System([
            BaseQuantity("length", "meter", "L", LENGTH_UNITS),
            BaseQuantity("length", "kilogram", "M", MASS_UNITS),
        ])
    with pytest.raises(ValueError):
        BaseQuantity("length", "mile", "L", LENGTH_UNITS)
    assert SYSTEM.names == ("length", "mass", "thermodynamic_temperature")