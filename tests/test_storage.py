import math
from fractions import Fraction

import pytest
from hypothesis import given
from hypothesis import strategies as st

from quantikit.storage import (
    StorageType,
    approx_eq,
    coerce,
    conversion_factor,
    expand_types,
)

ST = StorageType


@pytest.mark.parametrize(
    "storage, expected",
    [
        (ST.U8, (False, False, True, False, False, True)),
        (ST.I16, (False, False, True, False, True, False)),
        (ST.BIGINT, (False, False, True, False, True, False)),
        (ST.BIGUINT, (False, False, True, False, False, True)),
        (ST.RATIONAL32, (False, False, False, True, True, False)),
        (ST.F32, (True, False, False, False, True, False)),
        (ST.COMPLEX64, (False, True, False, False, False, False)),
    ],
)
def test_predicates(storage, expected):
    got = (
        storage.is_float(),
        storage.is_complex(),
        storage.is_integer(),
        storage.is_ratio(),
        storage.is_signed(),
        storage.is_unsigned(),
    )
    assert got == expected


def test_expand_float():
    assert expand_types("Float") == (ST.F32, ST.F64)


def test_expand_all_order():
    types = expand_types("All")
    assert len(types) == 22
    assert types[:3] == (ST.USIZE, ST.U8, ST.U16)
    assert types[-1] == ST.F64


def test_expand_empty_means_all():
    assert expand_types([]) == expand_types("All")


def test_expand_mixed_and_lowercase():
    assert expand_types(["u8", "Complex", "bigint"]) == (
        ST.U8,
        ST.COMPLEX32,
        ST.COMPLEX64,
        ST.BIGINT,
    )


def test_expand_unsigned():
    assert expand_types(["Unsigned"]) == (
        ST.USIZE, ST.U8, ST.U16, ST.U32, ST.U64, ST.U128, ST.BIGUINT,
    )


def test_expand_unknown():
    with pytest.raises(ValueError):
        expand_types(["u7"])


def test_expand_duplicate():
    with pytest.raises(ValueError):
        expand_types(["Float", "f64"])


def test_coerce_f32_rounding():
    assert coerce(0.1, ST.F32) == 0.10000000149011612
    assert coerce(1e39, ST.F32) == math.inf
    assert coerce(0.1, ST.F64) == 0.1


def test_coerce_integers_truncate():
    assert coerce(1000.0, ST.I32) == 1000
    assert coerce(0.001, ST.I32) == 0
    assert coerce(3.9, ST.I8) == 3
    assert coerce(-3.9, ST.I8) == -3
    assert coerce(-0.5, ST.BIGUINT) == 0
    assert coerce(1e20, ST.BIGINT) == 100000000000000000000


@pytest.mark.parametrize(
    "value, storage",
    [(300, ST.U8), (-1, ST.BIGUINT), (1e20, ST.I64), (-129, ST.I8)],
)
def test_coerce_out_of_range(value, storage):
    with pytest.raises(OverflowError):
        coerce(value, storage)


def test_coerce_non_finite_integer():
    with pytest.raises(ValueError):
        coerce(math.nan, ST.I32)
    with pytest.raises(ValueError):
        coerce(math.inf, ST.RATIONAL)


def test_coerce_ratios():
    assert coerce(0.001, ST.RATIONAL32) == Fraction(1, 1000)
    assert coerce(0.1, ST.RATIONAL64) == Fraction(1, 10)
    assert coerce(0.5, ST.BIGRATIONAL) == Fraction(1, 2)
    assert coerce(0.1, ST.BIGRATIONAL) == Fraction(3602879701896397, 36028797018963968)
    assert coerce(Fraction(2, 3), ST.RATIONAL) == Fraction(2, 3)


def test_coerce_complex():
    assert coerce(2, ST.COMPLEX64) == 2 + 0j
    assert coerce(0.1 + 0.1j, ST.COMPLEX32) == complex(0.10000000149011612, 0.10000000149011612)


def test_coerce_type_errors():
    with pytest.raises(TypeError):
        coerce(1 + 2j, ST.F64)
    with pytest.raises(TypeError):
        coerce("1", ST.F64)


def test_unknown_storage_name():
    with pytest.raises(ValueError):
        coerce(1, "f16")


def test_conversion_factor_integers():
    assert conversion_factor(1000.0, ST.I32) == Fraction(1000)
    assert conversion_factor(5.0 / 9.0, ST.I32) == Fraction(5, 9)
    assert conversion_factor(459.67, ST.I64) == Fraction(45967, 100)
    assert conversion_factor(-0.5, ST.I8) == Fraction(-1, 2)
    assert conversion_factor(0.1, ST.BIGINT) == Fraction(3602879701896397, 36028797018963968)


def test_conversion_factor_floats_and_complex():
    assert conversion_factor(2.0, ST.F64) == 2.0
    assert conversion_factor(0.1, ST.COMPLEX32) == 0.10000000149011612
    assert conversion_factor(0.1, ST.COMPLEX64) == 0.1


@pytest.mark.parametrize(
    "value, storage",
    [(1000.0, ST.U8), (-1.0, ST.BIGUINT), (-0.5, ST.U32)],
)
def test_conversion_factor_out_of_range(value, storage):
    with pytest.raises(OverflowError):
        conversion_factor(value, storage)


def test_approx_eq_f64():
    assert approx_eq(math.nan, math.nan, ST.F64)
    assert approx_eq(1.0, math.nextafter(1.0, 2.0), ST.F64)
    assert not approx_eq(1.0, 1.0 + 4 * 2.0 ** -52, ST.F64)
    assert approx_eq(0.0, -0.0, ST.F64)
    assert not approx_eq(1.0, -1.0, ST.F64)
    assert approx_eq(math.inf, math.inf, ST.F64)
    assert not approx_eq(math.nan, 1.0, ST.F64)


def test_approx_eq_f32():
    assert approx_eq(1.0, 1.0 + 2.0 ** -23, ST.F32)
    assert not approx_eq(1.0, 1.0 + 2.0 ** -21, ST.F32)


def test_approx_eq_exact_types():
    assert approx_eq(3, 3, ST.I32)
    assert not approx_eq(1, 2, ST.I32)
    assert not approx_eq(Fraction(1, 3), Fraction(1, 2), ST.RATIONAL)


def test_approx_eq_complex():
    assert approx_eq(complex(math.nan, 0), complex(0, math.nan), ST.COMPLEX64)
    assert approx_eq(1 + 1j, complex(1, math.nextafter(1.0, 2.0)), ST.COMPLEX64)
    assert not approx_eq(1 + 1j, 1 + 2j, ST.COMPLEX64)


@given(st.floats(), st.sampled_from([ST.F32, ST.F64]))
def test_approx_eq_reflexive(x, storage):
    assert approx_eq(x, x, storage)


@given(st.floats(allow_nan=False), st.floats(allow_nan=False))
def test_approx_eq_symmetric(a, b):
    assert approx_eq(a, b, ST.F64) == approx_eq(b, a, ST.F64)


@given(st.floats(allow_nan=False))
def test_coerce_f32_idempotent(x):
    once = coerce(x, ST.F32)
    assert coerce(once, ST.F32) == once


@given(st.integers(min_value=-(2 ** 31), max_value=2 ** 31 - 1))
def test_coerce_integer_round_trip(n):
    assert coerce(n, ST.I32) == n
    assert coerce(n, ST.RATIONAL32) == Fraction(n)