# quantikit

Quantities with dimensions and units. You define a system of base
quantities and their units, then compute with values that carry their
dimension. Adding or comparing quantities of different dimensions raises
`TypeError` instead of giving a wrong number. The package has no
dependencies outside the standard library.

## Installing

    pip install quantikit

To run the tests:

    pip install "quantikit[test]"
    pytest

## Example

```python
from quantikit.unit import define_units
from quantikit.system import BaseQuantity, System
from quantikit.quantity import Quantity
from quantikit.fmt import DisplayStyle, format_args

length_units = define_units(
    "length",
    ("kilometer", 1000.0, "km", "kilometer", "kilometers"),
    ("meter", 1.0, "m", "meter", "meters"),
)
mass_units = define_units("mass", ("kilogram", 1.0, "kg", "kilogram", "kilograms"))

system = System([
    BaseQuantity("length", "meter", "L", length_units),
    BaseQuantity("mass", "kilogram", "M", mass_units),
])
units = system.base_units()
length = system.dimension(length=1)

d = Quantity.new(1.5, length_units["kilometer"], length, units)
d.get(length_units["meter"])                        # 1500.0
str(format_args(d, length_units["kilometer"], DisplayStyle.DESCRIPTION))
                                                    # '1.5 kilometers'
```

## Modules

`quantikit.storage`
: `StorageType` lists the numeric representations a value can be held
  in: the fixed-width integers (`u8` … `u128`, `i8` … `i128`, `usize`,
  `isize`), `BigInt`, `BigUint`, the rationals (`Rational`,
  `Rational32`, `Rational64`, `BigRational`), `Complex32`, `Complex64`,
  `f32` and `f64`. Its `is_float`, `is_complex`, `is_integer`,
  `is_ratio`, `is_signed` and `is_unsigned` methods tell the families
  apart. `expand_types` turns names and the categories `All`, `PrimInt`,
  `Ratio`, `Float`, `Signed`, `Unsigned` and `Complex` into storage
  types. `coerce` converts a number into a storage type (floats into
  integers are truncated toward zero; out-of-range values raise
  `OverflowError`, non-finite ones `ValueError`). `conversion_factor`
  turns a unit's conversion number into the factor type used for a
  storage type. `approx_eq` compares floating values within a few ULPs,
  others exactly; two NaNs compare equal.

`quantikit.unit`
: `Unit` is a frozen dataclass with `name`, `abbreviation`, `singular`,
  `plural`, `coefficient` and an optional `constant` (for units such as
  degrees Fahrenheit). `coefficient_for` and `constant_for` give these
  for a storage type; `ConstantOp` selects the direction of the
  constant. `define_units(quantity, *specs)` builds a dict of units from
  `(name, conversion, abbreviation, singular, plural)` tuples, where
  `conversion` is a coefficient or a `(coefficient, constant)` pair.

`quantikit.system`
: `BaseQuantity` names a base quantity, its base unit, its dimension
  symbol and its units. `System` groups base quantities; `dimension(**exponents)`
  builds a `Dimension` by name or symbol, `dimension_one()` the
  dimensionless one, `base_units()` the system's own `Units` and
  `units(**choices)` a set of base units with some replaced.
  `Dimension` supports `*` and `/` and has `exponent`, `recip`, `powi`,
  `root` and `is_one`. `Units.factor` gives the conversion factor of a
  set of base units for a dimension. `from_base` and `to_base` convert a
  raw value between a unit and a set of base units; `change_base`
  converts a value held in one set of base units into another.

`quantikit.quantity`
: `Quantity(dimension, units, value, storage)` holds a value in base
  units. `Quantity.new` builds one from a value in a given unit and
  `get` reads it back in any unit. Quantities support `+`, `-`, `*`,
  `/`, `%`, unary `-` and comparisons; operands held in different base
  units are converted first. Multiplying or dividing by a plain number
  keeps the dimension. Methods: `zero`, `is_zero`, `abs`, `signum`,
  `max`, `min`, `recip`, `hypot`, `sqrt`, `cbrt`, `powi`, `mul_add`,
  `classify`, `is_nan`, `is_infinite`, `is_finite`, `is_normal`,
  `is_sign_positive`, `is_sign_negative`, `saturating_add` and
  `saturating_sub`. Methods that do not apply to a storage type raise
  `TypeError`. `total` adds up an iterable of quantities.

`quantikit.fmt`
: `format_args(quantity, unit, style)` returns a `QuantityArguments`
  that shows the value in `unit`, followed by the abbreviation
  (`DisplayStyle.ABBREVIATION`, as in `100 cm`) or by the singular or
  plural name (`DisplayStyle.DESCRIPTION`, as in `100 centimeters`).
  It accepts format specifications such as `"+"`, `"05"`, `".2"`,
  `"e"` and `"E"`. `Arguments` holds a unit and a style on its own and
  is applied to a quantity with `bind`.

## What it does not do

- It ships no predefined system such as SI; every system, quantity and
  unit is defined by the caller.
- It does not parse quantities from text such as `"1 km"`.
- It has no command-line interface.