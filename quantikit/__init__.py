"""Quantities with dimensions, units and selectable storage types.

Submodules: storage, unit, system, quantity and fmt.
"""

__version__ = "0.1.0"

__all__ = ["storage", "unit", "system", "quantity", "fmt"]