"""
Scalar Fields

Each `Field` sub-class describes one scalar type a matrix can hold:
its identities, exact-zero test, magnitude, ordering, and text literals.
Fields are used as classes, never instantiated, e.g. `Rational.zero()`.
"""

import cmath
import math
from fractions import Fraction
from typing import Dict, Type

from .errors import MalformedInput

# Tolerances for approximate comparisons of floating fields
REL_TOL = 1e-9
ABS_TOL = 1e-12


class Field(object):
    """ Base-class for scalar fields. """

    name: str = ""
    dtype = object  # numpy dtype for dense storage
    exact: bool = False
    registry: Dict[str, Type["Field"]] = {}

    def __init_subclass__(cls, **kw):
        super().__init_subclass__(**kw)
        if cls.name:
            Field.registry[cls.name] = cls

    @classmethod
    def by_name(cls, name: str) -> Type["Field"]:
        """ Look up a field by its `name`, e.g. "rational". """
        try:
            return Field.registry[name]
        except KeyError:
            raise MalformedInput(f"Unknown field: {name}") from None

    @classmethod
    def coerce(cls, x):
        raise NotImplementedError

    @classmethod
    def zero(cls):
        return cls.coerce(0)

    @classmethod
    def one(cls):
        return cls.coerce(1)

    @classmethod
    def is_zero(cls, x) -> bool:
        """ Exact-zero test. Never tolerance-based. """
        return x == 0

    @classmethod
    def abs(cls, x):
        return abs(x)

    @classmethod
    def order_key(cls, x):
        return x

    @classmethod
    def isclose(cls, a, b) -> bool:
        return a == b

    @classmethod
    def parse(cls, text: str):
        """ Parse a scalar literal. Raises `MalformedInput` on failure. """
        try:
            return cls.coerce(text.strip())
        except (ValueError, ZeroDivisionError, TypeError) as e:
            raise MalformedInput(f"Invalid {cls.name} literal {text!r}: {e}") from e

    @classmethod
    def format(cls, x) -> str:
        return str(cls.coerce(x))


class Rational(Field):
    """ Exact rationals, as `fractions.Fraction` """

    name = "rational"
    dtype = object
    exact = True

    @classmethod
    def coerce(cls, x) -> Fraction:
        if isinstance(x, Fraction):
            return x
        return Fraction(x)


class Complex(Field):
    """ Complex numbers with floating-point parts """

    name = "complex"
    dtype = complex

    @classmethod
    def coerce(cls, x) -> complex:
        if isinstance(x, str):
            return complex(x.replace(" ", ""))
        return complex(x)

    @classmethod
    def order_key(cls, x):
        # Lexicographic, real part first
        return (x.real, x.imag)

    @classmethod
    def isclose(cls, a, b) -> bool:
        return cmath.isclose(a, b, rel_tol=REL_TOL, abs_tol=ABS_TOL)


class Real(Field):
    """ Floating-point reals.  `is_zero` is exact, hence inherently approximate. """

    name = "real"
    dtype = float

    @classmethod
    def coerce(cls, x) -> float:
        return float(x)

    @classmethod
    def isclose(cls, a, b) -> bool:
        return math.isclose(a, b, rel_tol=REL_TOL, abs_tol=ABS_TOL)
