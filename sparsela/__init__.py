"""
Sparse linear algebra over exact rational, complex, and real scalars.
"""

from .errors import (DimensionMismatch, IndexOutOfRange, MalformedInput, MatrixError,
                     SingularMatrix, SingularPivot, UnsupportedOperation)
from .scalar import Complex, Field, Rational, Real
from .dense import DenseMatrix, Vector
from .sparse import SparseMatrix
from .tridiag import SymTriMatrix

__version__ = "0.1.0"
