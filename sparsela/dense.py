"""
Dense Vector & Matrix Companions

Conversion targets and operand types for the sparse matrices.
Storage is a numpy array with the dtype of the scalar field;
rationals are held in `object` arrays of `Fraction`.
"""

import numbers
from typing import Iterable, List, Type

import numpy as np

from .errors import DimensionMismatch, IndexOutOfRange
from .scalar import Field, Rational


class Vector(object):
    """ Dense vector of scalars from field `field`. """

    def __init__(self, values: Iterable = (), field: Type[Field] = Rational):
        self.field = field
        vals = [field.coerce(x) for x in values]
        self.v = np.empty(len(vals), dtype=field.dtype)
        for k, x in enumerate(vals):
            self.v[k] = x

    @classmethod
    def zeros(cls, n: int, field: Type[Field] = Rational) -> "Vector":
        return cls([field.zero()] * n, field=field)

    @classmethod
    def of(cls, u, field: Type[Field] = Rational) -> "Vector":
        """ Return `u` if already a Vector, else build one from its values. """
        if isinstance(u, Vector):
            return u
        return cls(u, field=field)

    @property
    def dim(self) -> int:
        return len(self.v)

    def __len__(self):
        return len(self.v)

    def __getitem__(self, k):
        if isinstance(k, slice):
            return Vector(self.v[k], field=self.field)
        return self.field.coerce(self.v[k])

    def __setitem__(self, k: int, x):
        self.v[k] = self.field.coerce(x)

    def __iter__(self):
        for x in self.v:
            yield self.field.coerce(x)

    def to_list(self) -> list:
        return list(self)

    def copy(self) -> "Vector":
        return Vector(self.v, field=self.field)

    def __eq__(self, other):
        if isinstance(other, Vector):
            other = other.to_list()
        elif not isinstance(other, (list, tuple)):
            return NotImplemented
        if len(other) != len(self): return False
        return all(x == y for x, y in zip(self, other))

    __hash__ = None

    def allclose(self, other) -> bool:
        """ Element-wise `field.isclose` comparison """
        if len(other) != len(self): return False
        return all(self.field.isclose(x, self.field.coerce(y)) for x, y in zip(self, other))

    def is_zero(self) -> bool:
        return all(self.field.is_zero(x) for x in self)

    def _check_dim(self, other: "Vector", op: str):
        DimensionMismatch.assert_eq(len(self), len(other),
                                    f"vector {op} vector: dimensions {len(self)} and {len(other)}")

    def __neg__(self):
        return Vector([-x for x in self], field=self.field)

    def __add__(self, other):
        if isinstance(other, Vector):
            self._check_dim(other, "+")
            return Vector([x + y for x, y in zip(self, other)], field=self.field)
        if isinstance(other, numbers.Number):
            y = self.field.coerce(other)
            return Vector([x + y for x in self], field=self.field)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, Vector):
            self._check_dim(other, "-")
            return Vector([x - y for x, y in zip(self, other)], field=self.field)
        if isinstance(other, numbers.Number):
            y = self.field.coerce(other)
            return Vector([x - y for x in self], field=self.field)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            y = self.field.coerce(other)
            return Vector([x * y for x in self], field=self.field)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            y = self.field.coerce(other)
            return Vector([x / y for x in self], field=self.field)
        return NotImplemented

    def dot(self, other: "Vector"):
        self._check_dim(other, "dot")
        s = self.field.zero()
        for x, y in zip(self, other):
            s += x * y
        return s

    def append(self, x) -> "Vector":
        """ New vector with scalar `x` appended """
        return Vector(self.to_list() + [x], field=self.field)

    def concat(self, other: "Vector") -> "Vector":
        return Vector(self.to_list() + list(other), field=self.field)

    def sum(self):
        s = self.field.zero()
        for x in self:
            s += x
        return s

    def norm1(self):
        s = self.field.zero()
        for x in self:
            s += self.field.abs(x)
        return s

    def __repr__(self):
        vals = ", ".join(self.field.format(x) for x in self)
        return f"{self.__class__.__name__}({vals})"


class DenseMatrix(object):
    """ Dense `d1` by `d2` matrix of scalars from field `field`. """

    def __init__(self, d1: int, d2: int = None, field: Type[Field] = Rational, values=None):
        if d2 is None: d2 = d1
        self.d1 = d1
        self.d2 = d2
        self.field = field
        self.a = np.empty((d1, d2), dtype=field.dtype)
        zero = field.zero()
        for i in range(d1):
            for j in range(d2):
                self.a[i, j] = zero
        if values is not None:
            DimensionMismatch.assert_eq(len(values), d1, "dense matrix: row count of values")
            for i, row in enumerate(values):
                DimensionMismatch.assert_eq(len(row), d2, f"dense matrix: length of row {i}")
                for j, x in enumerate(row):
                    self.a[i, j] = field.coerce(x)

    @classmethod
    def from_rows(cls, rows: List[Iterable], field: Type[Field] = Rational) -> "DenseMatrix":
        rows = [list(r) for r in rows]
        d2 = len(rows[0]) if rows else 0
        return cls(len(rows), d2, field=field, values=rows)

    @classmethod
    def eye(cls, n: int, field: Type[Field] = Rational) -> "DenseMatrix":
        m = cls(n, n, field=field)
        for k in range(n):
            m.a[k, k] = field.one()
        return m

    @property
    def shape(self):
        return (self.d1, self.d2)

    def _check_index(self, i: int, j: int):
        if not (0 <= i < self.d1 and 0 <= j < self.d2):
            raise IndexOutOfRange(f"index ({i}, {j}) outside {self.d1}x{self.d2} matrix")

    def get(self, i: int, j: int):
        self._check_index(i, j)
        return self.field.coerce(self.a[i, j])

    def set(self, i: int, j: int, x):
        self._check_index(i, j)
        self.a[i, j] = self.field.coerce(x)

    def __getitem__(self, idx):
        if isinstance(idx, tuple):
            return self.get(*idx)
        return self.row(idx)

    def __setitem__(self, idx, x):
        self.set(*idx, x)

    def row(self, i: int) -> Vector:
        return Vector(self.a[i, :], field=self.field)

    def col(self, j: int) -> Vector:
        return Vector(self.a[:, j], field=self.field)

    def to_list(self) -> List[list]:
        return [self.row(i).to_list() for i in range(self.d1)]

    def copy(self) -> "DenseMatrix":
        return DenseMatrix(self.d1, self.d2, field=self.field, values=self.a)

    def transpose(self) -> "DenseMatrix":
        return DenseMatrix(self.d2, self.d1, field=self.field, values=self.a.T)

    @property
    def T(self):
        return self.transpose()

    def to_sparse(self):
        from .sparse.matrix import SparseMatrix
        return SparseMatrix.from_dense(self)

    def to_dense(self) -> "DenseMatrix":
        return self

    def __eq__(self, other):
        if hasattr(other, "to_dense") and not isinstance(other, DenseMatrix):
            other = other.to_dense()
        if not isinstance(other, DenseMatrix): return NotImplemented
        if self.shape != other.shape: return False
        return all(self.get(i, j) == other.get(i, j)
                   for i in range(self.d1) for j in range(self.d2))

    __hash__ = None

    def allclose(self, other) -> bool:
        if self.shape != (other.d1, other.d2): return False
        return all(self.field.isclose(self.get(i, j), self.field.coerce(other.get(i, j)))
                   for i in range(self.d1) for j in range(self.d2))

    def _operand(self, other, op: str):
        """ Convert `other` to a numpy array broadcastable against `self.a`, or None. """
        if isinstance(other, Vector):
            DimensionMismatch.assert_eq(len(other), self.d2, f"matrix {op} vector: dimension mismatch")
            return other.v
        if isinstance(other, numbers.Number):
            return self.field.coerce(other)
        if hasattr(other, "to_dense"):
            other = other.to_dense()
            DimensionMismatch.assert_eq(self.shape, other.shape, f"matrix {op} matrix: dimension mismatch")
            return other.a
        return None

    def __add__(self, other):
        b = self._operand(other, "+")
        if b is None: return NotImplemented
        return DenseMatrix(self.d1, self.d2, field=self.field, values=self.a + b)

    __radd__ = __add__

    def __sub__(self, other):
        b = self._operand(other, "-")
        if b is None: return NotImplemented
        return DenseMatrix(self.d1, self.d2, field=self.field, values=self.a - b)

    def __rsub__(self, other):
        b = self._operand(other, "-")
        if b is None: return NotImplemented
        return DenseMatrix(self.d1, self.d2, field=self.field, values=b - self.a)

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            return DenseMatrix(self.d1, self.d2, field=self.field, values=self.a * self.field.coerce(other))
        if isinstance(other, Vector):
            DimensionMismatch.assert_eq(len(other), self.d2, "matrix * vector: dimension mismatch")
            return Vector(self.a.dot(other.v), field=self.field)
        if hasattr(other, "to_dense"):
            other = other.to_dense()
            DimensionMismatch.assert_eq(self.d2, other.d1, "matrix * matrix: incompatible cross dimensions")
            return DenseMatrix(self.d1, other.d2, field=self.field, values=self.a.dot(other.a))
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self * other
        return NotImplemented

    __matmul__ = __mul__

    def __repr__(self):
        rows = "\n  ".join(" ".join(self.field.format(x) for x in self.row(i)) for i in range(self.d1))
        return f"<{self.__class__.__name__}({self.d1}x{self.d2})\n  {rows}>"
