"""
Symmetric Tridiagonal Matrices

Stored as two vectors: the main diagonal `dg` (length n)
and the shared sub/super-diagonal `sd` (length n-1).
"""

import logging
import numbers
from typing import Optional, Type

from .dense import DenseMatrix, Vector
from .errors import DimensionMismatch, IndexOutOfRange, SingularPivot, UnsupportedOperation
from .scalar import Field, Rational

logger = logging.getLogger(__name__)


class SymTriMatrix(object):
    def __init__(self, n: int, field: Type[Field] = Rational):
        DimensionMismatch.assert_true(n >= 1, f"Invalid size {n}")
        self.d1 = self.d2 = n
        self.field = field
        self.dg = Vector.zeros(n, field)
        self.sd = Vector.zeros(n - 1, field)

    @classmethod
    def from_diagonals(cls, dg, sd, field: Type[Field] = Rational) -> "SymTriMatrix":
        DimensionMismatch.assert_eq(len(sd), len(dg) - 1,
                                    f"Off-diagonal of length {len(sd)} for diagonal of length {len(dg)}")
        m = cls(len(dg), field=field)
        m.dg = Vector(dg, field=field)
        m.sd = Vector(sd, field=field)
        return m

    @classmethod
    def from_matrix(cls, a) -> "SymTriMatrix":
        """ Extract the tridiagonal band of square matrix `a`.
        Entries outside the band are ignored. The sub-diagonal is used for `sd`. """
        DimensionMismatch.assert_eq(a.d1, a.d2, "from_matrix requires a square matrix")
        m = cls(a.d1, field=a.field)
        for i in range(a.d1):
            m.dg[i] = a.get(i, i)
            if i > 0: m.sd[i - 1] = a.get(i, i - 1)
        return m

    def copy(self) -> "SymTriMatrix":
        return SymTriMatrix.from_diagonals(self.dg, self.sd, field=self.field)

    @property
    def shape(self):
        return (self.d1, self.d2)

    @property
    def is_square(self) -> bool:
        return True

    def _check_index(self, i: int, j: int):
        if not (0 <= i < self.d1 and 0 <= j < self.d1):
            raise IndexOutOfRange(f"Element ({i}, {j}) outside {self.d1}x{self.d1} matrix")

    def get(self, i: int, j: int):
        """ Entry (i,j). Raises `UnsupportedOperation` off the tridiagonal. """
        self._check_index(i, j)
        if i == j: return self.dg[i]
        if i == j + 1: return self.sd[j]
        if i + 1 == j: return self.sd[i]
        raise UnsupportedOperation(f"Element ({i}, {j}) not on tridiagonal")

    def at(self, i: int, j: int):
        """ Entry (i,j), zero when off the tridiagonal or out of range """
        if i < 0 or j < 0 or i >= self.d1 or j >= self.d1: return self.field.zero()
        if abs(i - j) > 1: return self.field.zero()
        return self.get(i, j)

    def set(self, i: int, j: int, x):
        self._check_index(i, j)
        if i == j:
            self.dg[i] = x
        elif i == j + 1:
            self.sd[j] = x
        elif i + 1 == j:
            self.sd[i] = x
        else:
            raise UnsupportedOperation(f"Element ({i}, {j}) not on tridiagonal")

    def __getitem__(self, idx):
        if isinstance(idx, tuple):
            r, c = idx
            if isinstance(r, slice) and isinstance(c, slice):
                if r != c:
                    raise UnsupportedOperation("Tridiagonal slices require equal row and column ranges")
                start, end, _ = r.indices(self.d1)
                return self.slice(start, end)
            return self.get(r, c)
        return self.row(idx)

    def __setitem__(self, idx, x):
        if isinstance(idx, tuple):
            return self.set(*idx, x)
        return self.set_row(idx, x)

    def row(self, i: int) -> Vector:
        self._check_index(i, i)
        u = Vector.zeros(self.d1, self.field)
        u[i] = self.dg[i]
        if i > 0: u[i - 1] = self.sd[i - 1]
        if i < self.d1 - 1: u[i + 1] = self.sd[i]
        return u

    def set_row(self, i: int, u):
        """ Set the band entries of row `i` from `u`; others are ignored """
        self._check_index(i, i)
        DimensionMismatch.assert_eq(len(u), self.d1, f"Row of length {len(u)} for {self.d1} columns")
        self.dg[i] = u[i]
        if i > 0: self.sd[i - 1] = u[i - 1]
        if i < self.d1 - 1: self.sd[i] = u[i + 1]

    def col(self, j: int, start: int = 0) -> Vector:
        self._check_index(j, j)
        DimensionMismatch.assert_true(0 <= start <= self.d1, f"Start row {start} outside {self.d1} rows")
        u = Vector.zeros(self.d1 - start, self.field)
        for i in range(max(start, j - 1), min(self.d1, j + 2)):
            u[i - start] = self.get(i, j)
        return u

    def set_col(self, j: int, u):
        self._check_index(j, j)
        DimensionMismatch.assert_eq(len(u), self.d1, f"Column of length {len(u)} for {self.d1} rows")
        self.dg[j] = u[j]
        if j > 0: self.sd[j - 1] = u[j - 1]
        if j < self.d1 - 1: self.sd[j] = u[j + 1]

    def slice(self, start: int, end: int) -> "SymTriMatrix":
        """ Contiguous principal sub-matrix, rows & columns `start` through `end` (exclusive) """
        DimensionMismatch.assert_true(0 <= start < end <= self.d1, f"Invalid slice [{start}, {end})")
        return SymTriMatrix.from_diagonals(self.dg[start:end], self.sd[start:end - 1], field=self.field)

    @property
    def T(self) -> "SymTriMatrix":
        return self

    def transpose(self) -> "SymTriMatrix":
        return self

    def to_dense(self) -> DenseMatrix:
        b = DenseMatrix(self.d1, field=self.field)
        for i in range(self.d1):
            b.a[i, i] = self.dg[i]
            if i > 0:
                b.a[i, i - 1] = b.a[i - 1, i] = self.sd[i - 1]
        return b

    def to_sparse(self):
        from .sparse.matrix import SparseMatrix
        m = SparseMatrix(self.d1, field=self.field)
        for i in range(self.d1):
            if i > 0: m.set(i, i - 1, self.sd[i - 1])
            m.set(i, i, self.dg[i])
            if i < self.d1 - 1: m.set(i, i + 1, self.sd[i])
        return m

    # Algebra

    def _check_size(self, b: "SymTriMatrix", op: str):
        DimensionMismatch.assert_eq(self.d1, b.d1, f"{op}: sizes {self.d1} and {b.d1}")

    def __add__(self, b):
        return self.copy().__iadd__(b)

    __radd__ = __add__

    def __sub__(self, b):
        return self.copy().__isub__(b)

    def __iadd__(self, b):
        if isinstance(b, SymTriMatrix):
            self._check_size(b, "+")
            self.dg = self.dg + b.dg
            self.sd = self.sd + b.sd
            return self
        if isinstance(b, numbers.Number):
            self.dg = self.dg + b
            self.sd = self.sd + b
            return self
        return NotImplemented

    def __isub__(self, b):
        if isinstance(b, SymTriMatrix):
            self._check_size(b, "-")
            self.dg = self.dg - b.dg
            self.sd = self.sd - b.sd
            return self
        if isinstance(b, numbers.Number):
            self.dg = self.dg - b
            self.sd = self.sd - b
            return self
        return NotImplemented

    def __neg__(self):
        return self * -1

    def __mul__(self, b):
        if isinstance(b, numbers.Number):
            return self.copy().__imul__(b)
        if isinstance(b, (Vector, list, tuple)):
            return self._mul_vector(b)
        if isinstance(b, SymTriMatrix):
            return self._mul_symtri(b)
        raise UnsupportedOperation("Tridiagonal matrices do not multiply general matrices")

    def __rmul__(self, b):
        if isinstance(b, numbers.Number):
            return self * b
        return NotImplemented

    def __imul__(self, x):
        if not isinstance(x, numbers.Number):
            raise UnsupportedOperation("In-place multiply of a tridiagonal matrix requires a scalar")
        self.dg = self.dg * x
        self.sd = self.sd * x
        return self

    def __truediv__(self, x):
        return self.copy().__itruediv__(x)

    def __itruediv__(self, x):
        if not isinstance(x, numbers.Number):
            return NotImplemented
        self.dg = self.dg / x
        self.sd = self.sd / x
        return self

    def _mul_vector(self, u) -> Vector:
        u = Vector.of(u, self.field)
        DimensionMismatch.assert_eq(len(u), self.d1, f"Vector of length {len(u)} for size {self.d1}")
        n = self.d1
        c = Vector.zeros(n, self.field)
        for i in range(n):
            s = self.dg[i] * u[i]
            if i > 0: s += self.sd[i - 1] * u[i - 1]
            if i < n - 1: s += self.sd[i] * u[i + 1]
            c[i] = s
        return c

    def _mul_symtri(self, b: "SymTriMatrix") -> DenseMatrix:
        """ Product of two tridiagonals: a pentadiagonal, returned dense """
        self._check_size(b, "*")
        n = self.d1
        c = DenseMatrix(n, field=self.field)
        for i in range(n):
            for j in range(max(i - 2, 0), min(i + 3, n)):
                s = self.field.zero()
                for k in range(max(min(i, j) - 1, 0), min(max(i, j) + 2, n)):
                    s += self.at(i, k) * b.at(k, j)
                c.a[i, j] = s
        return c

    # Diagonals & reductions

    def get_diag(self, k: int = 0) -> Vector:
        if k == 0: return self.dg.copy()
        if abs(k) == 1: return self.sd.copy()
        raise UnsupportedOperation(f"Nothing stored for diagonal {k}")

    def set_diag(self, u, k: int = 0):
        if k == 0:
            DimensionMismatch.assert_eq(len(u), self.d1, "Main diagonal length mismatch")
            self.dg = Vector(u, field=self.field)
        elif abs(k) == 1:
            DimensionMismatch.assert_eq(len(u), self.d1 - 1, "Off-diagonal length mismatch")
            self.sd = Vector(u, field=self.field)
        else:
            raise UnsupportedOperation(f"Nothing stored for diagonal {k}")

    def set_diag_value(self, x):
        self.dg = Vector([x] * self.d1, field=self.field)

    def mag(self):
        m = self.field.abs(self.field.zero())
        for x in list(self.dg) + list(self.sd):
            a = self.field.abs(x)
            if a > m: m = a
        return m

    def clean(self, thres: float, relative: bool = True) -> "SymTriMatrix":
        s = self.mag() if relative else 1
        zero = self.field.zero()
        for u in (self.dg, self.sd):
            for k in range(len(u)):
                if self.field.abs(u[k]) <= thres * s:
                    u[k] = zero
        return self

    def trace(self):
        return self.dg.sum()

    def sum(self):
        return self.dg.sum() + self.sd.sum() + self.sd.sum()

    def sum_lower(self):
        return self.sd.sum()

    def sum_abs(self):
        return self.dg.norm1() + self.sd.norm1() + self.sd.norm1()

    def norm1(self):
        return max(self.col(j).norm1() for j in range(self.d1))

    def _band_values(self, e: Optional[int]):
        if e is None: e = self.d1
        return list(self.dg[:e]) + list(self.sd[:e])

    def max(self, e: Optional[int] = None):
        return max(self._band_values(e), key=self.field.order_key)

    def min(self, e: Optional[int] = None):
        return min(self._band_values(e), key=self.field.order_key)

    def is_nonnegative(self) -> bool:
        zero = self.field.order_key(self.field.zero())
        return all(self.field.order_key(x) >= zero for x in self._band_values(None))

    def is_symmetric(self) -> bool:
        return True

    def is_rectangular(self) -> bool:
        return True

    def __eq__(self, other):
        if not isinstance(other, SymTriMatrix): return NotImplemented
        return self.dg == other.dg and self.sd == other.sd

    __hash__ = None

    def __repr__(self):
        return f"<{self.__class__.__name__}(dg={self.dg}, sd={self.sd})>"

    # Solving

    def solve(self, d) -> Vector:
        """ Solve `self * x = d` by the Thomas algorithm, in O(n).
        `d` is not modified. A zero elimination denominator raises `SingularPivot`. """
        d = Vector.of(d, self.field)
        n = self.d1
        DimensionMismatch.assert_eq(len(d), n, f"RHS of length {len(d)} for size {n}")
        logger.debug(f"Tridiagonal solve, n={n}")
        cp = Vector.zeros(n, self.field)
        dp = Vector.zeros(n, self.field)
        denom = self.dg[0]
        for i in range(n):
            if i > 0:
                denom = self.dg[i] - self.sd[i - 1] * cp[i - 1]
            if self.field.is_zero(denom):
                raise SingularPivot(f"Zero elimination denominator at row {i}")
            if i < n - 1:
                cp[i] = self.sd[i] / denom
            rhs = d[i] if i == 0 else d[i] - self.sd[i - 1] * dp[i - 1]
            dp[i] = rhs / denom

        x = Vector.zeros(n, self.field)
        x[n - 1] = dp[n - 1]
        for i in reversed(range(n - 1)):
            x[i] = dp[i] - cp[i] * x[i + 1]
        return x

    def det(self):
        """ Determinant by the three-term recurrence
        det(k) = dg(k) det(k-1) - sd(k-1)^2 det(k-2). """
        prev, cur = self.field.one(), self.dg[0]
        for k in range(1, self.d1):
            prev, cur = cur, self.dg[k] * cur - self.sd[k - 1] * self.sd[k - 1] * prev
        return cur

    # Operations not meaningful for a tridiagonal structure

    def _unsupported(self, op: str):
        raise UnsupportedOperation(f"{self.__class__.__name__} does not support {op}")

    def slice_block(self, r_from: int, r_end: int, c_from: int, c_end: int):
        if (r_from, r_end) != (c_from, c_end):
            self._unsupported("slice_block with differing row and column ranges")
        return self.slice(r_from, r_end)

    def slice_exclude(self, row: int, col: int):
        self._unsupported("slice_exclude")

    def select_rows(self, idx):
        self._unsupported("select_rows")

    def select_cols(self, idx):
        self._unsupported("select_cols")

    def concat_rows(self, b):
        self._unsupported("concatenation")

    def concat_cols(self, b):
        self._unsupported("concatenation")

    def set_values(self, u):
        self._unsupported("set_values")

    def set_all(self, x):
        self._unsupported("set_all")

    def lud_npp(self):
        self._unsupported("lud_npp")

    def lud_ip(self):
        self._unsupported("lud_ip")

    def solve_lu(self, l, u, b):
        self._unsupported("solve_lu")

    def inverse(self):
        self._unsupported("inverse")

    def inverse_ip(self):
        self._unsupported("inverse_ip")

    def reduce(self):
        self._unsupported("reduce")

    def reduce_ip(self):
        self._unsupported("reduce_ip")

    def nullspace(self):
        self._unsupported("nullspace")

    def nullspace_ip(self):
        self._unsupported("nullspace_ip")

    def block_diag(self, b):
        self._unsupported("block_diag")

    def embed_identity(self, p: int, q: int):
        self._unsupported("embed_identity")

    def power(self, p: int):
        self._unsupported("power")

    def __pow__(self, p: int):
        return self.power(p)
