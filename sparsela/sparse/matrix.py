import logging
import numbers
from typing import Iterator, List, Optional, Sequence, Tuple, Type

from ..dense import DenseMatrix, Vector
from ..errors import (DimensionMismatch, IndexOutOfRange, MatrixError, SingularMatrix,
                      SingularPivot, UnsupportedOperation)
from ..scalar import Field, Rational
from .rowmap import RowMap

logger = logging.getLogger(__name__)


class SparseMatrix(object):
    """ Sparse `d1` by `d2` matrix, stored as one sorted `RowMap` per row.

    Only non-zero entries are stored: every write of an exact zero
    removes the entry instead. Scalars are of field `field`. """

    def __init__(self, d1: int, d2: Optional[int] = None, fill=None, field: Type[Field] = Rational):
        if d2 is None: d2 = d1
        DimensionMismatch.assert_true(d1 >= 0 and d2 >= 0, f"Invalid dimensions {d1}x{d2}")
        self.d1 = d1
        self.d2 = d2
        self.field = field
        self.rows: List[RowMap] = [RowMap() for _ in range(d1)]
        if fill is not None:
            for i in range(d1):
                for j in range(d2):
                    self.set(i, j, fill)

    def _new(self, d1: int, d2: Optional[int] = None) -> "SparseMatrix":
        return SparseMatrix(d1, d2, field=self.field)

    # Alternate constructors

    @classmethod
    def from_values(cls, shape: Tuple[int, int], *values, field: Type[Field] = Rational) -> "SparseMatrix":
        """ Create from `d1 * d2` values, given in row-major order """
        d1, d2 = shape
        DimensionMismatch.assert_eq(len(values), d1 * d2,
                                    f"{len(values)} values cannot fill a {d1}x{d2} matrix")
        m = cls(d1, d2, field=field)
        for k, x in enumerate(values):
            m.set(k // d2, k % d2, x)
        return m

    @classmethod
    def from_vectors(cls, vectors: Sequence, columnwise: bool = True,
                     field: Type[Field] = Rational) -> "SparseMatrix":
        """ Create from a sequence of equal-length vectors,
        each used as a column (default) or as a row. """
        vectors = [Vector.of(u, field) for u in vectors]
        n = len(vectors[0]) if vectors else 0
        for u in vectors:
            DimensionMismatch.assert_eq(len(u), n, "from_vectors: vectors differ in length")
        if columnwise:
            m = cls(n, len(vectors), field=field)
            for j, u in enumerate(vectors):
                m.set_col(j, u)
        else:
            m = cls(len(vectors), n, field=field)
            for i, u in enumerate(vectors):
                m.set_row(i, u)
        return m

    @classmethod
    def from_row_maps(cls, d1: int, d2: int, maps: Sequence[RowMap],
                      field: Type[Field] = Rational) -> "SparseMatrix":
        """ Create from a sequence of `d1` row-maps. The maps are copied, never shared. """
        DimensionMismatch.assert_eq(len(maps), d1, f"{len(maps)} row-maps given for {d1} rows")
        m = cls(d1, d2, field=field)
        for i, row in enumerate(maps):
            for j, x in row.items():
                m.set(i, j, x)
        return m

    @classmethod
    def from_dense(cls, b: DenseMatrix) -> "SparseMatrix":
        m = cls(b.d1, b.d2, field=b.field)
        for i in range(b.d1):
            for j in range(b.d2):
                m.set(i, j, b.a[i, j])
        return m

    @classmethod
    def zeros(cls, d1: int, d2: Optional[int] = None, field: Type[Field] = Rational) -> "SparseMatrix":
        return cls(d1, d2, field=field)

    @classmethod
    def eye(cls, m: int, n: int = 0, field: Type[Field] = Rational) -> "SparseMatrix":
        """ Identity-like `m` by `n` matrix. `n <= 0` makes it square. """
        if n <= 0: n = m
        c = cls(m, n, field=field)
        one = field.one()
        for k in range(min(m, n)):
            c.rows[k][k] = one
        return c

    @classmethod
    def read_csv(cls, path, field: Type[Field] = Rational) -> "SparseMatrix":
        from .file import CsvFile
        return CsvFile(path, field=field).read().to_mat()

    def write(self, path):
        from .file import CsvFile
        CsvFile.from_matrix(self, path).write()

    def copy(self) -> "SparseMatrix":
        """ Create an element-by-element copy """
        cp = self._new(self.d1, self.d2)
        cp.rows = [row.copy() for row in self.rows]
        return cp

    def to_dense(self) -> DenseMatrix:
        b = DenseMatrix(self.d1, self.d2, field=self.field)
        for i, row in enumerate(self.rows):
            for j, x in row.items():
                b.a[i, j] = x
        return b

    # Indexed access

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.d1, self.d2)

    @property
    def is_square(self) -> bool:
        return self.d1 == self.d2

    def _check_row(self, i: int):
        if not (0 <= i < self.d1):
            raise IndexOutOfRange(f"Row {i} outside {self.d1}x{self.d2} matrix")

    def _check_col(self, j: int):
        if not (0 <= j < self.d2):
            raise IndexOutOfRange(f"Column {j} outside {self.d1}x{self.d2} matrix")

    def _check_index(self, i: int, j: int):
        self._check_row(i)
        self._check_col(j)

    def get(self, i: int, j: int):
        """ Get the value at (i,j), zero if no entry is stored """
        self._check_index(i, j)
        return self.rows[i].get(j, self.field.zero())

    def set(self, i: int, j: int, x):
        """ Set the value at (i,j). Setting zero removes any stored entry. """
        self._check_index(i, j)
        x = self.field.coerce(x)
        if self.field.is_zero(x):
            self.rows[i].discard(j)
        else:
            self.rows[i][j] = x

    def __getitem__(self, idx):
        if isinstance(idx, tuple):
            r, c = idx
            if isinstance(r, slice) or isinstance(c, slice):
                return self._slice_ranges(r, c)
            return self.get(r, c)
        if isinstance(idx, slice):
            return self._slice_ranges(idx, slice(None))
        return self.get_row(idx)

    def __setitem__(self, idx, x):
        if isinstance(idx, tuple):
            return self.set(*idx, x)
        return self.set_row(idx, x)

    def _slice_ranges(self, r, c) -> "SparseMatrix":
        if not isinstance(r, slice):
            r = r + self.d1 if r < 0 else r
            self._check_row(r)
            r = slice(r, r + 1)
        if not isinstance(c, slice):
            c = c + self.d2 if c < 0 else c
            self._check_col(c)
            c = slice(c, c + 1)
        rs = range(*r.indices(self.d1))
        cs = range(*c.indices(self.d2))
        if rs.step == 1 and cs.step == 1:
            return self.slice_block(rs.start, max(rs.stop, rs.start), cs.start, max(cs.stop, cs.start))
        return self.select_rows(list(rs)).select_cols(list(cs))

    def row_map(self, i: int) -> RowMap:
        return self.rows[i]

    def get_row(self, i: int) -> Vector:
        self._check_row(i)
        u = Vector.zeros(self.d2, self.field)
        for j, x in self.rows[i].items():
            u[j] = x
        return u

    def set_row(self, i: int, u):
        DimensionMismatch.assert_eq(len(u), self.d2, f"Row of length {len(u)} for {self.d2} columns")
        for j, x in enumerate(u):
            self.set(i, j, x)

    def set_row_from(self, i: int, u, j: int = 0):
        """ Set row `i` from vector `u`, starting at column `j` """
        DimensionMismatch.assert_true(j + len(u) <= self.d2,
                                      f"Row of length {len(u)} from column {j} overruns {self.d2} columns")
        for k, x in enumerate(u):
            self.set(i, j + k, x)

    def col(self, j: int, start: int = 0) -> Vector:
        """ Column `j`, from row `start` down """
        self._check_col(j)
        DimensionMismatch.assert_true(0 <= start <= self.d1, f"Start row {start} outside {self.d1} rows")
        u = Vector.zeros(self.d1 - start, self.field)
        zero = self.field.zero()
        for i in range(start, self.d1):
            x = self.rows[i].get(j, zero)
            if not self.field.is_zero(x):
                u[i - start] = x
        return u

    def set_col(self, j: int, u):
        DimensionMismatch.assert_eq(len(u), self.d1, f"Column of length {len(u)} for {self.d1} rows")
        for i, x in enumerate(u):
            self.set(i, j, x)

    def set_all(self, x):
        raise UnsupportedOperation("set_all would fill a sparse matrix; use a dense matrix")

    def set_values(self, u):
        """ Assign every entry from a 2-D array or nested sequences """
        DimensionMismatch.assert_eq(len(u), self.d1, "set_values: row count mismatch")
        for i, row in enumerate(u):
            self.set_row(i, row)

    def count_stored_entries(self) -> int:
        return sum(len(row) for row in self.rows)

    @property
    def nnz(self) -> int:
        return self.count_stored_entries()

    def elements(self) -> Iterator[Tuple[int, int, object]]:
        """ Iterator of stored (row, col, value) triples, row-major """
        for i, row in enumerate(self.rows):
            for j, x in row.items():
                yield (i, j, x)

    def values(self):
        for _, _, x in self.elements(): yield x

    # Slicing & re-shaping

    def slice(self, start: int, end: int) -> "SparseMatrix":
        """ Rows `start` through `end` (exclusive) """
        return self.slice_block(start, end, 0, self.d2)

    def slice_col(self, start: int, end: int) -> "SparseMatrix":
        """ Columns `start` through `end` (exclusive) """
        return self.slice_block(0, self.d1, start, end)

    def slice_block(self, r_from: int, r_end: int, c_from: int, c_end: int) -> "SparseMatrix":
        DimensionMismatch.assert_true(0 <= r_from <= r_end <= self.d1,
                                      f"Row range [{r_from}, {r_end}) outside {self.d1} rows")
        DimensionMismatch.assert_true(0 <= c_from <= c_end <= self.d2,
                                      f"Column range [{c_from}, {c_end}) outside {self.d2} columns")
        c = self._new(r_end - r_from, c_end - c_from)
        for i in range(r_from, r_end):
            dest = c.rows[i - r_from]
            for e in self.rows[i].elements(c_from):
                if e.col >= c_end: break
                dest[e.col - c_from] = e.val
        return c

    def slice_exclude(self, row: int, col: int) -> "SparseMatrix":
        """ Copy with row `row` and column `col` removed """
        self._check_index(row, col)
        c = self._new(self.d1 - 1, self.d2 - 1)
        for i, src in enumerate(self.rows):
            if i == row: continue
            dest = c.rows[i if i < row else i - 1]
            for j, x in src.items():
                if j == col: continue
                dest[j if j < col else j - 1] = x
        return c

    def select_rows(self, idx: Sequence[int]) -> "SparseMatrix":
        c = self._new(len(idx), self.d2)
        for k, i in enumerate(idx):
            self._check_row(i)
            c.rows[k] = self.rows[i].copy()
        return c

    def select_cols(self, idx: Sequence[int]) -> "SparseMatrix":
        for j in idx:
            self._check_col(j)
        c = self._new(self.d1, len(idx))
        for i, src in enumerate(self.rows):
            for k, j in enumerate(idx):
                x = src.get(j)
                if x is not None:
                    c.rows[i][k] = x
        return c

    def transpose(self) -> "SparseMatrix":
        t = self._new(self.d2, self.d1)
        # Rows are visited in ascending order, so each insert appends at the tail
        for i, row in enumerate(self.rows):
            for j, x in row.items():
                t.rows[j][i] = x
        return t

    @property
    def T(self) -> "SparseMatrix":
        return self.transpose()

    # Concatenation

    def prepend_row(self, u) -> "SparseMatrix":
        c = self._new(self.d1 + 1, self.d2)
        c.set_row(0, u)
        for i, row in enumerate(self.rows):
            c.rows[i + 1] = row.copy()
        return c

    def append_row(self, u) -> "SparseMatrix":
        c = self._new(self.d1 + 1, self.d2)
        for i, row in enumerate(self.rows):
            c.rows[i] = row.copy()
        c.set_row(self.d1, u)
        return c

    def prepend_col(self, u) -> "SparseMatrix":
        DimensionMismatch.assert_eq(len(u), self.d1, f"Column of length {len(u)} for {self.d1} rows")
        c = self._new(self.d1, self.d2 + 1)
        c.set_col(0, u)
        for i, row in enumerate(self.rows):
            for j, x in row.items():
                c.rows[i][j + 1] = x
        return c

    def append_col(self, u) -> "SparseMatrix":
        DimensionMismatch.assert_eq(len(u), self.d1, f"Column of length {len(u)} for {self.d1} rows")
        c = self.copy()
        c.d2 += 1
        c.set_col(self.d2, u)
        return c

    def concat_rows(self, b: "SparseMatrix") -> "SparseMatrix":
        """ Stack `b` below `self` """
        DimensionMismatch.assert_eq(self.d2, b.d2, f"concat_rows: {self.d2} versus {b.d2} columns")
        c = self._new(self.d1 + b.d1, self.d2)
        c.rows = [row.copy() for row in self.rows] + [row.copy() for row in b.rows]
        return c

    def concat_cols(self, b: "SparseMatrix") -> "SparseMatrix":
        """ Place `b` to the right of `self` """
        DimensionMismatch.assert_eq(self.d1, b.d1, f"concat_cols: {self.d1} versus {b.d1} rows")
        c = self._new(self.d1, self.d2 + b.d2)
        for i in range(self.d1):
            dest = c.rows[i]
            for j, x in self.rows[i].items():
                dest[j] = x
            for j, x in b.rows[i].items():
                dest[self.d2 + j] = x
        return c

    # Diagonals & triangles

    def _diag_range(self, k: int) -> range:
        return range(max(-k, 0), max(min(self.d1, self.d2 - k), 0))

    def get_diag(self, k: int = 0) -> Vector:
        """ The `k`th diagonal: -1, 0, 1 for sub, main, super """
        return Vector([self.get(i, i + k) for i in self._diag_range(k)], field=self.field)

    def set_diag(self, u, k: int = 0):
        rng = self._diag_range(k)
        DimensionMismatch.assert_eq(len(u), len(rng), f"Diagonal {k} has length {len(rng)}, not {len(u)}")
        for i, x in zip(rng, u):
            self.set(i, i + k, x)

    def set_diag_value(self, x):
        for i in range(min(self.d1, self.d2)):
            self.set(i, i, x)

    def lower_t(self) -> "SparseMatrix":
        """ Lower triangle, diagonal included """
        c = self._new(self.d1, self.d2)
        for i, row in enumerate(self.rows):
            for j, x in row.items():
                if j > i: break
                c.rows[i][j] = x
        return c

    def upper_t(self) -> "SparseMatrix":
        """ Upper triangle, diagonal included """
        c = self._new(self.d1, self.d2)
        for i, row in enumerate(self.rows):
            for e in row.elements(i):
                c.rows[i][e.col] = e.val
        return c

    def block_diag(self, b: "SparseMatrix") -> "SparseMatrix":
        """ Combine `self` and `b` along the diagonal: [self, b] """
        c = self._new(self.d1 + b.d1, self.d2 + b.d2)
        for i, row in enumerate(self.rows):
            c.rows[i] = row.copy()
        for i, row in enumerate(b.rows):
            dest = c.rows[self.d1 + i]
            for j, x in row.items():
                dest[self.d2 + j] = x
        return c

    def embed_identity(self, p: int, q: int) -> "SparseMatrix":
        """ Form [Ip, self, Iq] along the diagonal, where Ir is the r-by-r identity """
        if not self.is_symmetric():
            raise UnsupportedOperation("embed_identity requires a symmetric matrix")
        return SparseMatrix.eye(p, field=self.field).block_diag(self).block_diag(
            SparseMatrix.eye(q, field=self.field))

    # Algebra

    def _check_same_shape(self, b, op: str):
        DimensionMismatch.assert_true(self.shape == (b.d1, b.d2),
                                      f"{op}: shapes {self.shape} and {(b.d1, b.d2)}")

    def _merge_ip(self, b: "SparseMatrix", sign: int):
        """ Add (sign=1) or subtract (sign=-1) `b`s stored entries into `self` """
        self._check_same_shape(b, "+" if sign > 0 else "-")
        zero = self.field.zero()
        for i, row in enumerate(b.rows):
            dest = self.rows[i]
            for j, x in row.items():
                y = dest.get(j, zero)
                self.set(i, j, y + x if sign > 0 else y - x)
        return self

    def __add__(self, b):
        if isinstance(b, SparseMatrix):
            return self.copy()._merge_ip(b, 1)
        if isinstance(b, (Vector, numbers.Number)) or hasattr(b, "to_dense"):
            return self.to_dense() + b
        return NotImplemented

    def __radd__(self, b):
        if isinstance(b, (Vector, numbers.Number)):
            return self.to_dense() + b
        return NotImplemented

    def __sub__(self, b):
        if isinstance(b, SparseMatrix):
            return self.copy()._merge_ip(b, -1)
        if isinstance(b, (Vector, numbers.Number)) or hasattr(b, "to_dense"):
            return self.to_dense() - b
        return NotImplemented

    def __rsub__(self, b):
        if isinstance(b, (Vector, numbers.Number)):
            return self.to_dense().__rsub__(b)
        return NotImplemented

    def __iadd__(self, b):
        if isinstance(b, SparseMatrix):
            return self._merge_ip(b, 1)
        if isinstance(b, (Vector, numbers.Number)) or hasattr(b, "to_dense"):
            self.set_values((self.to_dense() + b).a)
            return self
        return NotImplemented

    def __isub__(self, b):
        if isinstance(b, SparseMatrix):
            return self._merge_ip(b, -1)
        if isinstance(b, (Vector, numbers.Number)) or hasattr(b, "to_dense"):
            self.set_values((self.to_dense() - b).a)
            return self
        return NotImplemented

    def __neg__(self):
        return self.scale(-1)

    def scale(self, x) -> "SparseMatrix":
        """ New matrix with every entry multiplied by scalar `x` """
        c = self.copy()
        c._scale_ip(x)
        return c

    def _scale_ip(self, x):
        x = self.field.coerce(x)
        for i, row in enumerate(self.rows):
            for j, y in list(row.items()):
                self.set(i, j, y * x)

    def matmul(self, b: "SparseMatrix") -> "SparseMatrix":
        """ Matrix multiplication self*b.
        Each output entry is a "two pointer" walk over row i of `self`
        and row j of `b`s transpose, both in ascending column order. """
        DimensionMismatch.assert_eq(self.d2, b.d1,
                                    f"Incompatible cross dimensions {self.shape} * {b.shape}")
        bt = b.transpose()
        c = self._new(self.d1, b.d2)
        zero = self.field.zero()
        for i, row in enumerate(self.rows):
            if not len(row): continue
            dest = c.rows[i]
            for j, tcol in enumerate(bt.rows):
                re = row.head
                ce = tcol.head
                val = zero
                while re is not None and ce is not None:
                    if re.col < ce.col:
                        re = re.next_in_row
                    elif ce.col < re.col:
                        ce = ce.next_in_row
                    else:
                        val += re.val * ce.val
                        re = re.next_in_row
                        ce = ce.next_in_row
                if not self.field.is_zero(val):
                    dest[j] = val
        return c

    def _mul_dense(self, b: DenseMatrix) -> "SparseMatrix":
        DimensionMismatch.assert_eq(self.d2, b.d1,
                                    f"Incompatible cross dimensions {self.shape} * {b.shape}")
        c = self._new(self.d1, b.d2)
        for i, row in enumerate(self.rows):
            if not len(row): continue
            for j in range(b.d2):
                s = self.field.zero()
                for k, x in row.items():
                    s += x * b.a[k, j]
                c.set(i, j, s)
        return c

    def mult(self, u) -> Vector:
        """ Multiply with a column vector """
        u = Vector.of(u, self.field)
        if len(u) < self.d2:
            raise DimensionMismatch(f"Vector of length {len(u)} for {self.d2} columns")
        y = Vector.zeros(self.d1, self.field)
        for i, row in enumerate(self.rows):
            s = self.field.zero()
            for j, x in row.items():
                s += x * u[j]
            y[i] = s
        return y

    def __mul__(self, b):
        if isinstance(b, SparseMatrix):
            return self.matmul(b)
        if isinstance(b, DenseMatrix):
            return self._mul_dense(b)
        if isinstance(b, (Vector, list, tuple)):
            return self.mult(b)
        if isinstance(b, numbers.Number):
            return self.scale(b)
        return NotImplemented

    def __rmul__(self, b):
        if isinstance(b, numbers.Number):
            return self.scale(b)
        return NotImplemented

    __matmul__ = __mul__

    def __imul__(self, b):
        if isinstance(b, numbers.Number):
            self._scale_ip(b)
            return self
        if isinstance(b, (SparseMatrix, DenseMatrix)):
            DimensionMismatch.assert_eq(b.d1, b.d2, "In-place multiply requires a square operand")
            self.rows = (self * b).rows
            return self
        return NotImplemented

    def __truediv__(self, x):
        if isinstance(x, numbers.Number):
            return self.scale(self.field.one() / self.field.coerce(x))
        return NotImplemented

    def __itruediv__(self, x):
        if isinstance(x, numbers.Number):
            self._scale_ip(self.field.one() / self.field.coerce(x))
            return self
        return NotImplemented

    def dot(self, u) -> Vector:
        """ Transpose-multiply: self.T * u """
        return self.transpose().mult(u)

    def mdot(self, b):
        """ Transpose-multiply: self.T * b """
        return self.transpose() * b

    def mul_cols(self, u) -> "SparseMatrix":
        """ Scale column j by u[j] """
        return self.copy().mul_cols_ip(u)

    def mul_cols_ip(self, u) -> "SparseMatrix":
        DimensionMismatch.assert_eq(len(u), self.d2, f"Vector of length {len(u)} for {self.d2} columns")
        for i, row in enumerate(self.rows):
            for j, x in list(row.items()):
                self.set(i, j, x * self.field.coerce(u[j]))
        return self

    def mul_rows(self, u) -> "SparseMatrix":
        """ Scale row i by u[i] """
        DimensionMismatch.assert_eq(len(u), self.d1, f"Vector of length {len(u)} for {self.d1} rows")
        c = self.copy()
        for i, row in enumerate(c.rows):
            y = self.field.coerce(u[i])
            for j, x in list(row.items()):
                c.set(i, j, y * x)
        return c

    def power(self, p: int) -> "SparseMatrix":
        """ Integer power `p >= 2` of a square matrix """
        DimensionMismatch.assert_true(self.is_square, "power requires a square matrix")
        MatrixError.assert_true(isinstance(p, int) and p >= 2, f"Invalid power {p}")
        c = self.matmul(self)
        for _ in range(2, p):
            c = c.matmul(self)
        return c

    def __pow__(self, p: int):
        return self.power(p)

    def times_s(self, b: "SparseMatrix") -> "SparseMatrix":
        """ One level of Strassen's block multiplication.
        Odd sizes are padded with a zero row and column. """
        DimensionMismatch.assert_true(self.is_square and b.shape == self.shape,
                                      f"times_s requires equal square matrices, not {self.shape} and {b.shape}")
        n = self.d1
        if n < 2: return self.matmul(b)

        a = self
        if n % 2:
            a = a.block_diag(self._new(1))
            b = b.block_diag(self._new(1))
        h = a.d1 // 2
        logger.debug(f"Strassen multiply: n={n}, blocks of {h}x{h}")

        a11, a12 = a.slice_block(0, h, 0, h), a.slice_block(0, h, h, 2 * h)
        a21, a22 = a.slice_block(h, 2 * h, 0, h), a.slice_block(h, 2 * h, h, 2 * h)
        b11, b12 = b.slice_block(0, h, 0, h), b.slice_block(0, h, h, 2 * h)
        b21, b22 = b.slice_block(h, 2 * h, 0, h), b.slice_block(h, 2 * h, h, 2 * h)

        p1 = (a11 + a22) * (b11 + b22)
        p2 = (a21 + a22) * b11
        p3 = a11 * (b12 - b22)
        p4 = a22 * (b21 - b11)
        p5 = (a11 + a12) * b22
        p6 = (a21 - a11) * (b11 + b12)
        p7 = (a12 - a22) * (b21 + b22)

        c = (p1 + p4 - p5 + p7).concat_cols(p3 + p5).concat_rows(
            (p2 + p4).concat_cols(p1 - p2 + p3 + p6))
        if c.d1 != n:
            c = c.slice_block(0, n, 0, n)
        return c

    # Reductions & predicates

    def _extreme(self, e: Optional[int], pick) -> object:
        if e is None: e = self.d1
        key = self.field.order_key
        best = None
        for row in self.rows[:e]:
            candidates = list(row.values())
            if len(row) < self.d2:  # Row holds implicit zeros
                candidates.append(self.field.zero())
            for x in candidates:
                if best is None or pick(key(x), key(best)):
                    best = x
        return self.field.zero() if best is None else best

    def max(self, e: Optional[int] = None):
        """ Largest entry among rows before `e` (default: all rows) """
        return self._extreme(e, lambda x, y: x > y)

    def min(self, e: Optional[int] = None):
        """ Smallest entry among rows before `e` (default: all rows) """
        return self._extreme(e, lambda x, y: x < y)

    def trace(self):
        DimensionMismatch.assert_true(self.is_square, "trace requires a square matrix")
        s = self.field.zero()
        for i, row in enumerate(self.rows):
            s += row.get(i, self.field.zero())
        return s

    def sum(self):
        s = self.field.zero()
        for x in self.values():
            s += x
        return s

    def sum_abs(self):
        s = self.field.zero()
        for x in self.values():
            s += self.field.abs(x)
        return s

    def sum_lower(self):
        """ Sum of the entries strictly below the diagonal """
        s = self.field.zero()
        for i, row in enumerate(self.rows):
            for j, x in row.items():
                if j >= i: break
                s += x
        return s

    def mag(self):
        """ Largest absolute value of any entry """
        m = self.field.abs(self.field.zero())
        for x in self.values():
            a = self.field.abs(x)
            if a > m: m = a
        return m

    def norm1(self):
        """ Matrix 1-norm: largest absolute column sum """
        sums = [self.field.abs(self.field.zero())] * self.d2
        for _, j, x in self.elements():
            sums[j] += self.field.abs(x)
        return max(sums) if sums else self.field.abs(self.field.zero())

    def clean(self, thres: float, relative: bool = True) -> "SparseMatrix":
        """ Zero every entry with magnitude at or below `thres`,
        scaled by `mag()` if `relative`. Operates in place. """
        s = self.mag() if relative else 1
        for i, row in enumerate(self.rows):
            for j, x in list(row.items()):
                if self.field.abs(x) <= thres * s:
                    row.discard(j)
        return self

    def is_symmetric(self) -> bool:
        return self.is_square and self == self.transpose()

    def is_nonnegative(self) -> bool:
        zero = self.field.order_key(self.field.zero())
        return all(self.field.order_key(x) >= zero for x in self.values())

    def is_rectangular(self) -> bool:
        """ Whether all rows have the same number of columns. Always true. """
        return True

    def __eq__(self, other):
        if not isinstance(other, SparseMatrix): return NotImplemented
        if self.shape != other.shape: return False
        return all(r == o for r, o in zip(self.rows, other.rows))

    __hash__ = None

    def allclose(self, other) -> bool:
        """ Entry-wise `field.isclose` comparison, with any matrix offering `get` """
        if self.shape != (other.d1, other.d2): return False
        coerce = self.field.coerce
        return all(self.field.isclose(self.get(i, j), coerce(other.get(i, j)))
                   for i in range(self.d1) for j in range(self.d2))

    def display(self) -> str:
        """ Create a string "X" versus " " display of matrix entries. """
        s = ''
        for r in self.rows:
            row = [' '] * self.d2
            for j in r.keys():
                row[j] = 'X'
            s += ''.join(row) + '\n'
        return s

    def show_all(self) -> str:
        """ All entries, implicit zeros included, one line per row """
        fmt = self.field.format
        return '\n'.join('\t'.join(fmt(x) for x in self.get_row(i)) for i in range(self.d1))

    def __repr__(self):
        s = f"<{self.__class__.__name__}({self.d1}x{self.d2}, field={self.field.name})"
        for i, row in enumerate(self.rows):
            if len(row):
                s += f"\n  {i}: " + ", ".join(f"{j}: {self.field.format(x)}" for j, x in row.items())
        return s + ">"

    # Factorization & solving

    def lud_npp(self) -> Tuple["SparseMatrix", "SparseMatrix"]:
        """ LU decomposition, no partial pivoting.
        Returns the two-tuple (L, U), with unit lower-triangular L. """
        u = self.copy()
        l, u = u.lud_ip()
        return (l, u)

    def lud_ip(self) -> Tuple["SparseMatrix", "SparseMatrix"]:
        """ In-place LU decomposition, no partial pivoting. `self` becomes U. """
        DimensionMismatch.assert_true(self.is_square, f"LU decomposition of non-square {self.shape} matrix")
        logger.debug(f"LU factorizing {self.d1}x{self.d2} matrix, {self.nnz} stored entries")
        n = self.d1
        zero = self.field.zero()
        l = SparseMatrix.eye(n, field=self.field)
        for i in range(n):
            pivot = self.rows[i].get(i, zero)
            if self.field.is_zero(pivot):
                raise SingularPivot(f"Zero pivot at row {i}; try inverse() or reduce()")
            pivot_row = list(self.rows[i].elements(i))
            for k in range(i + 1, n):
                x = self.rows[k].get(i)
                if x is None: continue
                mul = x / pivot
                l.set(k, i, mul)
                for e in pivot_row:
                    self.set(k, e.col, self.rows[k].get(e.col, zero) - mul * e.val)
                self.rows[k].discard(i)
        logger.debug(f"LU factorization complete: {l.nnz} entries in L, {self.nnz} in U")
        return (l, self)

    def bsolve(self, y) -> Vector:
        """ Back substitution on upper-triangular `self`.
        A zero on the diagonal raises `SingularPivot`. """
        DimensionMismatch.assert_true(self.is_square, f"Back substitution on non-square {self.shape} matrix")
        y = Vector.of(y, self.field)
        DimensionMismatch.assert_eq(len(y), self.d1, f"RHS of length {len(y)} for {self.d1} rows")
        zero = self.field.zero()
        x = Vector.zeros(self.d1, self.field)
        for k in reversed(range(self.d1)):
            s = y[k]
            for e in self.rows[k].elements(k + 1):
                s -= e.val * x[e.col]
            d = self.rows[k].get(k, zero)
            if self.field.is_zero(d):
                raise SingularPivot(f"Zero diagonal at row {k}")
            x[k] = s / d
        return x

    @staticmethod
    def solve_lu(l: "SparseMatrix", u: "SparseMatrix", b) -> Vector:
        """ Forward & backward substitution.
        Breaks LUx = b down into Ly = b, Ux = y. L has a unit diagonal. """
        b = Vector.of(b, l.field)
        DimensionMismatch.assert_eq(len(b), l.d1, f"RHS of length {len(b)} for {l.d1} rows")
        y = Vector.zeros(l.d1, l.field)
        for k in range(l.d1):
            s = b[k]
            for e in l.rows[k].elements():
                if e.col >= k: break
                s -= e.val * y[e.col]
            y[k] = s
        return u.bsolve(y)

    def solve(self, b) -> Vector:
        """ Solve `self * x = b` via `lud_npp`. Zero pivots raise `SingularPivot`. """
        DimensionMismatch.assert_eq(len(b), self.d1, f"RHS of length {len(b)} for {self.d1} rows")
        return self.solve_lu(*self.lud_npp(), b)

    def _gauss_jordan(self, aug: Optional["SparseMatrix"] = None):
        """ In-place Gauss-Jordan elimination with partial pivoting.
        Row operations are mirrored onto `aug`, if provided. """
        zero = self.field.zero()
        one = self.field.one()
        for i in range(self.d1):
            pivot = self.rows[i].get(i, zero)
            if self.field.is_zero(pivot):
                k = self._find_pivot_below(i)
                if k is None:
                    raise SingularMatrix(f"No non-zero pivot for column {i}")
                logger.debug(f"Swapping rows {i} and {k}")
                # Both rows are zero left of column i, so the swap is a whole-row exchange
                self.rows[i], self.rows[k] = self.rows[k], self.rows[i]
                if aug is not None:
                    aug.rows[i], aug.rows[k] = aug.rows[k], aug.rows[i]
                pivot = self.rows[i][i]

            if pivot != one:
                inv = one / pivot
                self._scale_row(i, inv)
                if aug is not None: aug._scale_row(i, inv)

            pivot_row = list(self.rows[i].items())
            aug_row = list(aug.rows[i].items()) if aug is not None else []
            for k in range(self.d1):
                if k == i: continue
                t = self.rows[k].get(i)
                if t is None: continue
                for j, x in pivot_row:
                    self.set(k, j, self.rows[k].get(j, zero) - t * x)
                self.rows[k].discard(i)
                for j, x in aug_row:
                    aug.set(k, j, aug.rows[k].get(j, zero) - t * x)

    def _find_pivot_below(self, i: int) -> Optional[int]:
        """ Row below `i` with the largest magnitude entry in column `i`, if any is non-zero """
        best, best_abs = None, None
        for k in range(i + 1, self.d1):
            x = self.rows[k].get(i)
            if x is None: continue
            a = self.field.abs(x)
            if best is None or a > best_abs:
                best, best_abs = k, a
        return best

    def _scale_row(self, i: int, x):
        for j, y in list(self.rows[i].items()):
            self.set(i, j, y * x)

    def inverse(self) -> "SparseMatrix":
        """ Inverse via Gauss-Jordan elimination with partial pivoting """
        return self.copy().inverse_ip()

    def inverse_ip(self) -> "SparseMatrix":
        """ In-place inverse. `self` is overwritten with its inverse. """
        DimensionMismatch.assert_true(self.is_square, f"Inverse of non-square {self.shape} matrix")
        logger.debug(f"Inverting {self.d1}x{self.d2} matrix")
        aug = SparseMatrix.eye(self.d1, field=self.field)
        self._gauss_jordan(aug)
        self.rows = aug.rows
        return self

    def inverse_npp(self):
        raise UnsupportedOperation("Inverse without pivoting is not supported for sparse matrices")

    def reduce(self) -> "SparseMatrix":
        """ Reduced row-echelon form [I | x], via Gauss-Jordan with partial pivoting """
        return self.copy().reduce_ip()

    def reduce_ip(self) -> "SparseMatrix":
        DimensionMismatch.assert_true(self.d2 >= self.d1,
                                      f"Row reduction requires columns >= rows, not {self.shape}")
        logger.debug(f"Reducing {self.d1}x{self.d2} matrix")
        self._gauss_jordan()
        return self

    def nullspace(self) -> Vector:
        """ Right nullspace vector of an m by m+1 matrix:
        the negated last column of `reduce()`, extended by one. """
        return self.copy().nullspace_ip()

    def nullspace_ip(self) -> Vector:
        DimensionMismatch.assert_eq(self.d2, self.d1 + 1, "nullspace requires n (columns) = m (rows) + 1")
        self.reduce_ip()
        return (-self.col(self.d2 - 1)).append(self.field.one())

    def det(self):
        """ Determinant by cofactor expansion along row 0.
        Exponential in size; only for small matrices. """
        DimensionMismatch.assert_true(self.is_square, f"Determinant of non-square {self.shape} matrix")
        if self.d1 == 0: return self.field.one()
        if self.d1 == 1: return self.get(0, 0)
        s = self.field.zero()
        for j, x in self.rows[0].items():
            cofactor = x * self.slice_exclude(0, j).det()
            s = s + cofactor if j % 2 == 0 else s - cofactor
        return s
