import pytest

from ..dense import DenseMatrix, Vector
from ..errors import DimensionMismatch, IndexOutOfRange, SingularPivot, UnsupportedOperation
from ..scalar import Real
from ..sparse import SparseMatrix
from ..tridiag import SymTriMatrix


def second_difference(n: int = 3) -> SymTriMatrix:
    return SymTriMatrix.from_diagonals([2] * n, [-1] * (n - 1))


def test_create():
    m = SymTriMatrix(3)
    assert m.shape == (3, 3)
    assert m.dg == [0, 0, 0]
    assert m.sd == [0, 0]
    with pytest.raises(DimensionMismatch):
        SymTriMatrix.from_diagonals([1, 2], [1, 2])


def test_get_at_set():
    m = second_difference()
    assert m.get(1, 1) == 2
    assert m.get(1, 0) == -1
    assert m.get(0, 1) == -1
    with pytest.raises(UnsupportedOperation):
        m.get(0, 2)
    assert m.at(0, 2) == 0
    assert m.at(-1, 0) == 0
    assert m.at(3, 3) == 0
    m.set(2, 1, 5)
    assert m[1, 2] == 5
    with pytest.raises(UnsupportedOperation):
        m.set(2, 0, 1)


def test_index_out_of_range():
    m = SymTriMatrix.from_diagonals([1, 2, 3], [4, 5])
    for (i, j) in [(-1, -1), (3, 3), (0, -1), (3, 2)]:
        with pytest.raises(IndexOutOfRange):
            m.get(i, j)
        with pytest.raises(IndexOutOfRange):
            m.set(i, j, 9)
    assert m.dg == [1, 2, 3]
    assert m.sd == [4, 5]
    for i in (-1, 3):
        with pytest.raises(IndexOutOfRange):
            m.row(i)
        with pytest.raises(IndexOutOfRange):
            m.col(i)
        with pytest.raises(IndexOutOfRange):
            m.set_row(i, [0, 0, 0])
        with pytest.raises(IndexOutOfRange):
            m.set_col(i, [0, 0, 0])
    # Out of range is still zero through `at`
    assert m.at(3, 3) == 0

def test_rows_and_cols():
    m = second_difference()
    assert m.row(1) == [-1, 2, -1]
    assert m[0] == [2, -1, 0]
    assert m.col(0) == [2, -1, 0]
    assert m.col(2, start=1) == [-1, 2]
    m.set_row(1, [7, 8, 9])
    assert m.sd == [7, 9]
    assert m.dg[1] == 8
    m.set_col(0, [1, 3, 0])
    assert m.dg[0] == 1
    assert m.sd[0] == 3


def test_slice():
    m = SymTriMatrix.from_diagonals([1, 2, 3, 4], [5, 6, 7])
    s = m.slice(1, 3)
    assert s.dg == [2, 3]
    assert s.sd == [6]
    assert m[1:3, 1:3] == s
    assert m.slice_block(1, 3, 1, 3) == s
    with pytest.raises(UnsupportedOperation):
        m[0:2, 1:3]
    with pytest.raises(UnsupportedOperation):
        m.slice_block(0, 2, 1, 3)


def test_solve():
    m = second_difference()
    d = Vector([0, 0, 4])
    assert m.solve(d) == [1, 2, 3]
    assert d == [0, 0, 4]  # Not modified


def test_solve_matches_sparse():
    m = SymTriMatrix.from_diagonals([4, 5, 6, 7], [1, 2, 3])
    b = m * Vector([1, -1, 2, 1])
    assert b == m.to_sparse() * Vector([1, -1, 2, 1])
    assert m.solve(b) == [1, -1, 2, 1]
    assert m.solve(b) == m.to_sparse().solve(b)


def test_solve_zero_denominator():
    with pytest.raises(SingularPivot):
        SymTriMatrix.from_diagonals([0, 1], [1]).solve([1, 1])
    with pytest.raises(SingularPivot):
        SymTriMatrix.from_diagonals([1, 1], [1]).solve([1, 1])
    with pytest.raises(DimensionMismatch):
        second_difference().solve([1, 2])


def test_det():
    assert second_difference(3).det() == 4
    assert second_difference(10).det() == 11
    m = SymTriMatrix.from_diagonals([4, 5, 6], [1, 2])
    assert m.det() == 98
    assert m.det() == m.to_sparse().det()
    assert SymTriMatrix.from_diagonals([7], []).det() == 7


def test_add_sub():
    m = second_difference()
    assert (m + m).dg == [4, 4, 4]
    assert (m + m).sd == [-2, -2]
    assert (m - m) == SymTriMatrix(3)
    p = m + 1
    assert p.dg == [3, 3, 3]
    assert p.sd == [0, 0]
    assert 1 + m == p
    with pytest.raises(DimensionMismatch):
        m + second_difference(4)
    q = m.copy()
    q += m
    assert q == m * 2
    q -= m
    assert q == m


def test_mul_div():
    m = second_difference()
    assert (m * 2).dg == [4, 4, 4]
    assert 2 * m == m * 2
    assert (m / 2).sd == [-0.5, -0.5]
    assert m * Vector([1, 2, 3]) == [0, 0, 4]
    prod = m * m
    assert isinstance(prod, DenseMatrix)
    assert prod == m.to_dense() * m.to_dense()
    q = m.copy()
    q *= 3
    q /= 3
    assert q == m
    with pytest.raises(UnsupportedOperation):
        m * SparseMatrix.eye(3)


def test_diagonals_and_reductions():
    m = second_difference()
    assert m.get_diag() == [2, 2, 2]
    assert m.get_diag(-1) == [-1, -1]
    with pytest.raises(UnsupportedOperation):
        m.get_diag(2)
    assert m.trace() == 6
    assert m.sum() == 2
    assert m.sum_lower() == -2
    assert m.sum_abs() == 10
    assert m.norm1() == 4
    assert m.max() == 2
    assert m.min() == -1
    assert not m.is_nonnegative()
    assert m.T is m
    m.set_diag([1, 2, 3])
    m.set_diag([5, 6], 1)
    assert m.sd == [5, 6]
    m.set_diag_value(9)
    assert m.dg == [9, 9, 9]


def test_clean():
    m = SymTriMatrix.from_diagonals([1.0, 1e-12], [1e-13], field=Real)
    m.clean(1e-9)
    assert m.dg == [1.0, 0.0]
    assert m.sd == [0.0]


def test_conversions():
    m = second_difference()
    s = m.to_sparse()
    assert s == SparseMatrix.from_values((3, 3), 2, -1, 0, -1, 2, -1, 0, -1, 2)
    assert SymTriMatrix.from_matrix(s) == m
    assert m.to_dense() == s.to_dense()


@pytest.mark.parametrize("op,args", [
    ("slice_exclude", (0, 0)),
    ("select_rows", ([0],)),
    ("select_cols", ([0],)),
    ("concat_rows", (None,)),
    ("concat_cols", (None,)),
    ("set_values", ([[0]],)),
    ("set_all", (1,)),
    ("lud_npp", ()),
    ("lud_ip", ()),
    ("solve_lu", (None, None, None)),
    ("inverse", ()),
    ("inverse_ip", ()),
    ("reduce", ()),
    ("reduce_ip", ()),
    ("nullspace", ()),
    ("nullspace_ip", ()),
    ("block_diag", (None,)),
    ("embed_identity", (1, 1)),
    ("power", (2,)),
])
def test_unsupported(op, args):
    with pytest.raises(UnsupportedOperation):
        getattr(second_difference(), op)(*args)
