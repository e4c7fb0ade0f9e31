import random
from fractions import Fraction

import pytest

from ...dense import Vector
from ...errors import DimensionMismatch, SingularMatrix, SingularPivot, UnsupportedOperation
from ...scalar import Complex, Real
from ..matrix import SparseMatrix


def dominant_matrix(rng: random.Random, n: int, field=None) -> SparseMatrix:
    """ Helper function.  (Not a test!)
    Random sparse, diagonally-dominant (hence non-singular) matrix. """
    kw = {} if field is None else dict(field=field)
    m = SparseMatrix(n, **kw)
    for i in range(n):
        for j in range(n):
            if i != j and rng.random() < 0.3:
                m.set(i, j, rng.randint(-5, 5))
        m.set(i, i, 10 * n + rng.randint(1, 5))
    return m


def scenario() -> SparseMatrix:
    return SparseMatrix.from_values((2, 2), 1, 2, 3, 2)


def test_scenario_det():
    assert scenario().det() == -4


def test_scenario_inverse():
    inv = scenario().inverse()
    assert inv == SparseMatrix.from_values(
        (2, 2), Fraction(-1, 2), Fraction(1, 2), Fraction(3, 4), Fraction(-1, 4))
    assert scenario() * inv == SparseMatrix.eye(2)


def test_scenario_solve():
    x = scenario().solve([8, 7])
    assert isinstance(x, Vector)
    assert x == [Fraction(-1, 2), Fraction(17, 4)]


def test_lud_npp():
    a = scenario()
    l, u = a.lud_npp()
    assert l == SparseMatrix.from_values((2, 2), 1, 0, 3, 1)
    assert u == SparseMatrix.from_values((2, 2), 1, 2, 0, -4)
    assert l * u == a
    assert a == scenario()  # Not modified


def test_lud_reconstructs():
    rng = random.Random(7)
    for n in (1, 3, 6, 9):
        a = dominant_matrix(rng, n)
        l, u = a.lud_npp()
        assert l * u == a
        assert l == l.lower_t()
        assert u == u.upper_t()
        assert l.get_diag() == [1] * n


def test_lud_ip():
    a = scenario()
    l, u = a.lud_ip()
    assert u is a
    assert a == SparseMatrix.from_values((2, 2), 1, 2, 0, -4)


def test_zero_leading_pivot():
    a = SparseMatrix.from_values((2, 2), 0, 1, 1, 0)
    with pytest.raises(SingularPivot):
        a.lud_npp()
    with pytest.raises(SingularPivot):
        a.solve([1, 2])
    # The pivoting path succeeds
    assert a.inverse() == a


def test_bsolve():
    u = SparseMatrix.from_values((2, 2), 2, 1, 0, 4)
    assert u.bsolve([4, 8]) == [1, 2]
    with pytest.raises(SingularPivot):
        SparseMatrix.from_values((2, 2), 1, 1, 0, 0).bsolve([1, 1])


def test_solve_lu():
    a = scenario()
    l, u = a.lud_npp()
    assert SparseMatrix.solve_lu(l, u, [8, 7]) == a.solve([8, 7])


def test_solve_random():
    rng = random.Random(99)
    for n in (1, 2, 5, 8):
        a = dominant_matrix(rng, n)
        x = Vector([rng.randint(-9, 9) for _ in range(n)])
        b = a * x
        assert a.solve(b) == x


def test_solve_rhs_length():
    with pytest.raises(DimensionMismatch):
        scenario().solve([1, 2, 3])


def test_non_square():
    a = SparseMatrix(2, 3)
    with pytest.raises(DimensionMismatch):
        a.lud_npp()
    with pytest.raises(DimensionMismatch):
        a.inverse()
    with pytest.raises(DimensionMismatch):
        a.det()


def test_inverse_random():
    rng = random.Random(3)
    for n in (1, 4, 7):
        a = dominant_matrix(rng, n)
        inv = a.inverse()
        assert a * inv == SparseMatrix.eye(n)
        assert inv * a == SparseMatrix.eye(n)


def test_inverse_with_row_swaps():
    a = SparseMatrix.from_values((3, 3), 0, 2, 1, 0, 0, 3, 4, 1, 0)
    with pytest.raises(SingularPivot):
        a.lud_npp()
    with pytest.raises(SingularPivot):
        a.solve([1, 2, 3])
    inv = a.inverse()
    assert a * inv == SparseMatrix.eye(3)


def test_inverse_ip():
    a = scenario()
    res = a.inverse_ip()
    assert res is a
    assert a == scenario().inverse()


def test_inverse_singular():
    a = SparseMatrix.from_values((2, 2), 1, 2, 2, 4)
    with pytest.raises(SingularMatrix):
        a.inverse()


def test_inverse_npp_unsupported():
    with pytest.raises(UnsupportedOperation):
        scenario().inverse_npp()


def test_inverse_real():
    a = SparseMatrix.from_values((2, 2), 4.0, 7.0, 2.0, 6.0, field=Real)
    inv = a.inverse()
    assert inv.allclose(SparseMatrix.from_values((2, 2), 0.6, -0.7, -0.2, 0.4, field=Real))
    assert (a * inv).allclose(SparseMatrix.eye(2, field=Real))


def test_solve_complex():
    a = SparseMatrix.from_values((2, 2), 1j, 1, 1, 1j, field=Complex)
    b = a * Vector([1, 2], field=Complex)
    x = a.solve(b)
    assert x.allclose([1, 2])


def test_reduce():
    a = SparseMatrix.from_values((2, 3), 2, 4, 2, 1, 3, 1)
    r = a.reduce()
    assert r == SparseMatrix.from_values((2, 3), 1, 0, 1, 0, 1, 0)
    assert a.get(0, 0) == 2  # Not modified
    a.reduce_ip()
    assert a == r


def test_reduce_with_swap():
    a = SparseMatrix.from_values((2, 3), 0, 1, 2, 1, 1, 3)
    assert a.reduce() == SparseMatrix.from_values((2, 3), 1, 0, 1, 0, 1, 2)


def test_reduce_shape():
    with pytest.raises(DimensionMismatch):
        SparseMatrix(3, 2).reduce()


def test_nullspace():
    a = SparseMatrix.from_values((2, 3), 2, 4, 2, 1, 3, 1)
    v = a.nullspace()
    assert v == [-1, 0, 1]
    assert (a * v).is_zero()

    b = SparseMatrix.from_values((2, 3), 0, 1, 2, 1, 1, 3)
    v = b.nullspace()
    assert v == [-1, -2, 1]
    assert (b * v).is_zero()
    assert b.nullspace_ip() == v


def test_nullspace_shape():
    with pytest.raises(DimensionMismatch):
        SparseMatrix(2, 4).nullspace()
    with pytest.raises(DimensionMismatch):
        SparseMatrix(2, 2).nullspace()


def test_det():
    a = SparseMatrix.from_values((3, 3), 2, 0, 1, 1, 3, 2, 1, 1, 2)
    assert a.det() == 6
    assert SparseMatrix.from_values((1, 1), 4).det() == 4
    assert SparseMatrix.eye(4).det() == 1
    assert SparseMatrix(3).det() == 0


def test_one_by_one():
    a = SparseMatrix.from_values((1, 1), 4)
    assert a.inverse() == SparseMatrix.from_values((1, 1), Fraction(1, 4))
    assert a.solve([2]) == [Fraction(1, 2)]
    l, u = a.lud_npp()
    assert l == SparseMatrix.eye(1)
    assert u == a
    r = SparseMatrix.from_values((1, 2), 4, 2).reduce()
    assert r == SparseMatrix.from_values((1, 2), 1, Fraction(1, 2))
    assert SparseMatrix.from_values((1, 2), 4, 2).nullspace() == [Fraction(-1, 2), 1]
