from fractions import Fraction

import pytest

from ...errors import MalformedInput
from ...scalar import Complex, Rational, Real
from ..file import CsvFile
from ..matrix import SparseMatrix


def test_read(tmp_path):
    p = tmp_path / "m.csv"
    p.write_text("1, 0, 3/4\n0,2,0\n\n\n")
    m = SparseMatrix.read_csv(p)
    assert m.shape == (2, 3)
    assert m.get(0, 2) == Fraction(3, 4)
    assert m.get(1, 1) == 2
    assert m.nnz == 3


def test_read_complex(tmp_path):
    p = tmp_path / "m.csv"
    p.write_text("(1+2j),0\n0,-1j\n")
    m = SparseMatrix.read_csv(p, field=Complex)
    assert m.get(0, 0) == 1 + 2j
    assert m.get(1, 1) == -1j


@pytest.mark.parametrize("field,values", [
    (Rational, [Fraction(1, 3), 0, -2, Fraction(7, 5)]),
    (Complex, [1 + 2j, 0, -0.5j, 3]),
    (Real, [0.1, 0, -2.5, 1e-20]),
])
def test_write_read(tmp_path, field, values):
    m = SparseMatrix.from_values((2, 2), *values, field=field)
    p = tmp_path / "m.csv"
    m.write(p)
    assert SparseMatrix.read_csv(p, field=field) == m


def test_write_format(tmp_path):
    m = SparseMatrix.from_values((2, 2), 1, Fraction(1, 2), 0, -3)
    p = tmp_path / "m.csv"
    m.write(p)
    assert p.read_text() == "1,1/2\n0,-3\n"


def test_empty_file(tmp_path):
    p = tmp_path / "m.csv"
    p.write_text("\n\n")
    with pytest.raises(MalformedInput):
        SparseMatrix.read_csv(p)


def test_bad_literal(tmp_path):
    p = tmp_path / "m.csv"
    p.write_text("1,2\n3,four\n")
    with pytest.raises(MalformedInput) as e:
        SparseMatrix.read_csv(p)
    assert "line 2" in str(e.value)


def test_ragged_rows(tmp_path):
    p = tmp_path / "m.csv"
    p.write_text("1,2\n3\n")
    with pytest.raises(MalformedInput) as e:
        CsvFile(p).read()
    assert "line 2" in str(e.value)
    # Also a plain ValueError
    with pytest.raises(ValueError):
        CsvFile(p).read()
