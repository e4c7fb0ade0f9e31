"""
Matrix Error Types
"""


class MatrixError(Exception):
    """ Base-class for all matrix errors.
    The `assert_*` class-methods raise the calling class when their condition fails. """

    @classmethod
    def assert_true(cls, cond, msg: str = ""):
        if not cond:
            raise cls(msg)

    @classmethod
    def assert_eq(cls, x, y, msg: str = ""):
        if x != y:
            raise cls(msg or f"{x} != {y}")

    @classmethod
    def assert_not_eq(cls, x, y, msg: str = ""):
        if x == y:
            raise cls(msg or f"{x} == {y}")


class DimensionMismatch(MatrixError):
    """ Operand shapes are incompatible. """
    pass


class IndexOutOfRange(MatrixError, IndexError):
    """ Row or column index outside the matrix. """
    pass


class SingularPivot(MatrixError):
    """ Exact-zero pivot in a non-pivoting algorithm. """
    pass


class SingularMatrix(MatrixError):
    """ No non-zero pivot candidate; the matrix has no inverse. """
    pass


class UnsupportedOperation(MatrixError):
    """ Operation not applicable to this matrix structure. """
    pass


class MalformedInput(MatrixError, ValueError):
    """ Unparsable or inconsistent text/file input. """
    pass
