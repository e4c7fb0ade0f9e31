import logging
from pathlib import Path
from typing import List, Optional, Type

from ..errors import MalformedInput
from ..scalar import Field, Rational

logger = logging.getLogger(__name__)


class CsvFile(object):
    """ Comma-separated matrix file: one matrix row per line,
    each value a literal of scalar-field `field`. """

    def __init__(self, path, field: Type[Field] = Rational):
        self.path = Path(path)
        self.field = field
        self.rows: List[list] = []
        self.ncols: Optional[int] = None
        self.line: int = 0

    @classmethod
    def from_matrix(cls, m, path) -> "CsvFile":
        self = cls(path, field=m.field)
        self.rows = [m.get_row(i).to_list() for i in range(m.d1)]
        self.ncols = m.d2
        return self

    def read(self) -> "CsvFile":
        with open(self.path) as f:
            lines = f.read().splitlines()

        # Trailing blank lines are ignored
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            raise MalformedInput(f"{self.path}: empty matrix file")

        for self.line, text in enumerate(lines, start=1):
            row = self.read_row(text)
            if self.ncols is None:
                self.ncols = len(row)
            elif len(row) != self.ncols:
                raise MalformedInput(
                    f"{self.path}, line {self.line}: {len(row)} values, expected {self.ncols}")
            self.rows.append(row)

        logger.debug(f"Read {len(self.rows)}x{self.ncols} matrix from {self.path}")
        return self

    def read_row(self, text: str) -> list:
        try:
            return [self.field.parse(tok) for tok in text.split(",")]
        except MalformedInput as e:
            raise MalformedInput(f"{self.path}, line {self.line}: {e}") from e

    def write(self):
        with open(self.path, "w") as f:
            for row in self.rows:
                f.write(",".join(self.field.format(x) for x in row) + "\n")
        logger.debug(f"Wrote {len(self.rows)}x{self.ncols} matrix to {self.path}")

    def to_mat(self):
        from .matrix import SparseMatrix
        m = SparseMatrix(len(self.rows), self.ncols or 0, field=self.field)
        for i, row in enumerate(self.rows):
            m.set_row(i, row)
        return m
