"""
Support for storing array-of-entries form matrices to YAML
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import ruamel.yaml
from ruamel.yaml.error import YAMLError

from ..dense import Vector
from ..errors import MalformedInput
from ..scalar import Field

logger = logging.getLogger(__name__)

yaml = ruamel.yaml.YAML()


@yaml.register_class
class MatrixYaml(object):
    """ A matrix, as (row, col, literal) entries, plus an optional linear-system test-case:
    right-hand-side `rhs` and its expected `solution`. Values are stored as field literals. """

    yaml_tag = "!MatrixYaml"

    def __init__(self):
        self.desc: str = ""
        self.field: str = "rational"
        self.shape: List[int] = [0, 0]
        self.entries: List[Tuple] = []
        self.rhs: Optional[List[str]] = None
        self.solution: Optional[List[str]] = None

    @classmethod
    def from_matrix(cls, m, desc: str = "", rhs=None, solution=None) -> "MatrixYaml":
        fmt = m.field.format
        self = MatrixYaml()
        self.desc = desc
        self.field = m.field.name
        self.shape = [m.d1, m.d2]
        self.entries = [[i, j, fmt(x)] for (i, j, x) in m.elements()]
        self.rhs = [fmt(x) for x in rhs] if rhs is not None else None
        self.solution = [fmt(x) for x in solution] if solution is not None else None
        return self

    def to_dict(self):
        return dict(
            desc=self.desc,
            field=self.field,
            shape=self.shape,
            entries=self.entries,
            rhs=self.rhs,
            solution=self.solution,
        )

    @classmethod
    def from_dict(cls, d: dict) -> "MatrixYaml":
        """ Create from a plain dictionary, validating its contents """
        self = cls()
        try:
            self.desc = str(d.get('desc') or "")
            self.field = str(d.get('field') or "rational")
            self.shape = [int(x) for x in d['shape']]
            self.entries = [[int(r), int(c), str(v)] for (r, c, v) in d.get('entries') or []]
            rhs, solution = d.get('rhs'), d.get('solution')
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedInput(f"Invalid matrix YAML: {e!r}") from e
        self.rhs = [str(x) for x in rhs] if rhs is not None else None
        self.solution = [str(x) for x in solution] if solution is not None else None

        if len(self.shape) != 2 or min(self.shape) < 0:
            raise MalformedInput(f"Invalid shape {self.shape}")
        d1, d2 = self.shape
        for r, c, _ in self.entries:
            if not (0 <= r < d1 and 0 <= c < d2):
                raise MalformedInput(f"Entry ({r}, {c}) outside {d1}x{d2} shape")
        for name, vec in (('rhs', self.rhs), ('solution', self.solution)):
            if vec is not None and len(vec) != d1:
                raise MalformedInput(f"{name} of length {len(vec)} for {d1} rows")
        Field.by_name(self.field)
        return self

    @property
    def scalar_field(self):
        return Field.by_name(self.field)

    def to_mat(self):
        from .matrix import SparseMatrix
        f = self.scalar_field
        m = SparseMatrix(*self.shape, field=f)
        for r, c, v in self.entries:
            m.set(r, c, f.parse(v))
        return m

    def rhs_vector(self) -> Optional[Vector]:
        if self.rhs is None: return None
        f = self.scalar_field
        return Vector([f.parse(x) for x in self.rhs], field=f)

    def solution_vector(self) -> Optional[Vector]:
        if self.solution is None: return None
        f = self.scalar_field
        return Vector([f.parse(x) for x in self.solution], field=f)

    def dump(self, file):
        p = Path(file)
        yaml.dump(self, p)
        logger.debug(f"Wrote matrix YAML to {p}")

    @classmethod
    def load(cls, file) -> "MatrixYaml":
        p = Path(file)
        try:
            y = yaml.load(p)
        except YAMLError as e:
            raise MalformedInput(f"{p}: {e}") from e
        if not isinstance(y, MatrixYaml):
            raise MalformedInput(f"{p}: expected a {cls.yaml_tag} document")
        logger.debug(f"Read matrix YAML from {p}")
        return cls.from_dict(vars(y))
