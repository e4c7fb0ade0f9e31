from .rowmap import Element, RowMap
from .matrix import SparseMatrix
from .file import CsvFile
from .yaml import MatrixYaml
