import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

""" `%`-style format for each value in `str(matrix)` """
FLOAT_FORMAT = "%f"


def render(rows: int, cols: int, get: Callable[[int, int], float]) -> str:
    """ Brace-delimited text grid of `get(i, j)` for every coordinate. One line per row. """
    lines = []
    for i in range(rows):
        lines.append(", ".join(FLOAT_FORMAT % get(i, j) for j in range(cols)))
    return "{" + "\n".join(lines) + "}"


class SparseMatrix(object):
    """ Sparse matrix stored as a dictionary of `key: value`, non-zero entries only.

    Keys flatten a (row, col) coordinate as `key = row * step + col + offset`.
    An owning matrix has `offset == 0` and `step == cols`.
    Views (see `SparseView`) share their parent's dictionary and shift into it via `offset`,
    keeping the parent's `step`. """

    is_view = False

    def __init__(self, rows: int, cols: int,
                 elements: Optional[Dict[int, float]] = None,
                 offset: int = 0, step: Optional[int] = None):
        self.rows = rows
        self.cols = cols
        self.elements: Dict[int, float] = {} if elements is None else elements
        self.offset = offset
        self.step = cols if step is None else step

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "SparseMatrix":
        return cls(rows, cols)

    @classmethod
    def normals(cls, rows: int, cols: int, n: int,
                rng: Optional[np.random.Generator] = None) -> "SparseMatrix":
        """ Create a matrix and put a standard normal in `n` random elements, with replacement.
        Coordinates may repeat, so the result can hold fewer than `n` non-zeros. """
        m = cls.zeros(rows, cols)
        if rows <= 0 or cols <= 0: return m
        if rng is None:
            rng = np.random.default_rng()
        for _ in range(n):
            i = int(rng.integers(rows))
            j = int(rng.integers(cols))
            m.set(i, j, float(rng.standard_normal()))
        return m

    @classmethod
    def from_elements(cls, elements: Dict[int, float], rows: int, cols: int) -> "SparseMatrix":
        """ Create a matrix using the provided dictionary as its backing. No copy is made. """
        return cls(rows, cols, elements=elements)

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[int, int, float]], rows: int, cols: int) -> "SparseMatrix":
        """ Create a matrix from (row, col, val) triples. Duplicate coordinates are summed. """
        m = cls.zeros(rows, cols)
        for row, col, val in entries:
            m.set(row, col, m.get(row, col) + val)
        return m

    @classmethod
    def identity(cls, n: int) -> "SparseMatrix":
        m = cls.zeros(n, n)
        for k in range(n):
            m.set(k, k, 1.0)
        return m

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def nnz(self) -> int:
        """ Number of stored non-zeros belonging to this matrix """
        return sum(1 for _ in self.items())

    def __repr__(self):
        return f"<{self.__class__.__name__}(rows={self.rows}, cols={self.cols}, offset={self.offset}, step={self.step})>"

    def __str__(self):
        return render(self.rows, self.cols, self.get)

    def __eq__(self, other):
        if not isinstance(other, SparseMatrix): return NotImplemented
        if self.shape != other.shape: return False
        return self._bounded() == other._bounded()

    def _bounded(self) -> Dict[Tuple[int, int], float]:
        return {(i, j): v for i, j, v in self.entries() if self.in_bounds(i, j)}

    def in_bounds(self, i: int, j: int) -> bool:
        return 0 <= i < self.rows and 0 <= j < self.cols

    def key(self, i: int, j: int) -> int:
        """ Flatten coordinate (i, j) into a dictionary key """
        return i * self.step + j + self.offset

    def get(self, i: int, j: int) -> float:
        """ Value at (i, j), zero if nothing is stored. No bounds checks. """
        return self.elements.get(self.key(i, j), 0)

    def get_index(self, index: int) -> float:
        """ Value stored under raw key `index`, zero if absent """
        return self.elements.get(index, 0)

    def get_row_index(self, index: int) -> int:
        """ Turn a key into a row number. Only meaningful where `step == cols`. """
        if not self.cols: return 0
        return (index - self.offset) // self.cols

    def get_col_index(self, index: int) -> int:
        """ Turn a key into a column number. Only meaningful where `step == cols`. """
        if not self.cols: return index - self.offset
        return (index - self.offset) % self.cols

    def get_row_col_index(self, index: int) -> Tuple[int, int]:
        """ Turn a key into a (row, col) pair. Valid for views as well as owning matrices. """
        if not self.step:
            return 0, index - self.offset
        return divmod(index - self.offset, self.step)

    def _store(self, index: int, v: float) -> None:
        # Zero values are removed, never stored
        if v == 0:
            self.elements.pop(index, None)
        else:
            self.elements[index] = v

    def set(self, i: int, j: int, v: float) -> None:
        self._store(self.key(i, j), v)

    def set_index(self, index: int, v: float) -> None:
        self._store(index, v)

    def items(self) -> Iterator[Tuple[int, float]]:
        """ Iterator of (key, value) pairs belonging to this matrix.
        Runs over a snapshot, so the matrix may be mutated while iterating. """
        yield from list(self.elements.items())

    def indices(self) -> Iterator[int]:
        """ Iterator of the keys of all non-zero elements. Order is unspecified. """
        for index, _ in self.items():
            yield index

    def entries(self) -> Iterator[Tuple[int, int, float]]:
        """ Iterator of (row, col, val) triples, decoded from our keys """
        for index, val in self.items():
            i, j = self.get_row_col_index(index)
            yield i, j, val

    def get_matrix(self, i: int, j: int, rows: int, cols: int) -> "SparseView":
        """ Get a `rows` x `cols` matrix with its top-left corner at (i, j) of `self`.
        Changes to the new matrix are reflected in `self`, and vice-versa. """
        return SparseView(base=self, rows=rows, cols=cols, offset=self.key(i, j))

    def get_col_vector(self, j: int) -> "SparseView":
        """ Reference to column `j` """
        return self.get_matrix(0, j, self.rows, 1)

    def get_row_vector(self, i: int) -> "SparseView":
        """ Reference to row `i` """
        return self.get_matrix(i, 0, 1, self.cols)

    def shares_storage(self, other: "SparseMatrix") -> bool:
        return self.elements is other.elements

    def augment(self, other: "SparseMatrix") -> "SparseMatrix":
        """ Create a new matrix [self other] """
        logger.debug(f"Augmenting {self.shape} with {other.shape}")
        if self.rows != other.rows:
            raise MatrixDimError(f"Cannot augment {self.shape} with {other.shape}: row counts differ")
        m = SparseMatrix.zeros(self.rows, self.cols + other.cols)
        for i, j, val in self.entries():
            m.set(i, j, val)
        for i, j, val in other.entries():
            m.set(i, j + self.cols, val)
        return m

    def stack(self, other: "SparseMatrix") -> "SparseMatrix":
        """ Create a new matrix [self; other], with `self` above `other` """
        logger.debug(f"Stacking {self.shape} on {other.shape}")
        if self.cols != other.cols:
            raise MatrixDimError(f"Cannot stack {self.shape} on {other.shape}: column counts differ")
        m = SparseMatrix.zeros(self.rows + other.rows, self.cols)
        for i, j, val in self.entries():
            m.set(i, j, val)
        for i, j, val in other.entries():
            m.set(i + self.rows, j, val)
        return m

    def lower(self) -> "SparseMatrix":
        """ Copy with all zeros above the diagonal """
        m = SparseMatrix.zeros(self.rows, self.cols)
        for i, j, val in self.entries():
            if i >= j: m.set(i, j, val)
        return m

    def upper(self) -> "SparseMatrix":
        """ Copy with all zeros below the diagonal """
        m = SparseMatrix.zeros(self.rows, self.cols)
        for i, j, val in self.entries():
            if i <= j: m.set(i, j, val)
        return m

    def copy(self) -> "SparseMatrix":
        """ Create an element-by-element copy with its own storage.
        Copies of views are re-keyed to `offset == 0`, `step == cols`. """
        m = SparseMatrix.zeros(self.rows, self.cols)
        for i, j, val in self.entries():
            m.set(i, j, val)
        return m

    def dense_matrix(self) -> "DenseMatrix":
        """ Convert into a `DenseMatrix`. Entries outside our declared extents are dropped. """
        from .dense import DenseMatrix
        d = DenseMatrix.zeros(self.rows, self.cols)
        for i, j, val in self.entries():
            if self.in_bounds(i, j): d.set(i, j, val)
        return d

    def mult(self, rhs: Union[List[float], Dict[int, float], None]) -> List[float]:
        """ Multiply with a column vector.
        `rhs` is either a dense list, or a sparse `{row: value}` dictionary. """
        if isinstance(rhs, dict) or rhs is None:
            x = [0.0] * self.cols
            if rhs is not None:
                for r, v in rhs.items():
                    if not 0 <= r < self.cols:
                        raise MatrixDimError(f'Invalid rhs: row {r} for matrix with {self.cols} columns')
                    x[r] = v
        else:
            x = list(rhs)
            if len(x) != self.cols:
                raise MatrixDimError(f'Invalid rhs: length {len(x)} for matrix with {self.cols} columns')

        y = [0.0] * self.rows
        for i, j, val in self.entries():
            if self.in_bounds(i, j):
                y[i] += val * x[j]
        return y

    def display(self) -> str:
        """ Create a string "X" versus " " display of matrix entries. """
        grid = [[' '] * self.cols for _ in range(self.rows)]
        for i, j, _ in self.entries():
            if self.in_bounds(i, j): grid[i][j] = 'X'
        return ''.join(''.join(row) + '\n' for row in grid)


class SparseView(SparseMatrix):
    """ Window onto another matrix's storage.
    `base` is the matrix this view was taken from; both read and write the same dictionary. """

    is_view = True

    def __init__(self, base: SparseMatrix, rows: int, cols: int, offset: int):
        super().__init__(rows, cols, elements=base.elements, offset=offset, step=base.step)
        self.base = base

    def items(self) -> Iterator[Tuple[int, float]]:
        """ Iterator of (key, value) pairs inside this view's window """
        for index, val in super().items():
            if self.in_bounds(*self.get_row_col_index(index)):
                yield index, val


class MatrixError(Exception):
    @classmethod
    def assert_eq(cls, x, y):
        if x != y:
            raise cls


class MatrixDimError(MatrixError): pass
