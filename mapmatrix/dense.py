"""
Dense Matrix, stored as a numpy array
"""

from typing import List, Tuple

import numpy as np

from .matrix import SparseMatrix, MatrixError, render


class DenseMatrix(object):
    """ Every cell is stored explicitly, in a 2-D float64 `numpy` array. """

    def __init__(self, array):
        self.array = np.array(array, dtype='float64')
        MatrixError.assert_eq(self.array.ndim, 2)

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "DenseMatrix":
        return cls(np.zeros((rows, cols)))

    @property
    def rows(self) -> int:
        return self.array.shape[0]

    @property
    def cols(self) -> int:
        return self.array.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def get(self, i: int, j: int) -> float:
        return float(self.array[i, j])

    def set(self, i: int, j: int, v: float) -> None:
        self.array[i, j] = v

    def to_list(self) -> List[List[float]]:
        return self.array.tolist()

    def sparse(self) -> SparseMatrix:
        """ Convert into an owning `SparseMatrix`, skipping zeros """
        m = SparseMatrix.zeros(self.rows, self.cols)
        for i, j in zip(*np.nonzero(self.array)):
            m.set(int(i), int(j), float(self.array[i, j]))
        return m

    def __eq__(self, other):
        if not isinstance(other, DenseMatrix): return NotImplemented
        return self.shape == other.shape and np.array_equal(self.array, other.array)

    def __repr__(self):
        return f"<{self.__class__.__name__}(rows={self.rows}, cols={self.cols})>"

    def __str__(self):
        return render(self.rows, self.cols, self.get)
