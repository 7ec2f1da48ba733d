"""
Dictionary-backed sparse matrices, with aliasing sub-matrix views
"""

import logging

from .matrix import SparseMatrix, SparseView, MatrixError, MatrixDimError
from .dense import DenseMatrix

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
