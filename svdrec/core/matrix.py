"""
Dense matrix primitives used by the decomposition engine
All functions are pure and return new arrays
"""

from typing import Sequence, Union

import numpy as np

from ..exceptions import ShapeError

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


def as_matrix(data: MatrixLike) -> np.ndarray:
    """
    Convert nested sequences or an array into a 2-D float64 matrix.
    Raises ShapeError for ragged rows or inputs that are not two-dimensional.
    """
    if isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise ShapeError(f"Expected a 2-D matrix, got {data.ndim} dimension(s)")
        return data.astype(np.float64, copy=True)

    rows = list(data)
    if not rows:
        return np.zeros((0, 0), dtype=np.float64)

    if any(np.ndim(row) != 1 for row in rows):
        raise ShapeError("Expected a sequence of rows, each a sequence of numbers")

    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ShapeError(f"Row {i} has {len(row)} columns, expected {width}")

    return np.array(rows, dtype=np.float64).reshape(len(rows), width)


def transpose(a: np.ndarray) -> np.ndarray:
    """n x m transpose of an m x n matrix"""
    return as_matrix(a).T.copy()


def multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Matrix product; columns of ``a`` must equal rows of ``b``"""
    return np.matmul(a, b)


def mat_vec_mul(a: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Matrix-vector product; ``len(v)`` must equal the column count of ``a``"""
    return np.matmul(a, v)


def norm(v: np.ndarray) -> float:
    """Euclidean (L2) norm"""
    v = np.asarray(v, dtype=np.float64)
    return float(np.sqrt(np.dot(v, v)))
