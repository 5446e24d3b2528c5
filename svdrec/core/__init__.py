"""
Numerical core: dense matrix primitives and the power-iteration SVD
"""

from .matrix import as_matrix, mat_vec_mul, multiply, norm, transpose
from .svd import SVDResult, compute_svd, power_iteration, reconstruct_matrix

__all__ = [
    "SVDResult",
    "as_matrix",
    "compute_svd",
    "mat_vec_mul",
    "multiply",
    "norm",
    "power_iteration",
    "reconstruct_matrix",
    "transpose",
]
