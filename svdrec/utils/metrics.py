"""
Reconstruction Quality Metrics
Error and orthonormality measures for low-rank approximations
"""

import time
from typing import Dict, Iterable, Optional

import numpy as np
import structlog
from sklearn.metrics import mean_squared_error, r2_score

from ..core.matrix import MatrixLike, as_matrix
from ..core.svd import SVDResult, reconstruct_matrix

logger = structlog.get_logger()


class ReconstructionMetrics:
    """Metrics calculator for rank-k reconstructions"""

    def __init__(self):
        self.calculation_times = {}

    def calculate_rmse(self, original: MatrixLike, approximation: MatrixLike) -> float:
        """Root mean square error over all entries"""
        start_time = time.time()

        original = as_matrix(original)
        approximation = as_matrix(approximation)
        if original.size == 0:
            return 0.0

        rmse = float(np.sqrt(mean_squared_error(original.ravel(), approximation.ravel())))

        self.calculation_times["rmse"] = time.time() - start_time
        return rmse

    def calculate_r2_score(self, original: MatrixLike, approximation: MatrixLike) -> float:
        """
        Coefficient of determination over all entries.
        Constant originals are scored 1.0 on an exact match and 0.0 otherwise.
        """
        start_time = time.time()

        original = as_matrix(original).ravel()
        approximation = as_matrix(approximation).ravel()
        if original.size < 2 or np.allclose(original, original[0]):
            return 1.0 if np.allclose(original, approximation) else 0.0

        r2 = float(r2_score(original, approximation))

        self.calculation_times["r2_score"] = time.time() - start_time
        return r2

    def calculate_frobenius_error(self, original: MatrixLike, approximation: MatrixLike) -> float:
        """Frobenius norm of the difference"""
        difference = as_matrix(original) - as_matrix(approximation)
        return float(np.linalg.norm(difference))

    def calculate_relative_error(self, original: MatrixLike, approximation: MatrixLike) -> float:
        """Frobenius error relative to the Frobenius norm of the original"""
        original = as_matrix(original)
        scale = float(np.linalg.norm(original))
        error = self.calculate_frobenius_error(original, approximation)
        if scale == 0:
            return 0.0 if error == 0 else float("inf")
        return error / scale

    def calculate_orthonormality_error(self, svd: SVDResult) -> Dict[str, float]:
        """Largest deviation of U^T U and Vt Vt^T from the identity"""
        k = svd.rank
        if k == 0:
            return {"u": 0.0, "vt": 0.0}

        identity = np.eye(k)
        return {
            "u": float(np.abs(svd.U.T @ svd.U - identity).max()),
            "vt": float(np.abs(svd.Vt @ svd.Vt.T - identity).max()),
        }

    def evaluate_reconstruction(
        self,
        original: MatrixLike,
        svd: SVDResult,
        ranks: Optional[Iterable[int]] = None,
    ) -> Dict[int, Dict[str, float]]:
        """
        Evaluate reconstructions of ``original`` at each requested rank
        Defaults to every rank from 0 to the number of available triplets
        """
        original = as_matrix(original)
        ranks = list(range(svd.rank + 1)) if ranks is None else list(ranks)

        logger.info("Evaluating reconstructions", shape=original.shape, ranks=ranks)

        results = {}
        for k in ranks:
            approximation = reconstruct_matrix(svd, k)
            results[k] = {
                "rmse": self.calculate_rmse(original, approximation),
                "r2_score": self.calculate_r2_score(original, approximation),
                "frobenius_error": self.calculate_frobenius_error(original, approximation),
                "relative_error": self.calculate_relative_error(original, approximation),
            }

        for metric_name, computation_time in self.calculation_times.items():
            logger.debug(f"{metric_name} computation time: {computation_time:.4f}s")

        return results
