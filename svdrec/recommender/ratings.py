"""
Rating matrix preparation and rating prediction
Missing ratings are imputed, the matrix is mean-centered, decomposed,
reconstructed at rank k and mapped back onto the rating scale
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
import structlog

from ..config import RatingScale, Settings
from ..core.matrix import MatrixLike, as_matrix
from ..core.svd import SVDResult, compute_svd, reconstruct_matrix

if TYPE_CHECKING:
    from ..utils.cache import DecompositionCache

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class Prediction:
    """Predicted ratings for a given rank together with the decomposition used"""

    svd: SVDResult
    predicted: np.ndarray
    global_mean: float
    k: int


def fill_missing(ratings: MatrixLike, scale: Optional[RatingScale] = None) -> np.ndarray:
    """Replace unrated entries with the user's mean rating, or the neutral rating"""
    scale = scale or RatingScale()
    matrix = as_matrix(ratings)

    filled = matrix.copy()
    for i, row in enumerate(matrix):
        rated = row[row > scale.minimum]
        fill_value = rated.mean() if rated.size > 0 else scale.neutral
        filled[i, row <= scale.minimum] = fill_value

    return filled


def center(matrix: MatrixLike) -> Tuple[np.ndarray, float]:
    """Subtract the global mean; returns the centered matrix and the mean"""
    matrix = as_matrix(matrix)
    if matrix.size == 0:
        return matrix, 0.0

    global_mean = float(matrix.mean())
    return matrix - global_mean, global_mean


def denormalize(
    reconstruction: np.ndarray, global_mean: float, scale: Optional[RatingScale] = None
) -> np.ndarray:
    """Add the global mean back and clip to the rating scale"""
    scale = scale or RatingScale()
    return np.clip(reconstruction + global_mean, scale.minimum, scale.maximum)


def rated_counts(ratings: MatrixLike, scale: Optional[RatingScale] = None) -> np.ndarray:
    """Number of rated items per user"""
    scale = scale or RatingScale()
    matrix = as_matrix(ratings)
    return (matrix > scale.minimum).sum(axis=1)


def predict_ratings(
    ratings: MatrixLike,
    k: int,
    settings: Optional[Settings] = None,
    cache: Optional["DecompositionCache"] = None,
) -> Prediction:
    """
    Predict every rating from a rank-k approximation of the rating matrix.

    The decomposition only depends on the ratings, so a cache can serve
    repeated calls that differ in k alone.
    """
    settings = settings or Settings()

    filled = fill_missing(ratings, settings.ratings)
    centered, global_mean = center(filled)

    if cache is not None:
        svd = cache.get_or_compute(centered, settings.svd)
    else:
        svd = compute_svd(centered, settings.svd)

    reconstruction = reconstruct_matrix(svd, k)
    predicted = denormalize(reconstruction, global_mean, settings.ratings)

    logger.debug(
        "Ratings predicted", shape=predicted.shape, k=k, available_rank=svd.rank
    )
    return Prediction(svd=svd, predicted=predicted, global_mean=global_mean, k=k)


def fallback_prediction(
    ratings: MatrixLike, k: int = 0, scale: Optional[RatingScale] = None
) -> Prediction:
    """Prediction without a decomposition: unrated entries become the neutral rating"""
    scale = scale or RatingScale()
    matrix = as_matrix(ratings)

    predicted = np.where(matrix <= scale.minimum, scale.neutral, matrix)
    m, n = matrix.shape
    return Prediction(svd=SVDResult.empty(m, n), predicted=predicted, global_mean=0.0, k=k)
