"""
Per-user recommendation ranking from predicted ratings
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config import DiscoveryRules
from ..core.matrix import MatrixLike, as_matrix


@dataclass(frozen=True)
class ItemScore:
    """One item in a user's ranked list"""

    item_id: int
    original_rating: float
    predicted_rating: float
    is_discovery: bool


def is_discovery(
    original: float,
    predicted: float,
    rules: Optional[DiscoveryRules] = None,
    unrated: float = 0.0,
) -> bool:
    """
    An item is a discovery when the model likes it noticeably more than the user
    did: unrated or low-rated items predicted at or above ``min_predicted``, or
    rated items whose prediction rose by at least ``min_uplift``.
    ``unrated`` is the rating value that marks a missing rating.
    """
    rules = rules or DiscoveryRules()

    if original <= unrated and predicted >= rules.min_predicted:
        return True
    if original <= rules.low_rating and predicted >= rules.min_predicted:
        return True
    return original > unrated and predicted - original >= rules.min_uplift


def rank_items(
    original_row: Sequence[float],
    predicted_row: Sequence[float],
    rules: Optional[DiscoveryRules] = None,
    top_n: Optional[int] = None,
    unrated: float = 0.0,
) -> List[ItemScore]:
    """All items of one user sorted by predicted rating, highest first"""
    original_row = np.asarray(original_row, dtype=np.float64)
    predicted_row = np.asarray(predicted_row, dtype=np.float64)
    if original_row.shape != predicted_row.shape:
        raise ValueError(
            f"Row length mismatch: {original_row.shape[0]} ratings, "
            f"{predicted_row.shape[0]} predictions"
        )

    scores = [
        ItemScore(
            item_id=j,
            original_rating=float(original),
            predicted_rating=float(predicted),
            is_discovery=is_discovery(float(original), float(predicted), rules, unrated),
        )
        for j, (original, predicted) in enumerate(zip(original_row, predicted_row))
    ]

    # sorted() is stable, so ties keep item order
    scores = sorted(scores, key=lambda s: s.predicted_rating, reverse=True)

    if top_n is not None:
        scores = scores[: max(0, top_n)]
    return scores


def recommend(
    ratings: MatrixLike,
    predicted: MatrixLike,
    rules: Optional[DiscoveryRules] = None,
    top_n: Optional[int] = None,
    unrated: float = 0.0,
) -> List[List[ItemScore]]:
    """Ranked item lists for every user"""
    ratings = as_matrix(ratings)
    predicted = as_matrix(predicted)
    if ratings.shape != predicted.shape:
        raise ValueError(f"Shape mismatch: ratings {ratings.shape}, predicted {predicted.shape}")

    return [
        rank_items(original_row, predicted_row, rules, top_n, unrated)
        for original_row, predicted_row in zip(ratings, predicted)
    ]


def discoveries(scores: Sequence[ItemScore]) -> List[ItemScore]:
    return [s for s in scores if s.is_discovery]
