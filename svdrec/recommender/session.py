"""
Interactive rating session
Holds the editable rating matrix and the chosen rank, and serves predictions,
recommendations and diagnostics that stay in sync with every edit
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import structlog

from ..config import Settings
from ..core.matrix import MatrixLike, as_matrix
from ..utils.cache import DecompositionCache
from .diagnostics import EnergyProfile, latent_coordinates, singular_value_energy, to_frame
from .ratings import Prediction, fallback_prediction, predict_ratings, rated_counts
from .recommendations import ItemScore, recommend

logger = structlog.get_logger()

MOVIES = [
    "The Matrix",
    "Titanic",
    "Toy Story",
    "The Godfather",
    "Frozen",
    "Inception",
    "Forrest Gump",
    "The Avengers",
]

USERS = ["Madox", "Aron", "Louis", "Finely", "Ehsna", "Sacha"]

# 0 = not rated
INITIAL_RATINGS = [
    [5, 1, 2, 0, 1, 5, 3, 4],
    [1, 0, 4, 2, 5, 4, 4, 2],
    [4, 2, 1, 4, 1, 4, 2, 0],
    [0, 4, 5, 1, 5, 2, 5, 1],
    [5, 1, 3, 4, 0, 5, 2, 5],
    [1, 5, 4, 2, 4, 0, 3, 0],
]


class RatingSession:
    """Editable rating matrix with live low-rank predictions"""

    def __init__(
        self,
        ratings: Optional[MatrixLike] = None,
        users: Optional[Sequence[str]] = None,
        items: Optional[Sequence[str]] = None,
        settings: Optional[Settings] = None,
        cache: Optional[DecompositionCache] = None,
    ):
        self.settings = settings or Settings()

        if ratings is None:
            ratings = INITIAL_RATINGS
            users = USERS if users is None else users
            items = MOVIES if items is None else items

        self._initial = as_matrix(ratings)
        self._check_scale(self._initial)

        m, n = self._initial.shape
        self.users = list(users) if users is not None else [f"user_{i}" for i in range(m)]
        self.items = list(items) if items is not None else [f"item_{j}" for j in range(n)]
        if len(self.users) != m or len(self.items) != n:
            raise ValueError(
                f"Labels ({len(self.users)} users, {len(self.items)} items) "
                f"do not match a {m} x {n} rating matrix"
            )

        self.cache = cache if cache is not None else DecompositionCache(self.settings.cache_size)
        self._ratings = self._initial.copy()
        self._k = self._clamp_rank(self.settings.default_rank)
        self._prediction: Optional[Prediction] = None

    @property
    def ratings(self) -> np.ndarray:
        ratings = self._ratings.copy()
        ratings.setflags(write=False)
        return ratings

    @property
    def k(self) -> int:
        return self._k

    @property
    def max_rank(self) -> int:
        return min(self._ratings.shape)

    def _clamp_rank(self, k: int) -> int:
        if self.max_rank == 0:
            return 0
        return max(1, min(int(k), self.max_rank))

    def _check_scale(self, ratings: np.ndarray):
        scale = self.settings.ratings
        if ratings.size and (ratings.min() < scale.minimum or ratings.max() > scale.maximum):
            raise ValueError(f"Ratings must lie within [{scale.minimum}, {scale.maximum}]")

    def set_rating(self, user: int, item: int, value: float):
        """Set one rating; the scale minimum clears it"""
        scale = self.settings.ratings
        if not scale.minimum <= value <= scale.maximum:
            raise ValueError(f"Rating {value} outside [{scale.minimum}, {scale.maximum}]")

        m, n = self._ratings.shape
        if not (0 <= user < m and 0 <= item < n):
            raise IndexError(f"Cell ({user}, {item}) outside a {m} x {n} rating matrix")

        self._ratings[user, item] = value
        self._prediction = None
        logger.debug("Rating updated", user=user, item=item, value=value)

    def clear_rating(self, user: int, item: int):
        self.set_rating(user, item, self.settings.ratings.minimum)

    def set_rank(self, k: int) -> int:
        """Change the approximation rank, clamped to [1, min(m, n)]"""
        clamped = self._clamp_rank(k)
        if clamped != self._k:
            self._k = clamped
            self._prediction = None
        return clamped

    def reset(self):
        """Restore the initial ratings and the default rank"""
        self._ratings = self._initial.copy()
        self._k = self._clamp_rank(self.settings.default_rank)
        self._prediction = None
        logger.info("Session reset", shape=self._ratings.shape, k=self._k)

    @property
    def prediction(self) -> Prediction:
        """
        Current prediction. Rank changes reuse the cached decomposition; a
        failing prediction degrades to neutral imputation.
        """
        if self._prediction is None:
            try:
                self._prediction = predict_ratings(
                    self._ratings, self._k, self.settings, cache=self.cache
                )
            except (ValueError, FloatingPointError, np.linalg.LinAlgError) as e:
                logger.error(f"Prediction failed, falling back to neutral ratings: {e}")
                self._prediction = fallback_prediction(
                    self._ratings, self._k, self.settings.ratings
                )
        return self._prediction

    def recommendations(self, top_n: Optional[int] = None) -> List[List[ItemScore]]:
        return recommend(
            self._ratings,
            self.prediction.predicted,
            self.settings.discovery,
            top_n,
            unrated=self.settings.ratings.minimum,
        )

    def rated_counts(self) -> np.ndarray:
        return rated_counts(self._ratings, self.settings.ratings)

    def energy(self) -> EnergyProfile:
        return singular_value_energy(self.prediction.svd.S, self._k)

    def latent_space(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """User and item coordinates on the first two latent axes"""
        user_xy, item_xy = latent_coordinates(self.prediction.svd)
        columns = ["x", "y"]
        users = pd.DataFrame(user_xy, index=self.users[: len(user_xy)], columns=columns)
        items = pd.DataFrame(item_xy, index=self.items[: len(item_xy)], columns=columns)
        return users, items

    def predicted_frame(self) -> pd.DataFrame:
        return to_frame(self.prediction.predicted, self.users, self.items)

    def ratings_frame(self) -> pd.DataFrame:
        return to_frame(self._ratings, self.users, self.items)
