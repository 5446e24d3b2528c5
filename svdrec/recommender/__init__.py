"""
Recommendation layer built on the SVD core
Rating imputation, ranking, diagnostics and the interactive session
"""

from .diagnostics import EnergyProfile, latent_coordinates, singular_value_energy, to_frame
from .ratings import Prediction, center, fill_missing, predict_ratings
from .recommendations import ItemScore, is_discovery, rank_items, recommend
from .session import RatingSession

__all__ = [
    "EnergyProfile",
    "ItemScore",
    "Prediction",
    "RatingSession",
    "center",
    "fill_missing",
    "is_discovery",
    "latent_coordinates",
    "predict_ratings",
    "rank_items",
    "recommend",
    "singular_value_energy",
    "to_frame",
]
