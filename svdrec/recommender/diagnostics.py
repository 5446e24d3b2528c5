"""
Derived views of a decomposition for charts: singular value energy,
latent-space coordinates and labeled tables
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..core.matrix import MatrixLike, as_matrix
from ..core.svd import SVDResult


@dataclass(frozen=True)
class SingularValueBar:
    value: float
    pct: float  # share of total squared energy, in percent
    height_frac: float  # value relative to the largest singular value
    active: bool


@dataclass(frozen=True)
class EnergyProfile:
    bars: List[SingularValueBar]
    cumulative_pcts: List[float]
    energy_captured: float


def singular_value_energy(singular_values: Sequence[float], active_k: int) -> EnergyProfile:
    """Energy share of each singular value and the total captured by the first ``active_k``"""
    s = np.asarray(singular_values, dtype=np.float64).reshape(-1)
    if s.size == 0:
        return EnergyProfile(bars=[], cumulative_pcts=[], energy_captured=0.0)

    squared = s**2
    total = squared.sum()
    max_value = s.max()

    if total > 0:
        pcts = squared / total * 100
        cumulative = np.cumsum(squared) / total * 100
    else:
        pcts = np.zeros_like(s)
        cumulative = np.zeros_like(s)

    bars = [
        SingularValueBar(
            value=float(value),
            pct=float(pct),
            height_frac=float(value / max_value) if max_value > 0 else 0.0,
            active=i < active_k,
        )
        for i, (value, pct) in enumerate(zip(s, pcts))
    ]

    if active_k <= 0:
        energy_captured = 0.0
    elif active_k <= len(cumulative):
        energy_captured = float(cumulative[active_k - 1])
    else:
        energy_captured = 100.0

    return EnergyProfile(
        bars=bars,
        cumulative_pcts=[float(c) for c in cumulative],
        energy_captured=energy_captured,
    )


def latent_coordinates(svd: SVDResult) -> Tuple[np.ndarray, np.ndarray]:
    """
    2-D embedding of users and items on the first two singular directions,
    scaled by their singular values. Returns (users, items) arrays of shape
    (m, 2) and (n, 2); the second axis is zero when only one triplet exists.
    """
    m, n = svd.shape
    users = np.zeros((m, 2))
    items = np.zeros((n, 2))

    axes = min(2, svd.rank)
    if axes == 0:
        return np.zeros((0, 2)), np.zeros((0, 2))

    users[:, :axes] = svd.U[:, :axes] * svd.S[:axes]
    items[:, :axes] = (svd.Vt[:axes, :] * svd.S[:axes, None]).T
    return users, items


def to_frame(
    matrix: MatrixLike,
    users: Optional[Sequence[str]] = None,
    items: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Labeled users x items table"""
    matrix = as_matrix(matrix)
    return pd.DataFrame(matrix, index=users, columns=items)
