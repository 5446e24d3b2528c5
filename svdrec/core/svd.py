"""
Truncated Singular Value Decomposition
Power iteration on A^T A with deflation, one singular triplet at a time
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np
import structlog

from ..config import SVDConfig
from .matrix import MatrixLike, as_matrix, mat_vec_mul, multiply, norm, transpose

logger = structlog.get_logger()

DEFAULT_SVD_CONFIG = SVDConfig()


@dataclass(frozen=True, eq=False)
class SVDResult:
    """
    Parallel-array SVD: column r of U, S[r] and row r of Vt form one triplet.
    Arrays are read-only so one result can back any number of reconstructions.
    """

    U: np.ndarray
    S: np.ndarray
    Vt: np.ndarray

    def __post_init__(self):
        U = np.array(self.U, dtype=np.float64)
        S = np.array(self.S, dtype=np.float64).reshape(-1)
        Vt = np.array(self.Vt, dtype=np.float64)

        # Bare empty lists carry no column information
        if U.ndim != 2 and U.size == 0:
            U = U.reshape(0, 0)
        if Vt.ndim != 2 and Vt.size == 0:
            Vt = Vt.reshape(0, 0)

        for arr in (U, S, Vt):
            arr.setflags(write=False)

        object.__setattr__(self, "U", U)
        object.__setattr__(self, "S", S)
        object.__setattr__(self, "Vt", Vt)

    @property
    def rank(self) -> int:
        return len(self.S)

    @property
    def shape(self) -> Tuple[int, int]:
        """(m, n) of the decomposed matrix"""
        return self.U.shape[0], self.Vt.shape[1]

    def triplets(self) -> Iterator[Tuple[np.ndarray, float, np.ndarray]]:
        for r in range(self.rank):
            yield self.U[:, r], float(self.S[r]), self.Vt[r, :]

    @classmethod
    def empty(cls, m: int = 0, n: int = 0) -> "SVDResult":
        return cls(U=np.zeros((m, 0)), S=np.zeros(0), Vt=np.zeros((0, n)))


def _shape_seed(m: int, n: int) -> int:
    """Seed derived only from the matrix shape, so identical shapes reproduce"""
    return m * 1_000_003 + n


def _initial_vector(m: int, n: int) -> np.ndarray:
    """
    Unit start vector for power iteration.
    Drawn from numpy's PCG64 generator seeded by the shape; falls back to e_1
    if the draw is numerically zero.
    """
    rng = np.random.default_rng(_shape_seed(m, n))
    v = rng.uniform(-0.5, 0.5, size=n)

    length = norm(v)
    if length < 1e-300:
        v = np.zeros(n)
        v[0] = 1.0
        return v

    return v / length


def power_iteration(
    a: np.ndarray, config: SVDConfig = DEFAULT_SVD_CONFIG
) -> Tuple[np.ndarray, float, np.ndarray]:
    """
    Dominant singular triplet (u, sigma, v) of ``a``.

    v converges to the leading eigenvector of A^T A, which is the right
    singular vector with the largest singular value. If A v vanishes, u is the
    zero vector and sigma is 0.
    """
    m, n = a.shape
    ata = multiply(transpose(a), a)

    v = _initial_vector(m, n)
    for _ in range(config.max_iterations):
        w = mat_vec_mul(ata, v)
        length = norm(w)
        if length < config.null_tolerance:
            break
        v = w / length

    u = mat_vec_mul(a, v)
    sigma = norm(u)
    if sigma > config.null_tolerance:
        u = u / sigma
    else:
        u = np.zeros(m)
        sigma = 0.0

    return u, sigma, v


def compute_svd(
    matrix: MatrixLike, config: Optional[SVDConfig] = None, max_rank: Optional[int] = None
) -> SVDResult:
    """
    Decompose ``matrix`` into at most min(m, n) singular triplets.

    Extraction stops early once the residual's dominant singular value drops
    below ``config.stop_tolerance``; rank-deficient input therefore yields
    fewer triplets. Empty input yields an empty result.
    """
    config = config or DEFAULT_SVD_CONFIG
    a = as_matrix(matrix)
    m, n = a.shape

    limit = min(m, n)
    if max_rank is not None:
        limit = max(0, min(limit, int(max_rank)))

    if m == 0 or n == 0:
        logger.debug("Empty matrix, skipping decomposition", shape=(m, n))
        return SVDResult.empty(m, n)

    residual = a.copy()
    us, sigmas, vs = [], [], []

    for r in range(limit):
        u, sigma, v = power_iteration(residual, config)
        if sigma < config.stop_tolerance:
            logger.debug("Residual energy below tolerance", component=r, sigma=sigma)
            break

        us.append(u)
        sigmas.append(sigma)
        vs.append(v)
        logger.debug("Extracted singular triplet", component=r, sigma=sigma)

        residual -= sigma * np.outer(u, v)

    k = len(sigmas)
    logger.info(
        "SVD computed",
        shape=(m, n),
        rank=k,
        early_stop=k < limit,
    )

    if k == 0:
        return SVDResult.empty(m, n)

    return SVDResult(
        U=np.column_stack(us),
        S=np.array(sigmas),
        Vt=np.vstack(vs),
    )


def reconstruct_matrix(svd: SVDResult, k: Optional[int] = None) -> np.ndarray:
    """
    Rank-k approximation: sum over r < k of S[r] * outer(U[:, r], Vt[r, :]).

    ``k`` is clamped to the available triplets; ``None`` means all of them and
    k <= 0 gives the zero matrix of the original shape.
    """
    rank = svd.rank if k is None else max(0, min(int(k), svd.rank))

    U_k = svd.U[:, :rank]
    S_k = svd.S[:rank]
    Vt_k = svd.Vt[:rank, :]

    return (U_k * S_k) @ Vt_k
