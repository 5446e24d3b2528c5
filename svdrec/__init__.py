"""
SVD Recommender Demo
Low-rank approximation of a small user x item rating matrix via power iteration
"""

from .core.svd import SVDResult, compute_svd, reconstruct_matrix

__version__ = "1.0.0"

__all__ = ["SVDResult", "compute_svd", "reconstruct_matrix"]
