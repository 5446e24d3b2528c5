"""
Utility modules for caching and reconstruction metrics
"""

from .cache import DecompositionCache
from .metrics import ReconstructionMetrics

__all__ = ["DecompositionCache", "ReconstructionMetrics"]
