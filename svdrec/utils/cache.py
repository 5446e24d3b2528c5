"""
In-process decomposition cache
Keeps recent SVD results so rank changes reuse an existing decomposition
"""

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import astuple
from functools import wraps
from typing import Any, Dict, Optional

import numpy as np
import structlog

from ..config import SVDConfig
from ..core.matrix import MatrixLike, as_matrix
from ..core.svd import SVDResult, compute_svd

logger = structlog.get_logger()


def cache_performance_monitor(threshold_ms: float = 10.0):
    """Decorator that logs slow cache operations"""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            result = func(*args, **kwargs)
            duration = (time.time() - start_time) * 1000

            if duration > threshold_ms:
                logger.warning(f"Slow cache operation: {func.__name__} took {duration:.2f}ms")

            return result

        return wrapper

    return decorator


class DecompositionCache:
    """LRU cache of SVD results keyed by matrix contents and engine config"""

    def __init__(self, max_entries: int = 32):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.max_entries = max_entries
        self._entries: "OrderedDict[str, SVDResult]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(matrix: np.ndarray, config: SVDConfig) -> str:
        """Generate cache key from shape, raw float64 bytes and config values"""
        digest = hashlib.sha256()
        digest.update(repr(matrix.shape).encode("utf-8"))
        digest.update(np.ascontiguousarray(matrix, dtype=np.float64).tobytes())
        digest.update(repr(astuple(config)).encode("utf-8"))
        return f"svd:{digest.hexdigest()}"

    def get(self, key: str) -> Optional[SVDResult]:
        with self._lock:
            result = self._entries.get(key)
            if result is None:
                self.misses += 1
                return None

            self._entries.move_to_end(key)
            self.hits += 1
            return result

    def set(self, key: str, result: SVDResult):
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cached decomposition", key=evicted)

    @cache_performance_monitor(threshold_ms=50.0)
    def get_or_compute(
        self, matrix: MatrixLike, config: Optional[SVDConfig] = None
    ) -> SVDResult:
        """Return the cached decomposition of ``matrix`` or compute and store it"""
        config = config or SVDConfig()
        matrix = as_matrix(matrix)
        key = self.make_key(matrix, config)

        result = self.get(key)
        if result is not None:
            return result

        result = compute_svd(matrix, config)
        self.set(key, result)
        return result

    def clear(self):
        with self._lock:
            self._entries.clear()
        logger.info("Decomposition cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def _calculate_hit_rate(self, hits: int, misses: int) -> float:
        """Calculate cache hit rate"""
        total = hits + misses
        return (hits / total) if total > 0 else 0.0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self._calculate_hit_rate(self.hits, self.misses),
        }
