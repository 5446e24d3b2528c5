"""
PyTest configuration and fixtures for testing
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

from svdrec.recommender.session import INITIAL_RATINGS


# Register test markers
def pytest_configure(config):
    """Register custom test markers"""
    config.addinivalue_line("markers", "unit: Mark test as unit test")
    config.addinivalue_line("markers", "integration: Mark test as integration test")
    config.addinivalue_line("markers", "slow: Mark test as slow running")


@pytest.fixture
def rating_matrix():
    """Demo user x movie ratings, 0 = not rated"""
    return np.array(INITIAL_RATINGS, dtype=float)


@pytest.fixture
def known_spectrum_matrix():
    """5 x 4 matrix of rank 3 with singular values 6, 3 and 1"""
    rng = np.random.default_rng(7)
    left, _ = np.linalg.qr(rng.standard_normal((5, 3)))
    right, _ = np.linalg.qr(rng.standard_normal((4, 3)))
    return left @ np.diag([6.0, 3.0, 1.0]) @ right.T


@pytest.fixture
def full_rank_2x2():
    return np.array([[4.0, 0.0], [3.0, -5.0]])


@pytest.fixture
def rank_one_2x2():
    return np.array([[2.0, 4.0], [1.0, 2.0]])


@pytest.fixture
def test_config():
    """Test configuration"""
    return {
        "svd": {"stop_tolerance": 1e-10, "null_tolerance": 1e-14, "max_iterations": 300},
        "ratings": {"minimum": 0.0, "maximum": 5.0, "neutral": 2.5},
        "discovery": {"min_predicted": 3.0, "low_rating": 2.0, "min_uplift": 1.5},
        "session": {"default_rank": 2, "cache_size": 4},
    }


@pytest.fixture
def temp_directory():
    """Create temporary directory for testing"""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)
