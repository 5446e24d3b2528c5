"""
Unit tests for decomposition diagnostics
"""

import numpy as np
import pytest

from svdrec.core.svd import SVDResult
from svdrec.recommender.diagnostics import latent_coordinates, singular_value_energy, to_frame


class TestSingularValueEnergy:
    """Test energy shares of singular values"""

    def test_energy_shares(self):
        profile = singular_value_energy([4.0, 3.0], active_k=1)

        assert [bar.pct for bar in profile.bars] == pytest.approx([64.0, 36.0])
        assert profile.cumulative_pcts == pytest.approx([64.0, 100.0])
        assert [bar.height_frac for bar in profile.bars] == pytest.approx([1.0, 0.75])
        assert [bar.active for bar in profile.bars] == [True, False]
        assert profile.energy_captured == pytest.approx(64.0)

    def test_active_rank_beyond_values(self):
        assert singular_value_energy([4.0, 3.0], active_k=5).energy_captured == 100.0

    def test_non_positive_active_rank(self):
        assert singular_value_energy([4.0, 3.0], active_k=0).energy_captured == 0.0

    def test_no_singular_values(self):
        profile = singular_value_energy([], active_k=3)

        assert profile.bars == []
        assert profile.cumulative_pcts == []
        assert profile.energy_captured == 0.0


class TestLatentCoordinates:
    """Test 2-D user and item embeddings"""

    def test_two_axes(self):
        svd = SVDResult(U=[[1.0, 0.0], [0.0, 1.0], [0.0, 0.0]], S=[3.0, 2.0], Vt=[[1.0, 0.0], [0.0, 1.0]])

        users, items = latent_coordinates(svd)

        np.testing.assert_array_equal(users, [[3.0, 0.0], [0.0, 2.0], [0.0, 0.0]])
        np.testing.assert_array_equal(items, [[3.0, 0.0], [0.0, 2.0]])

    def test_single_axis(self):
        svd = SVDResult(U=[[1.0], [0.0]], S=[2.0], Vt=[[0.6, 0.8]])

        users, items = latent_coordinates(svd)

        np.testing.assert_allclose(users, [[2.0, 0.0], [0.0, 0.0]])
        np.testing.assert_allclose(items, [[1.2, 0.0], [1.6, 0.0]])

    def test_empty(self):
        users, items = latent_coordinates(SVDResult.empty(3, 4))

        assert users.shape == (0, 2)
        assert items.shape == (0, 2)


class TestToFrame:
    def test_labels(self):
        frame = to_frame([[1, 2], [3, 4]], users=["a", "b"], items=["x", "y"])

        assert list(frame.index) == ["a", "b"]
        assert list(frame.columns) == ["x", "y"]
        assert frame.loc["b", "x"] == 3.0
