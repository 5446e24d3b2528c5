"""
Unit tests for the interactive rating session
"""

import numpy as np
import pytest

from svdrec.config import RatingScale, Settings
from svdrec.recommender.session import INITIAL_RATINGS, MOVIES, USERS, RatingSession
from svdrec.utils.cache import DecompositionCache


class TestRatingSession:
    """Test edits, rank changes and derived views"""

    @pytest.fixture
    def session(self):
        return RatingSession()

    def test_defaults(self, session):
        assert session.ratings.shape == (6, 8)
        assert session.k == 3
        assert session.max_rank == 6
        assert session.users == USERS
        assert session.items == MOVIES

    def test_set_rank_is_clamped(self, session):
        assert session.set_rank(10) == 6
        assert session.set_rank(0) == 1
        assert session.k == 1

    def test_prediction_within_scale(self, session):
        predicted = session.prediction.predicted

        assert predicted.shape == (6, 8)
        assert predicted.min() >= 0.0
        assert predicted.max() <= 5.0
        assert session.prediction.k == 3

    def test_rank_change_reuses_decomposition(self, session):
        """Test changing k does not recompute the SVD"""
        first = session.prediction
        session.set_rank(2)
        second = session.prediction

        assert second.svd is first.svd
        assert second.k == 2
        assert session.cache.misses == 1
        assert session.cache.hits == 1

    def test_rating_edit_recomputes(self, session):
        before = session.prediction
        session.set_rating(0, 3, 5)
        after = session.prediction

        assert after is not before
        assert session.ratings[0, 3] == 5
        assert session.cache.misses == 2

    def test_clear_rating(self, session):
        session.clear_rating(0, 0)

        assert session.ratings[0, 0] == 0
        assert session.rated_counts()[0] == 6

    def test_invalid_edits(self, session):
        with pytest.raises(ValueError):
            session.set_rating(0, 0, 6)
        with pytest.raises(IndexError):
            session.set_rating(6, 0, 3)
        with pytest.raises(IndexError):
            session.set_rating(0, -1, 3)

    def test_ratings_view_is_read_only(self, session):
        with pytest.raises(ValueError):
            session.ratings[0, 0] = 3

    def test_reset(self, session):
        session.set_rating(1, 1, 5)
        session.set_rank(5)
        session.reset()

        np.testing.assert_array_equal(session.ratings, INITIAL_RATINGS)
        assert session.k == 3

    def test_recommendations(self, session):
        results = session.recommendations(top_n=3)

        assert len(results) == 6
        assert all(len(user_scores) == 3 for user_scores in results)

    def test_energy(self, session):
        profile = session.energy()

        assert len(profile.bars) == session.prediction.svd.rank
        assert sum(bar.active for bar in profile.bars) == 3
        assert 0.0 < profile.energy_captured <= 100.0

    def test_latent_space(self, session):
        users, items = session.latent_space()

        assert list(users.index) == USERS
        assert list(items.index) == MOVIES
        assert list(users.columns) == ["x", "y"]

    def test_frames(self, session):
        assert session.predicted_frame().shape == (6, 8)
        assert session.ratings_frame().loc["Madox", "The Matrix"] == 5

    def test_fallback_on_failure(self, session, monkeypatch):
        """Test a failing prediction degrades to neutral imputation"""

        def broken(*args, **kwargs):
            raise ValueError("boom")

        monkeypatch.setattr("svdrec.recommender.session.predict_ratings", broken)

        predicted = session.prediction.predicted
        assert predicted[0, 3] == 2.5
        assert predicted[0, 0] == 5
        assert session.prediction.svd.rank == 0

    def test_custom_matrix(self):
        session = RatingSession([[5, 0], [0, 4], [3, 3]], settings=Settings(default_rank=5))

        assert session.users == ["user_0", "user_1", "user_2"]
        assert session.items == ["item_0", "item_1"]
        assert session.k == 2

    def test_label_mismatch(self):
        with pytest.raises(ValueError):
            RatingSession([[1, 2]], users=["a", "b"])

    def test_out_of_scale_ratings(self):
        with pytest.raises(ValueError):
            RatingSession([[1, 7]])

    def test_shared_cache(self):
        """Test an empty cache handed in is used, not replaced"""
        shared = DecompositionCache(max_entries=8)
        session = RatingSession(cache=shared)
        session.prediction

        assert session.cache is shared
        assert shared.misses == 1
        assert len(shared) == 1

        other = RatingSession(cache=shared)
        assert other.prediction.svd is session.prediction.svd
        assert shared.hits >= 1

    def test_discoveries_follow_scale_minimum(self):
        """Test items at the scale minimum count as unrated"""
        scale = RatingScale(minimum=1.0, maximum=5.0, neutral=3.0)
        session = RatingSession(
            [[1, 4, 5], [5, 1, 4], [4, 5, 1]], settings=Settings(ratings=scale)
        )

        for user_scores in session.recommendations():
            for score in user_scores:
                if score.original_rating == 1.0:
                    assert score.is_discovery == (score.predicted_rating >= 3.0)
