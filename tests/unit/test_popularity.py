"""Unit tests for the popularity scorer and freshness decay."""
import asyncio
from datetime import timedelta

import pytest

from feed_ranker.config import EngineConfig, FreshnessBucket, PopularityConfig
from feed_ranker.engine.popularity import PopularityScorer, freshness_score
from feed_ranker.schemas import Reason
from tests.fakes import FailingStore, FakeContentCatalog, FakeInteractionStore
from tests.helpers import FIXED_NOW, fixed_clock, make_item


def _scorer(items, config: EngineConfig | None = None, popularity: PopularityConfig | None = None):
    config = config or EngineConfig()
    catalog = FakeContentCatalog(items, FakeInteractionStore())
    return PopularityScorer(
        catalog, config, popularity or config.post_popularity, clock=fixed_clock
    )


class TestFreshness:
    """Tests for the step-function decay."""

    def test_sampled_ages_are_non_increasing(self, config: EngineConfig) -> None:
        ages = [0, 1, 6, 24, 72, 168, 200]
        scores = [
            freshness_score(a, config.freshness_buckets, config.stale_freshness)
            for a in ages
        ]
        assert scores[0] == 1.0
        assert scores[-1] == 0.1
        assert all(a >= b for a, b in zip(scores, scores[1:]))
        assert scores[1] <= 1.0
        assert scores[2] <= 0.9
        assert scores[3] <= 0.7
        assert scores[4] <= 0.5
        assert scores[5] <= 0.3

    @pytest.mark.parametrize(
        "age_hours,expected",
        [
            (0.5, 1.0),
            (3, 0.9),
            (12, 0.7),
            (48, 0.5),
            (100, 0.3),
            (500, 0.1),
        ],
    )
    def test_bucket_values(self, config: EngineConfig, age_hours: float, expected: float) -> None:
        assert freshness_score(
            age_hours, config.freshness_buckets, config.stale_freshness
        ) == expected

    def test_future_timestamps_count_as_brand_new(self, config: EngineConfig) -> None:
        assert freshness_score(-2, config.freshness_buckets, config.stale_freshness) == 1.0

    def test_buckets_are_sorted_on_load(self) -> None:
        config = EngineConfig(
            freshness_buckets=[
                FreshnessBucket(max_age_hours=24, score=0.5),
                FreshnessBucket(max_age_hours=2, score=1.0),
            ],
            stale_freshness=0.0,
        )
        assert [b.max_age_hours for b in config.freshness_buckets] == [2, 24]
        assert freshness_score(1, config.freshness_buckets, 0.0) == 1.0


class TestPostPopularity:
    """Tests for the post engagement formula."""

    def test_combined_formula(self) -> None:
        scorer = _scorer([])
        item = make_item("p1", age_hours=3, likes=10, comments=5)
        # engagement = 10 + 5*2 = 20; freshness = 0.9
        expected = 20 * 0.7 + 0.9 * 100 * 0.3
        assert scorer.score_item(item, FIXED_NOW) == pytest.approx(expected)

    def test_freshness_dominates_low_engagement(self) -> None:
        scorer = _scorer([])
        new = make_item("new", age_hours=0.5, likes=5)
        old = make_item("old", age_hours=300, likes=30)
        assert scorer.score_item(new, FIXED_NOW) > scorer.score_item(old, FIXED_NOW)

    def test_engagement_dominates_at_scale(self) -> None:
        scorer = _scorer([])
        new = make_item("new", age_hours=0.5, likes=5)
        viral = make_item("viral", age_hours=300, likes=500)
        assert scorer.score_item(viral, FIXED_NOW) > scorer.score_item(new, FIXED_NOW)

    def test_views_ignored_for_posts(self) -> None:
        scorer = _scorer([])
        a = make_item("a", views=0)
        b = make_item("b", views=10_000)
        assert scorer.score_item(a, FIXED_NOW) == scorer.score_item(b, FIXED_NOW)

    def test_freshness_scale_is_configurable(self) -> None:
        popularity = PopularityConfig(freshness_scale=0.0)
        scorer = _scorer([], popularity=popularity)
        item = make_item("p", age_hours=0.1, likes=10)
        assert scorer.score_item(item, FIXED_NOW) == pytest.approx(7.0)


class TestVideoPopularity:
    """Videos weight views instead of comments."""

    def test_views_weighted_comments_ignored(self, config: EngineConfig) -> None:
        scorer = _scorer([], config, config.video_popularity)
        item = make_item("v", age_hours=300, likes=10, comments=50, views=1000)
        # engagement = 10*2 + 1000*0.1 = 120
        expected = 120 * 0.7 + 0.1 * 100 * 0.3
        assert scorer.score_item(item, FIXED_NOW) == pytest.approx(expected)


class TestScore:
    """Tests for the async score() contract."""

    def test_scores_recent_window(self) -> None:
        items = [make_item(f"p{i}", age_hours=i) for i in range(60)]
        scored = asyncio.run(_scorer(items).score())
        assert len(scored) == 50
        assert all(c.reason is Reason.POPULARITY for c in scored)
        assert all(c.score >= 0 for c in scored)
        # Newest 50 only
        assert "p59" not in {c.content_id for c in scored}

    def test_store_failure_returns_empty(self, config: EngineConfig) -> None:
        scorer = PopularityScorer(FailingStore(), config, config.post_popularity)
        assert asyncio.run(scorer.score()) == []

    def test_uses_injected_clock(self) -> None:
        item = make_item("p", age_hours=0)
        scorer = _scorer([item])
        scorer.clock = lambda: FIXED_NOW + timedelta(days=30)
        [scored] = asyncio.run(scorer.score())
        assert scored.score == pytest.approx(0.1 * 100 * 0.3)
