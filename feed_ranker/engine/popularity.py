"""
Global popularity with a step-function freshness decay.

  engagement = likes*like_weight + comments*comment_weight + views*view_weight
  combined   = engagement*engagement_weight
             + freshness*freshness_scale*freshness_weight

With the default scale of 100, freshness dominates for new content with few
interactions and engagement takes over once counts grow.
"""
import logging
from datetime import datetime
from typing import Sequence

from feed_ranker.config import EngineConfig, FreshnessBucket, PopularityConfig
from feed_ranker.engine.base import Clock, Strategy, utc_now
from feed_ranker.schemas import ContentItem, Reason, ScoredCandidate
from feed_ranker.stores.base import ContentCatalog

logger = logging.getLogger(__name__)


def freshness_score(
    age_hours: float,
    buckets: Sequence[FreshnessBucket],
    stale: float,
) -> float:
    """Score of the first bucket whose max_age_hours exceeds the age."""
    for bucket in buckets:
        if age_hours < bucket.max_age_hours:
            return bucket.score
    return stale


class PopularityScorer(Strategy):
    name = "popularity"

    def __init__(
        self,
        catalog: ContentCatalog,
        config: EngineConfig,
        popularity: PopularityConfig,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(config)
        self.catalog = catalog
        self.popularity = popularity
        self.clock = clock or utc_now

    async def score(self) -> list[ScoredCandidate]:
        return await self._guarded(self._compute())

    async def _compute(self) -> list[ScoredCandidate]:
        items = await self.catalog.get_recent(self.popularity.window)
        now = self.clock()
        return [
            ScoredCandidate(item.id, self.score_item(item, now), Reason.POPULARITY)
            for item in items
        ]

    def freshness(self, created_at: datetime, now: datetime) -> float:
        age_hours = (now - created_at).total_seconds() / 3600
        return freshness_score(
            age_hours, self.config.freshness_buckets, self.config.stale_freshness
        )

    def score_item(self, item: ContentItem, now: datetime) -> float:
        p = self.popularity
        engagement = (
            item.likes_count * p.like_weight
            + item.comments_count * p.comment_weight
            + item.views_count * p.view_weight
        )
        freshness = self.freshness(item.created_at, now)
        return (
            engagement * p.engagement_weight
            + freshness * p.freshness_scale * p.freshness_weight
        )
