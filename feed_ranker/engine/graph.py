"""
People recommendations from the follow graph.

Each second-degree path (viewer → followee → candidate) adds 1 to the
candidate's tally; each post the viewer liked adds liked_author_bonus to its
author. Already-followed users and the viewer are never candidates.
"""
import asyncio
import logging

from feed_ranker.config import EngineConfig
from feed_ranker.engine.base import Strategy, guarded
from feed_ranker.schemas import Reason, ScoredCandidate
from feed_ranker.stores.base import ContentCatalog, SocialGraph

logger = logging.getLogger(__name__)


class GraphScorer(Strategy):
    name = "graph"

    def __init__(
        self,
        graph: SocialGraph,
        catalog: ContentCatalog,
        config: EngineConfig,
    ) -> None:
        super().__init__(config)
        self.graph = graph
        self.catalog = catalog

    async def score(self, viewer_id: str, limit: int) -> list[ScoredCandidate]:
        return await self._guarded(self._compute(viewer_id, limit))

    async def score_popular(
        self, exclude_ids: list[str], limit: int
    ) -> list[ScoredCandidate]:
        """Cold-start fallback: most followed users, in store order."""
        return await guarded(
            "popular_users",
            self._popular(exclude_ids, limit),
            self.config.strategy_timeout_seconds,
        )

    async def _second_degree(
        self, following: list[str], excluded: set[str], cap: int
    ) -> list[str]:
        if not following:
            return []
        return await self.graph.get_followers_of_following(
            following, sorted(excluded), cap
        )

    async def _compute(self, viewer_id: str, limit: int) -> list[ScoredCandidate]:
        cfg = self.config

        following = await self.graph.get_following(viewer_id)
        excluded = set(following) | {viewer_id}

        second_degree, liked_authors = await asyncio.gather(
            self._second_degree(following, excluded, cfg.second_degree_factor * limit),
            self.catalog.get_authors_of_liked(viewer_id, cfg.liked_authors_limit),
        )

        tally: dict[str, float] = {}
        for user_id in second_degree:
            if user_id in excluded:
                continue
            tally[user_id] = tally.get(user_id, 0.0) + 1.0

        for author_id in liked_authors:
            if author_id in excluded:
                continue
            tally[author_id] = tally.get(author_id, 0.0) + cfg.liked_author_bonus

        ranked = sorted(tally.items(), key=lambda kv: kv[1], reverse=True)
        return [ScoredCandidate(uid, score, Reason.GRAPH) for uid, score in ranked]

    async def _popular(self, exclude_ids: list[str], limit: int) -> list[ScoredCandidate]:
        users = await self.graph.get_popular_users(exclude_ids, limit)
        return [ScoredCandidate(uid, 0.0, Reason.POPULARITY) for uid in users]
