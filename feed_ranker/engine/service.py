"""
Ranking service — the public entry point of the engine.

  get_recommended_posts   collaborative + content-based + popularity → combiner
  get_recommended_videos  same shape over the video stores and weights
  get_recommended_users   graph scorer, popular-users fallback on cold start
  get_trending            popularity only; the anonymous path
  get_for_you_feed        followed authors' newest posts + trending, shuffled

Strategies for one call run concurrently and are joined before the cheap,
synchronous combine step. A failing strategy contributes nothing; if every
strategy comes back empty the caller gets [] rather than an error.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable

from opentelemetry import trace

from feed_ranker.config import EngineConfig, PopularityConfig
from feed_ranker.engine.base import (
    Clock,
    RandomSource,
    default_random_source,
    guarded_read,
)
from feed_ranker.engine.collaborative import CollaborativeScorer
from feed_ranker.engine.combiner import ScoreCombiner
from feed_ranker.engine.content_based import ContentBasedScorer
from feed_ranker.engine.graph import GraphScorer
from feed_ranker.engine.popularity import PopularityScorer
from feed_ranker.schemas import ContentItem, ContentKind
from feed_ranker.stores.base import ContentCatalog, InteractionStore, SocialGraph
from feed_ranker.telemetry import EMPTY_RECOMMENDATIONS_TOTAL, RECOMMENDATION_LATENCY

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class ContentSources:
    """Stores bound to one content kind."""
    interactions: InteractionStore
    catalog: ContentCatalog


@dataclass
class _ContentScorers:
    collaborative: CollaborativeScorer
    content_based: ContentBasedScorer
    popularity: PopularityScorer


class RankingService:
    def __init__(
        self,
        posts: ContentSources,
        videos: ContentSources,
        graph: SocialGraph,
        config: EngineConfig | None = None,
        random_source: RandomSource | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.random_source = random_source or default_random_source
        self.sources = {ContentKind.POST: posts, ContentKind.VIDEO: videos}
        self.graph = graph

        self.combiner = ScoreCombiner(self.config, self.random_source)
        self._scorers = {
            ContentKind.POST: self._build_scorers(posts, self.config.post_popularity, clock),
            ContentKind.VIDEO: self._build_scorers(videos, self.config.video_popularity, clock),
        }
        self.graph_scorer = GraphScorer(graph, posts.catalog, self.config)

    def _build_scorers(
        self,
        sources: ContentSources,
        popularity: PopularityConfig,
        clock: Clock | None,
    ) -> _ContentScorers:
        return _ContentScorers(
            collaborative=CollaborativeScorer(sources.interactions, self.config),
            content_based=ContentBasedScorer(
                sources.interactions, sources.catalog, self.config
            ),
            popularity=PopularityScorer(sources.catalog, self.config, popularity, clock),
        )

    # ── Public entry points ──────────────────────────────────────────────

    async def get_recommended_posts(self, viewer_id: str, limit: int = 20) -> list[str]:
        if not viewer_id or limit <= 0:
            logger.debug("posts: rejected viewer=%r limit=%d", viewer_id, limit)
            return []
        return await self._run("posts", self._recommend_content(ContentKind.POST, viewer_id, limit))

    async def get_recommended_videos(self, viewer_id: str, limit: int = 20) -> list[str]:
        if not viewer_id or limit <= 0:
            logger.debug("videos: rejected viewer=%r limit=%d", viewer_id, limit)
            return []
        return await self._run("videos", self._recommend_content(ContentKind.VIDEO, viewer_id, limit))

    async def get_recommended_users(self, viewer_id: str, limit: int = 10) -> list[str]:
        if not viewer_id or limit <= 0:
            logger.debug("users: rejected viewer=%r limit=%d", viewer_id, limit)
            return []
        return await self._run("users", self._recommend_users(viewer_id, limit))

    async def get_trending(
        self, kind: ContentKind = ContentKind.POST, limit: int = 20
    ) -> list[str]:
        if limit <= 0:
            return []
        return await self._run("trending", self._trending(kind, limit))

    async def get_for_you_feed(self, viewer_id: str, limit: int = 30) -> list[str]:
        if limit <= 0:
            return []
        return await self._run("for_you", self._for_you(viewer_id, limit))

    # ── Orchestration ────────────────────────────────────────────────────

    async def _run(self, label: str, work: Awaitable[list[str]]) -> list[str]:
        start = time.perf_counter()
        with tracer.start_as_current_span(f"recommend.{label}") as span:
            try:
                ids = await work
            except Exception as exc:
                logger.error(
                    "%s recommendations failed: %r — returning empty list", label, exc
                )
                ids = []

            latency = time.perf_counter() - start
            RECOMMENDATION_LATENCY.labels(kind=label).observe(latency)
            span.set_attribute("recommendations.count", len(ids))
            if not ids:
                EMPTY_RECOMMENDATIONS_TOTAL.labels(kind=label).inc()
            logger.info(
                "%s: %d recommendations in %.1fms", label, len(ids), latency * 1000
            )
            return ids

    def _read(self, operation: str, work: Awaitable[list]) -> Awaitable[list]:
        return guarded_read(operation, work, self.config.strategy_timeout_seconds)

    async def _recommend_content(
        self, kind: ContentKind, viewer_id: str, limit: int
    ) -> list[str]:
        sources = self.sources[kind]
        scorers = self._scorers[kind]

        collaborative, content_based, popular = await asyncio.gather(
            scorers.collaborative.score(viewer_id),
            scorers.content_based.score(viewer_id),
            scorers.popularity.score(),
        )

        # Exclusion is checked against the actual candidates, whatever their age
        candidate_ids = list(
            dict.fromkeys(c.content_id for c in [*collaborative, *content_based, *popular])
        )
        liked = await self._read(
            "liked_among", sources.interactions.get_liked_among(viewer_id, candidate_ids)
        )

        ranked = self.combiner.combine(
            collaborative, content_based, popular, exclude=liked
        )
        return [c.content_id for c in ranked[:limit]]

    async def _recommend_users(self, viewer_id: str, limit: int) -> list[str]:
        following, candidates = await asyncio.gather(
            self._read("following", self.graph.get_following(viewer_id)),
            self.graph_scorer.score(viewer_id, limit),
        )
        exclude = set(following) | {viewer_id}

        ranked = self.combiner.rank(candidates, exclude)
        if not ranked:
            logger.debug("users: no graph candidates for %s, using popular users", viewer_id)
            popular = await self.graph_scorer.score_popular(sorted(exclude), limit)
            ranked = self.combiner.rank(popular, exclude)
        return [c.content_id for c in ranked[:limit]]

    async def _trending(self, kind: ContentKind, limit: int) -> list[str]:
        popular = await self._scorers[kind].popularity.score()
        return [c.content_id for c in self.combiner.rank(popular)[:limit]]

    async def _for_you(self, viewer_id: str, limit: int) -> list[str]:
        catalog = self.sources[ContentKind.POST].catalog

        if not viewer_id:
            trending = await self._read("trending_posts", catalog.get_most_liked([], limit))
            return [item.id for item in trending][:limit]

        following = await self._read("following", self.graph.get_following(viewer_id))
        following_n = int(limit * self.config.following_share)
        trending_n = limit - following_n

        followed_posts, trending_posts = await asyncio.gather(
            self._followed_posts(catalog, following, following_n),
            self._trending_posts(catalog, [*following, viewer_id], trending_n),
        )

        ids = list(dict.fromkeys(item.id for item in [*followed_posts, *trending_posts]))
        self._shuffle(ids)
        return ids[:limit]

    async def _followed_posts(
        self, catalog: ContentCatalog, following: list[str], n: int
    ) -> list[ContentItem]:
        if not following or n <= 0:
            return []
        return await self._read("following_posts", catalog.get_recent_by_authors(following, n))

    async def _trending_posts(
        self, catalog: ContentCatalog, exclude_authors: list[str], n: int
    ) -> list[ContentItem]:
        if n <= 0:
            return []
        return await self._read("trending_posts", catalog.get_most_liked(exclude_authors, n))

    def _shuffle(self, ids: list[str]) -> None:
        """In-place Fisher–Yates driven by the injected random source."""
        for i in range(len(ids) - 1, 0, -1):
            j = min(int(self.random_source() * (i + 1)), i)
            ids[i], ids[j] = ids[j], ids[i]
