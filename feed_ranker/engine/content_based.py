"""
Content-based filtering via bag-of-words overlap.

The viewer's profile is the set of lowercase words longer than
min_word_length taken from the text of their recently liked items. A
candidate scores (number of its words found in the profile) / profile size.
No TF-IDF or embeddings: cheap and easy to explain.
"""
import asyncio
import logging

from feed_ranker.config import EngineConfig
from feed_ranker.engine.base import Strategy
from feed_ranker.schemas import InteractionType, Reason, ScoredCandidate
from feed_ranker.stores.base import ContentCatalog, InteractionStore

logger = logging.getLogger(__name__)


def extract_keywords(text: str, min_word_length: int) -> set[str]:
    return {w for w in text.lower().split() if len(w) > min_word_length}


class ContentBasedScorer(Strategy):
    name = "content_based"

    def __init__(
        self,
        interactions: InteractionStore,
        catalog: ContentCatalog,
        config: EngineConfig,
    ) -> None:
        super().__init__(config)
        self.interactions = interactions
        self.catalog = catalog

    async def score(self, viewer_id: str) -> list[ScoredCandidate]:
        return await self._guarded(self._compute(viewer_id))

    async def _compute(self, viewer_id: str) -> list[ScoredCandidate]:
        cfg = self.config

        liked = await self.interactions.get_interactions(
            viewer_id, InteractionType.LIKE, cfg.profile_size
        )
        if not liked:
            logger.debug("content_based: no likes for %s (cold start)", viewer_id)
            return []

        liked_items, recent = await asyncio.gather(
            self.catalog.get_by_ids(liked),
            self.catalog.get_recent(cfg.content_window),
        )

        profile: set[str] = set()
        for item in liked_items:
            profile |= extract_keywords(item.text, cfg.min_word_length)
        if not profile:
            logger.debug("content_based: empty keyword profile for %s", viewer_id)
            return []

        already_liked = set(liked)
        scored: list[ScoredCandidate] = []
        for item in recent:
            if item.id in already_liked:
                continue
            matches = sum(1 for w in item.text.lower().split() if w in profile)
            if matches > 0:
                scored.append(
                    ScoredCandidate(item.id, matches / len(profile), Reason.CONTENT_BASED)
                )
        return scored
