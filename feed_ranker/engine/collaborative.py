"""
Collaborative filtering: "people who liked what you liked also liked X".

  1. the viewer's most recent likes          (capped at profile_size)
  2. other users who liked any of them       (capped at similar_users_limit)
  3. their likes on items the viewer has not (capped at candidates limit)
  4. score = occurrences / number of similar users

Every co-like counts as one occurrence unless collaborative_weighted is on,
in which case it counts interaction_weights["like"].
"""
import logging

from feed_ranker.config import EngineConfig
from feed_ranker.engine.base import Strategy
from feed_ranker.schemas import InteractionType, Reason, ScoredCandidate
from feed_ranker.stores.base import InteractionStore

logger = logging.getLogger(__name__)


class CollaborativeScorer(Strategy):
    name = "collaborative"

    def __init__(self, interactions: InteractionStore, config: EngineConfig) -> None:
        super().__init__(config)
        self.interactions = interactions

    async def score(self, viewer_id: str) -> list[ScoredCandidate]:
        return await self._guarded(self._compute(viewer_id))

    async def _compute(self, viewer_id: str) -> list[ScoredCandidate]:
        cfg = self.config

        liked = await self.interactions.get_interactions(
            viewer_id, InteractionType.LIKE, cfg.profile_size
        )
        if not liked:
            logger.debug("collaborative: no likes for %s (cold start)", viewer_id)
            return []

        interactors = await self.interactions.get_interactors_of(
            liked, viewer_id, cfg.similar_users_limit
        )
        similar_users = [u for u in dict.fromkeys(interactors) if u != viewer_id]
        if not similar_users:
            logger.debug("collaborative: no similar users for %s", viewer_id)
            return []

        co_liked = await self.interactions.get_interactions_by_users(
            similar_users, liked, cfg.collaborative_candidates_limit
        )

        occurrence = 1.0
        if cfg.collaborative_weighted:
            occurrence = cfg.interaction_weights.get(InteractionType.LIKE.value, 1.0)

        already_liked = set(liked)
        tally: dict[str, float] = {}
        for content_id in co_liked:
            if content_id in already_liked:
                continue
            tally[content_id] = tally.get(content_id, 0.0) + occurrence

        n_similar = len(similar_users)
        return [
            ScoredCandidate(content_id, count / n_similar, Reason.COLLABORATIVE)
            for content_id, count in tally.items()
        ]
