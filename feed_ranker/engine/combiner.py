"""
Score combiner — blends per-strategy candidate lists into one ranking.

  accumulated(id) = Σ score × weights[reason]
  biased(id)      = accumulated / max(max_accumulated, 1) + random() × exploration_bias

Exclusions (already-liked items, the viewer, followed users) are applied here
as one post-filter on top of each strategy's own filtering. Sorting is stable,
so equal scores keep first-seen order. The random term is the only
nondeterminism in the engine.
"""
import logging
from typing import Collection, Sequence

from feed_ranker.config import EngineConfig
from feed_ranker.engine.base import RandomSource, default_random_source
from feed_ranker.schemas import Reason, ScoredCandidate

logger = logging.getLogger(__name__)


class ScoreCombiner:
    def __init__(
        self,
        config: EngineConfig,
        random_source: RandomSource | None = None,
    ) -> None:
        self.config = config
        self.random_source = random_source or default_random_source

    def weight_for(self, reason: Reason) -> float:
        return getattr(self.config.weights, reason.value, 0.0)

    def combine(
        self,
        *lists: Sequence[ScoredCandidate],
        exclude: Collection[str] = (),
    ) -> list[ScoredCandidate]:
        accumulated: dict[str, float] = {}
        for candidates in lists:
            for c in candidates:
                accumulated[c.content_id] = (
                    accumulated.get(c.content_id, 0.0) + c.score * self.weight_for(c.reason)
                )

        excluded = set(exclude)
        dropped = [cid for cid in accumulated if cid in excluded]
        for cid in dropped:
            del accumulated[cid]
        if dropped:
            logger.debug("combiner: dropped %d excluded candidates", len(dropped))

        if not accumulated:
            return []

        max_score = max(max(accumulated.values()), 1.0)
        bias = self.config.exploration_bias
        biased = [
            ScoredCandidate(
                cid,
                score / max_score + self.random_source() * bias,
                Reason.HYBRID,
            )
            for cid, score in accumulated.items()
        ]
        biased.sort(key=lambda c: c.score, reverse=True)
        return biased

    def rank(
        self,
        candidates: Sequence[ScoredCandidate],
        exclude: Collection[str] = (),
    ) -> list[ScoredCandidate]:
        """Exclusion filter and stable descending sort, no blending or bias."""
        excluded = set(exclude)
        kept = [c for c in candidates if c.content_id not in excluded]
        return sorted(kept, key=lambda c: c.score, reverse=True)
