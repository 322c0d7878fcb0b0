from feed_ranker.engine.combiner import ScoreCombiner
from feed_ranker.engine.service import ContentSources, RankingService

__all__ = ["ContentSources", "RankingService", "ScoreCombiner"]
