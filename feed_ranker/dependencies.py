"""Wiring between the SQL stores, the engine and FastAPI request handlers."""
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feed_ranker.config import EngineConfig, settings
from feed_ranker.engine.base import RandomSource
from feed_ranker.engine.service import ContentSources, RankingService
from feed_ranker.schemas import ContentKind
from feed_ranker.stores.sql import SqlContentCatalog, SqlInteractionStore, SqlSocialGraph


def build_ranking_service(
    session_factory: async_sessionmaker[AsyncSession],
    config: EngineConfig | None = None,
    random_source: RandomSource | None = None,
    query_timeout: float | None = None,
) -> RankingService:
    """Bind the SQL adapters to the engine; query_timeout defaults to settings."""

    def sources(kind: ContentKind) -> ContentSources:
        return ContentSources(
            interactions=SqlInteractionStore(session_factory, kind, query_timeout),
            catalog=SqlContentCatalog(session_factory, kind, query_timeout),
        )

    return RankingService(
        posts=sources(ContentKind.POST),
        videos=sources(ContentKind.VIDEO),
        graph=SqlSocialGraph(session_factory, query_timeout),
        config=config or settings.engine,
        random_source=random_source,
    )


def get_ranking_service(request: Request) -> RankingService:
    """FastAPI dependency; the service is created in the app lifespan."""
    return request.app.state.ranking_service
