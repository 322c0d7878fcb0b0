"""Deterministic builders shared by the test modules."""
from datetime import datetime, timedelta, timezone

from feed_ranker.config import EngineConfig
from feed_ranker.engine.service import ContentSources, RankingService
from feed_ranker.schemas import ContentItem
from tests.fakes import FakeContentCatalog, FakeInteractionStore, FakeSocialGraph

# Fixed timestamp so freshness buckets are deterministic
FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def zero_random() -> float:
    return 0.0


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_item(
    item_id: str,
    author_id: str = "author",
    age_hours: float = 200,
    likes: int = 0,
    comments: int = 0,
    views: int = 0,
    text: str = "",
) -> ContentItem:
    return ContentItem(
        id=item_id,
        author_id=author_id,
        created_at=FIXED_NOW - timedelta(hours=age_hours),
        likes_count=likes,
        comments_count=comments,
        views_count=views,
        text=text,
    )


def make_service(
    post_interactions=None,
    post_catalog=None,
    video_interactions=None,
    video_catalog=None,
    graph=None,
    config: EngineConfig | None = None,
    random_source=zero_random,
) -> RankingService:
    post_interactions = post_interactions or FakeInteractionStore()
    video_interactions = video_interactions or FakeInteractionStore()
    return RankingService(
        posts=ContentSources(
            post_interactions,
            post_catalog or FakeContentCatalog([], post_interactions),
        ),
        videos=ContentSources(
            video_interactions,
            video_catalog or FakeContentCatalog([], video_interactions),
        ),
        graph=graph or FakeSocialGraph(),
        config=config or EngineConfig(),
        random_source=random_source,
        clock=fixed_clock,
    )
