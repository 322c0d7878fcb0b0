"""
SQLAlchemy implementations of the store contracts.

Every query runs in its own short-lived session, bounded by
query_timeout_seconds. Driver errors and timeouts surface as
StoreUnavailable so the scorers can degrade to an empty result.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feed_ranker.config import settings
from feed_ranker.errors import StoreUnavailable
from feed_ranker.models import Follow, Interaction, Post, ShortVideo, User
from feed_ranker.schemas import ContentItem, ContentKind, InteractionType

logger = logging.getLogger(__name__)


def _unique(values) -> list[str]:
    """Deduplicate while keeping first-seen order."""
    return list(dict.fromkeys(values))


def _as_utc(value: datetime) -> datetime:
    # SQLite and some MySQL drivers hand back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _SqlStore:
    name = "sql_store"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout if timeout is not None else settings.query_timeout_seconds

    async def _fetch(self, operation: str, stmt: Select) -> list[Any]:
        try:
            async with self._session_factory() as session:
                result = await asyncio.wait_for(
                    session.execute(stmt), timeout=self._timeout
                )
                return list(result.all())
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            logger.debug("%s.%s failed: %r", self.name, operation, exc)
            raise StoreUnavailable(self.name, operation, exc) from exc


class SqlInteractionStore(_SqlStore):
    name = "interaction_store"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        kind: ContentKind,
        timeout: float | None = None,
    ) -> None:
        super().__init__(session_factory, timeout)
        self.kind = kind

    async def get_interactions(
        self, user_id: str, interaction_type: InteractionType, limit: int
    ) -> list[str]:
        stmt = (
            select(Interaction.content_id)
            .where(
                Interaction.user_id == user_id,
                Interaction.content_kind == self.kind.value,
                Interaction.interaction_type == interaction_type.value,
            )
            .order_by(Interaction.created_at.desc(), Interaction.interaction_id.desc())
            .limit(limit)
        )
        rows = await self._fetch("get_interactions", stmt)
        return _unique(r[0] for r in rows)

    async def get_interactors_of(
        self,
        content_ids: Sequence[str],
        exclude_user_id: str,
        limit: int,
        interaction_type: InteractionType = InteractionType.LIKE,
    ) -> list[str]:
        if not content_ids:
            return []
        stmt = (
            select(Interaction.user_id)
            .where(
                Interaction.content_id.in_(list(content_ids)),
                Interaction.user_id != exclude_user_id,
                Interaction.content_kind == self.kind.value,
                Interaction.interaction_type == interaction_type.value,
            )
            .order_by(Interaction.created_at.desc(), Interaction.interaction_id.desc())
            .limit(limit)
        )
        rows = await self._fetch("get_interactors_of", stmt)
        return [r[0] for r in rows]

    async def get_interactions_by_users(
        self,
        user_ids: Sequence[str],
        exclude_content_ids: Sequence[str],
        limit: int,
        interaction_type: InteractionType = InteractionType.LIKE,
    ) -> list[str]:
        if not user_ids:
            return []
        stmt = select(Interaction.content_id).where(
            Interaction.user_id.in_(list(user_ids)),
            Interaction.content_kind == self.kind.value,
            Interaction.interaction_type == interaction_type.value,
        )
        if exclude_content_ids:
            stmt = stmt.where(Interaction.content_id.not_in(list(exclude_content_ids)))
        stmt = stmt.order_by(
            Interaction.created_at.desc(), Interaction.interaction_id.desc()
        ).limit(limit)
        rows = await self._fetch("get_interactions_by_users", stmt)
        return [r[0] for r in rows]

    async def get_liked_among(
        self, user_id: str, content_ids: Sequence[str]
    ) -> list[str]:
        if not content_ids:
            return []
        stmt = (
            select(Interaction.content_id)
            .where(
                Interaction.user_id == user_id,
                Interaction.content_id.in_(list(content_ids)),
                Interaction.content_kind == self.kind.value,
                Interaction.interaction_type == InteractionType.LIKE.value,
            )
            .distinct()
        )
        rows = await self._fetch("get_liked_among", stmt)
        return [r[0] for r in rows]


class SqlContentCatalog(_SqlStore):
    name = "content_catalog"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        kind: ContentKind,
        timeout: float | None = None,
    ) -> None:
        super().__init__(session_factory, timeout)
        self.kind = kind
        if kind is ContentKind.POST:
            self._model, self._id, self._text = Post, Post.post_id, Post.content
        else:
            self._model, self._id, self._text = (
                ShortVideo,
                ShortVideo.video_id,
                ShortVideo.caption,
            )

    def _select_items(self) -> Select:
        m = self._model
        return select(
            self._id,
            m.user_id,
            m.created_at,
            m.like_count,
            m.comment_count,
            m.view_count,
            self._text,
        )

    @staticmethod
    def _to_items(rows: list[Any]) -> list[ContentItem]:
        return [
            ContentItem(
                id=r[0],
                author_id=r[1],
                created_at=_as_utc(r[2]),
                likes_count=r[3] or 0,
                comments_count=r[4] or 0,
                views_count=r[5] or 0,
                text=r[6] or "",
            )
            for r in rows
        ]

    async def get_recent(self, limit: int) -> list[ContentItem]:
        stmt = self._select_items().order_by(self._model.created_at.desc()).limit(limit)
        return self._to_items(await self._fetch("get_recent", stmt))

    async def get_by_ids(self, content_ids: Sequence[str]) -> list[ContentItem]:
        if not content_ids:
            return []
        stmt = self._select_items().where(self._id.in_(list(content_ids)))
        return self._to_items(await self._fetch("get_by_ids", stmt))

    async def get_authors_of_liked(self, user_id: str, limit: int) -> list[str]:
        stmt = (
            select(self._model.user_id)
            .join(Interaction, Interaction.content_id == self._id)
            .where(
                Interaction.user_id == user_id,
                Interaction.content_kind == self.kind.value,
                Interaction.interaction_type == InteractionType.LIKE.value,
            )
            .order_by(Interaction.created_at.desc())
            .limit(limit)
        )
        rows = await self._fetch("get_authors_of_liked", stmt)
        return [r[0] for r in rows]

    async def get_recent_by_authors(
        self, author_ids: Sequence[str], limit: int
    ) -> list[ContentItem]:
        if not author_ids:
            return []
        stmt = (
            self._select_items()
            .where(self._model.user_id.in_(list(author_ids)))
            .order_by(self._model.created_at.desc())
            .limit(limit)
        )
        return self._to_items(await self._fetch("get_recent_by_authors", stmt))

    async def get_most_liked(
        self, exclude_author_ids: Sequence[str], limit: int
    ) -> list[ContentItem]:
        stmt = self._select_items()
        if exclude_author_ids:
            stmt = stmt.where(self._model.user_id.not_in(list(exclude_author_ids)))
        stmt = stmt.order_by(
            self._model.like_count.desc(), self._model.created_at.desc()
        ).limit(limit)
        return self._to_items(await self._fetch("get_most_liked", stmt))


class SqlSocialGraph(_SqlStore):
    name = "social_graph"

    async def get_following(self, user_id: str) -> list[str]:
        stmt = select(Follow.followee_id).where(Follow.follower_id == user_id)
        rows = await self._fetch("get_following", stmt)
        return [r[0] for r in rows]

    async def get_followers_of_following(
        self, followee_ids: Sequence[str], exclude_ids: Sequence[str], limit: int
    ) -> list[str]:
        if not followee_ids:
            return []
        stmt = select(Follow.followee_id).where(Follow.follower_id.in_(list(followee_ids)))
        if exclude_ids:
            stmt = stmt.where(Follow.followee_id.not_in(list(exclude_ids)))
        stmt = stmt.order_by(Follow.created_at.desc()).limit(limit)
        rows = await self._fetch("get_followers_of_following", stmt)
        return [r[0] for r in rows]

    async def get_popular_users(self, exclude_ids: Sequence[str], limit: int) -> list[str]:
        stmt = select(User.user_id)
        if exclude_ids:
            stmt = stmt.where(User.user_id.not_in(list(exclude_ids)))
        stmt = stmt.order_by(User.followers_count.desc(), User.user_id).limit(limit)
        rows = await self._fetch("get_popular_users", stmt)
        return [r[0] for r in rows]
