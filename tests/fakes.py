"""In-memory implementations of the store contracts for tests."""
import asyncio
from typing import Sequence

from feed_ranker.errors import StoreUnavailable
from feed_ranker.schemas import ContentItem, InteractionType


class FakeInteractionStore:
    """Rows are (user_id, content_id, type), appended oldest first."""

    def __init__(self, rows: list[tuple[str, str, InteractionType]] | None = None) -> None:
        self.rows = list(rows or [])

    def like(self, user_id: str, content_id: str) -> None:
        self.rows.append((user_id, content_id, InteractionType.LIKE))

    def add(self, user_id: str, content_id: str, interaction_type: InteractionType) -> None:
        self.rows.append((user_id, content_id, interaction_type))

    def _newest_first(self, interaction_type: InteractionType):
        return [(u, c) for u, c, t in reversed(self.rows) if t == interaction_type]

    async def get_interactions(
        self, user_id: str, interaction_type: InteractionType, limit: int
    ) -> list[str]:
        ids = [c for u, c in self._newest_first(interaction_type) if u == user_id]
        return list(dict.fromkeys(ids))[:limit]

    async def get_interactors_of(
        self,
        content_ids: Sequence[str],
        exclude_user_id: str,
        limit: int,
        interaction_type: InteractionType = InteractionType.LIKE,
    ) -> list[str]:
        wanted = set(content_ids)
        return [
            u
            for u, c in self._newest_first(interaction_type)
            if c in wanted and u != exclude_user_id
        ][:limit]

    async def get_interactions_by_users(
        self,
        user_ids: Sequence[str],
        exclude_content_ids: Sequence[str],
        limit: int,
        interaction_type: InteractionType = InteractionType.LIKE,
    ) -> list[str]:
        users, excluded = set(user_ids), set(exclude_content_ids)
        return [
            c
            for u, c in self._newest_first(interaction_type)
            if u in users and c not in excluded
        ][:limit]

    async def get_liked_among(self, user_id: str, content_ids: Sequence[str]) -> list[str]:
        wanted = set(content_ids)
        liked = [c for u, c in self._newest_first(InteractionType.LIKE) if u == user_id]
        return [c for c in dict.fromkeys(liked) if c in wanted]


class FakeContentCatalog:
    def __init__(
        self, items: list[ContentItem], interactions: FakeInteractionStore
    ) -> None:
        self.items = {item.id: item for item in items}
        self.interactions = interactions

    async def get_recent(self, limit: int) -> list[ContentItem]:
        ordered = sorted(self.items.values(), key=lambda i: i.created_at, reverse=True)
        return ordered[:limit]

    async def get_by_ids(self, content_ids: Sequence[str]) -> list[ContentItem]:
        return [self.items[cid] for cid in content_ids if cid in self.items]

    async def get_authors_of_liked(self, user_id: str, limit: int) -> list[str]:
        liked = [
            c
            for u, c in self.interactions._newest_first(InteractionType.LIKE)
            if u == user_id and c in self.items
        ]
        return [self.items[c].author_id for c in liked[:limit]]

    async def get_recent_by_authors(
        self, author_ids: Sequence[str], limit: int
    ) -> list[ContentItem]:
        authors = set(author_ids)
        recent = await self.get_recent(len(self.items))
        return [i for i in recent if i.author_id in authors][:limit]

    async def get_most_liked(
        self, exclude_author_ids: Sequence[str], limit: int
    ) -> list[ContentItem]:
        excluded = set(exclude_author_ids)
        kept = [i for i in self.items.values() if i.author_id not in excluded]
        kept.sort(key=lambda i: (i.likes_count, i.created_at), reverse=True)
        return kept[:limit]


class FakeSocialGraph:
    def __init__(
        self,
        edges: list[tuple[str, str]] | None = None,
        followers_count: dict[str, int] | None = None,
    ) -> None:
        self.edges = list(edges or [])
        self.followers_count = dict(followers_count or {})

    def follow(self, follower_id: str, followee_id: str) -> None:
        self.edges.append((follower_id, followee_id))

    async def get_following(self, user_id: str) -> list[str]:
        return [b for a, b in self.edges if a == user_id]

    async def get_followers_of_following(
        self, followee_ids: Sequence[str], exclude_ids: Sequence[str], limit: int
    ) -> list[str]:
        sources, excluded = set(followee_ids), set(exclude_ids)
        return [b for a, b in self.edges if a in sources and b not in excluded][:limit]

    async def get_popular_users(self, exclude_ids: Sequence[str], limit: int) -> list[str]:
        excluded = set(exclude_ids)
        ranked = sorted(self.followers_count.items(), key=lambda kv: kv[1], reverse=True)
        return [uid for uid, _ in ranked if uid not in excluded][:limit]


class FailingStore:
    """Stands in for any store; every read raises StoreUnavailable."""

    def __init__(self, name: str = "failing_store") -> None:
        self.name = name

    def __getattr__(self, operation: str):
        async def fail(*args, **kwargs):
            raise StoreUnavailable(self.name, operation)

        return fail


class SlowStore:
    """Delegates to another store after sleeping, to exercise timeouts."""

    def __init__(self, inner, delay: float) -> None:
        self.inner = inner
        self.delay = delay

    def __getattr__(self, operation: str):
        target = getattr(self.inner, operation)

        async def slow(*args, **kwargs):
            await asyncio.sleep(self.delay)
            return await target(*args, **kwargs)

        return slow
