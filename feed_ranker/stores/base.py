"""
Read-only contracts the engine consumes.

Each store is bound to a single ContentKind where that matters, so the same
scorers serve both the post feed and the short-video feed.
"""
from typing import Protocol, Sequence

from feed_ranker.schemas import ContentItem, InteractionType


class InteractionStore(Protocol):
    async def get_interactions(
        self, user_id: str, interaction_type: InteractionType, limit: int
    ) -> list[str]:
        """Content ids the user engaged with, most recent first."""
        ...

    async def get_interactors_of(
        self,
        content_ids: Sequence[str],
        exclude_user_id: str,
        limit: int,
        interaction_type: InteractionType = InteractionType.LIKE,
    ) -> list[str]:
        """User ids who engaged with any of content_ids (may repeat)."""
        ...

    async def get_interactions_by_users(
        self,
        user_ids: Sequence[str],
        exclude_content_ids: Sequence[str],
        limit: int,
        interaction_type: InteractionType = InteractionType.LIKE,
    ) -> list[str]:
        """One content id per matching interaction row, so ids repeat."""
        ...

    async def get_liked_among(
        self, user_id: str, content_ids: Sequence[str]
    ) -> list[str]:
        """The subset of content_ids the user has ever liked, no recency cap."""
        ...


class ContentCatalog(Protocol):
    async def get_recent(self, limit: int) -> list[ContentItem]:
        ...

    async def get_by_ids(self, content_ids: Sequence[str]) -> list[ContentItem]:
        ...

    async def get_authors_of_liked(self, user_id: str, limit: int) -> list[str]:
        """Author of each item the user liked, one entry per like."""
        ...

    async def get_recent_by_authors(
        self, author_ids: Sequence[str], limit: int
    ) -> list[ContentItem]:
        ...

    async def get_most_liked(
        self, exclude_author_ids: Sequence[str], limit: int
    ) -> list[ContentItem]:
        ...


class SocialGraph(Protocol):
    async def get_following(self, user_id: str) -> list[str]:
        ...

    async def get_followers_of_following(
        self, followee_ids: Sequence[str], exclude_ids: Sequence[str], limit: int
    ) -> list[str]:
        """Users followed by any of followee_ids, one entry per edge."""
        ...

    async def get_popular_users(self, exclude_ids: Sequence[str], limit: int) -> list[str]:
        ...
