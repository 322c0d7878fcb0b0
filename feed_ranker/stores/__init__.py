from feed_ranker.stores.base import ContentCatalog, InteractionStore, SocialGraph
from feed_ranker.stores.sql import SqlContentCatalog, SqlInteractionStore, SqlSocialGraph

__all__ = [
    "ContentCatalog",
    "InteractionStore",
    "SocialGraph",
    "SqlContentCatalog",
    "SqlInteractionStore",
    "SqlSocialGraph",
]
