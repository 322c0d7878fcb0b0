"""
Pydantic and dataclass types shared by the stores, the engine and the API.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


# ──────────────────────────── Enums ───────────────────────────────────────

class ContentKind(str, Enum):
    POST = "post"
    VIDEO = "video"


class InteractionType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    SHARE = "share"
    SAVE = "save"
    VIEW = "view"


class Reason(str, Enum):
    COLLABORATIVE = "collaborative"
    CONTENT_BASED = "content_based"
    POPULARITY = "popularity"
    GRAPH = "graph"
    HYBRID = "hybrid"


# ──────────────────────────── Catalog ─────────────────────────────────────

class ContentItem(BaseModel):
    """Read-only snapshot of a post or short video at query time."""
    id: str
    author_id: str
    created_at: datetime
    likes_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    text: str = ""


# ──────────────────────────── Engine ──────────────────────────────────────

@dataclass(frozen=True)
class ScoredCandidate:
    """Lives for one ranking call only."""
    content_id: str
    score: float
    reason: Reason


# ──────────────────────────── API ─────────────────────────────────────────

class RecommendationResponse(BaseModel):
    recommendations: list[str]
