"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.

Ranking tunables live in EngineConfig and are handed to the engine at
construction time. Nested values use a double underscore in the environment:

  ENGINE__WEIGHTS__COLLABORATIVE=0.5
  ENGINE__POST_POPULARITY__FRESHNESS_SCALE=50
"""
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StrategyWeights(BaseModel):
    """Blend weights applied by the score combiner, keyed by reason."""
    collaborative: float = 0.4
    content_based: float = 0.4
    popularity: float = 0.2


class FreshnessBucket(BaseModel):
    max_age_hours: float
    score: float


def _default_buckets() -> list[FreshnessBucket]:
    return [
        FreshnessBucket(max_age_hours=1, score=1.0),
        FreshnessBucket(max_age_hours=6, score=0.9),
        FreshnessBucket(max_age_hours=24, score=0.7),
        FreshnessBucket(max_age_hours=72, score=0.5),
        FreshnessBucket(max_age_hours=168, score=0.3),
    ]


class PopularityConfig(BaseModel):
    """
    engagement = likes*like_weight + comments*comment_weight + views*view_weight
    combined   = engagement*engagement_weight
               + freshness*freshness_scale*freshness_weight
    """
    like_weight: float = 1.0
    comment_weight: float = 2.0
    view_weight: float = 0.0
    engagement_weight: float = 0.7
    freshness_weight: float = 0.3
    # Lets freshness dominate while engagement counts are small.
    freshness_scale: float = 100.0
    window: int = 50


class EngineConfig(BaseModel):
    weights: StrategyWeights = Field(default_factory=StrategyWeights)
    exploration_bias: float = 0.3

    # Sorted by max_age_hours; anything older gets stale_freshness.
    freshness_buckets: list[FreshnessBucket] = Field(default_factory=_default_buckets)
    stale_freshness: float = 0.1

    interaction_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "like": 3.0,
            "comment": 4.0,
            "share": 5.0,
            "save": 4.0,
            "view": 1.0,
        }
    )
    # Off: every co-engagement counts as one occurrence.
    collaborative_weighted: bool = False

    profile_size: int = 20
    similar_users_limit: int = 50
    collaborative_candidates_limit: int = 100
    content_window: int = 100
    min_word_length: int = 3

    post_popularity: PopularityConfig = Field(default_factory=PopularityConfig)
    video_popularity: PopularityConfig = Field(
        default_factory=lambda: PopularityConfig(
            like_weight=2.0, comment_weight=0.0, view_weight=0.1
        )
    )

    second_degree_factor: int = 3
    liked_authors_limit: int = 50
    liked_author_bonus: float = 2.0

    # For You mix: share of the page taken from followed authors
    following_share: float = 0.6

    strategy_timeout_seconds: float = 3.0

    @field_validator("freshness_buckets")
    @classmethod
    def _sorted_buckets(cls, buckets: list[FreshnessBucket]) -> list[FreshnessBucket]:
        return sorted(buckets, key=lambda b: b.max_age_hours)


class Settings(BaseSettings):
    # ── TiDB (MySQL-protocol compatible) ───────────────────────────────────
    tidb_host: str = "tidb"
    tidb_port: int = 4000
    tidb_user: str = "root"
    tidb_password: str = ""
    tidb_database: str = "social_feed"
    # Full SQLAlchemy URL; overrides the tidb_* parts when set
    database_url: str = ""

    @property
    def tidb_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.tidb_user}:{self.tidb_password}"
            f"@{self.tidb_host}:{self.tidb_port}/{self.tidb_database}"
        )

    query_timeout_seconds: float = 2.0

    # ── Recommendations ────────────────────────────────────────────────────
    max_limit: int = 100
    engine: EngineConfig = Field(default_factory=EngineConfig)

    # ── Observability ──────────────────────────────────────────────────────
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "recommendation-service"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"


settings = Settings()
