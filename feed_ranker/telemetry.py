"""
Observability setup:
  - OpenTelemetry distributed tracing → Jaeger (via OTLP gRPC)
  - Prometheus metrics: recommendation latency, per-strategy candidate and
    failure counters, store-read failure counter, empty-result counter

Both are initialised once at startup and injected into FastAPI via middleware.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter, Histogram

from feed_ranker.config import settings

logger = logging.getLogger(__name__)

# ─────────────────────────── Prometheus Metrics ───────────────────────────
RECOMMENDATION_LATENCY = Histogram(
    "recommendation_latency_seconds",
    "End-to-end latency of one ranking call",
    ["kind"],  # 'posts' | 'videos' | 'users' | 'trending' | 'for_you'
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

SCORER_CANDIDATES_TOTAL = Counter(
    "scorer_candidates_total",
    "Candidates produced per scoring strategy",
    ["strategy"],
)

SCORER_FAILURES_TOTAL = Counter(
    "scorer_failures_total",
    "Strategy runs that failed or timed out and contributed nothing",
    ["strategy"],
)

STORE_READ_FAILURES_TOTAL = Counter(
    "store_read_failures_total",
    "Service-level store reads (exclusions, follows, feed mixes) that failed",
    ["operation"],
)

EMPTY_RECOMMENDATIONS_TOTAL = Counter(
    "empty_recommendations_total",
    "Ranking calls that returned no identifiers",
    ["kind"],
)


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
def setup_tracing() -> None:
    """Configure the global OTel TracerProvider with OTLP/Jaeger export."""
    if not settings.otel_enabled:
        logger.info("OTel tracing disabled")
        return

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    try:
        otlp_exporter = OTLPSpanExporter(
            endpoint=settings.otel_exporter_otlp_endpoint,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info(
            "OTel tracing configured → %s", settings.otel_exporter_otlp_endpoint
        )
    except Exception as exc:
        logger.warning("Could not connect to OTLP exporter: %s — traces disabled", exc)

    trace.set_tracer_provider(provider)


def instrument_sqlalchemy(engine) -> None:  # noqa: ANN001
    if settings.otel_enabled:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


def instrument_app(app) -> None:  # noqa: ANN001
    """Call after app is created to add FastAPI request spans."""
    if settings.otel_enabled:
        FastAPIInstrumentor.instrument_app(app)
