"""
Recommendation Service — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Create the DB engine (TiDB) and instrument it
  3. Wire the SQL stores into the ranking engine
  4. Expose Prometheus /metrics endpoint

Run with:  uvicorn feed_ranker.main:app --port 8002
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from feed_ranker.config import settings
from feed_ranker.database import create_engine, create_session_factory
from feed_ranker.dependencies import build_ranking_service
from feed_ranker.routers import recommendations
from feed_ranker.telemetry import instrument_app, instrument_sqlalchemy, setup_tracing

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the DB engine for the lifetime of the process."""
    logger.info("Starting Recommendation Service (env=%s)", settings.environment)

    engine = create_engine()
    instrument_sqlalchemy(engine)
    app.state.ranking_service = build_ranking_service(create_session_factory(engine))

    logger.info("Ranking engine wired. API ready.")
    yield

    logger.info("Shutting down...")
    await engine.dispose()


app = FastAPI(
    title="Recommendation Service",
    description=(
        "Hybrid ranking engine: collaborative, content-based, popularity and "
        "social-graph signals blended into one ordered list of ids."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(
    recommendations.router, prefix="/recommendations", tags=["Recommendations"]
)

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
