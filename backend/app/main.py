"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize application services (logging, config, DB tables, demo seed).
- Register API routers.
- Define root-level status endpoint.
- Provide `app` object used by ASGI server (uvicorn).

This file should stay clean — no business logic here.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import growth_model, health
from app.api.v1.health import API_VERSION
from app.core import database
from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.services.modeling.demo_scenarios import seed_demo_scenarios
from app.services.modeling.scenario_store import ScenarioStore

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Startup
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)

    if database.engine is None:
        logger.warning("DATABASE_URL not set; only stateless compute is available")
    else:
        database.init_db()
        if settings.SEED_DEMO_SCENARIOS:
            db = database.SessionLocal()
            try:
                seed_demo_scenarios(ScenarioStore(db))
            finally:
                db.close()

    yield


# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Growth Model Backend",
    description="Growth model engine, baseline estimator and scenario store",
    version=API_VERSION,
    lifespan=lifespan,
)

# -----------------------------------------------------------------------------
# CORS (dashboard frontend)
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

# Mount all v1 API routers under /api/v1 prefix
app.include_router(growth_model.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Root
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "Growth model backend running"}
