"""
health.py — Health Check Endpoint

Endpoints:
- GET /health → API status, database connectivity, version, timestamp

"degraded" means the API is up but the database is unreachable or not
configured; the stateless compute endpoint still works in that state.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.core.database import check_database

API_VERSION = "0.1.0"

router = APIRouter(
    tags=["health"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str  # "healthy" | "degraded"
    db: str  # "connected" | "disconnected"
    version: str
    timestamp: datetime


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health():
    db_ok = check_database()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        db="connected" if db_ok else "disconnected",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
