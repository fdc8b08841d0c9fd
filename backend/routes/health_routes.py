"""
System health — uptime, memory and database connectivity.
"""
import resource
import sys
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config import ENVIRONMENT
from database import get_db, ping_db

router = APIRouter(prefix="/api/v1", tags=["Health"])

STARTED_AT = time.monotonic()


def _peak_memory_mb() -> float:
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(peak / divisor, 2)


@router.get("/health")
async def health(db: Session = Depends(get_db)):
    """Liveness plus dependency checks. 503 when the database is unreachable.

    Memory is the process peak resident set size (``peak_rss_mb``), not current usage.
    """
    connected = ping_db(db)
    body = {
        "status": "OK" if connected else "DEGRADED",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 2),
        "environment": ENVIRONMENT,
        "checks": {
            "database": "connected" if connected else "disconnected",
            "memory": {"peak_rss_mb": _peak_memory_mb()},
        },
    }
    return JSONResponse(status_code=200 if connected else 503, content=body)
