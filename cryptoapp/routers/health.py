import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from cryptoapp.core.database import Database, get_database
from cryptoapp.core.errors import ServiceUnavailable

router = APIRouter(tags=["Service"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- 1. BANNER ---
@router.get("/")
def root(request: Request, store: Database = Depends(get_database)):
    prefix = request.app.state.settings.API_PREFIX
    return {
        "message": "CryptoApp Backend API",
        "status": "online",
        "database": "connected" if store.reachable else "unreachable",
        "server_time": _now(),
        "endpoints": {
            "health": "/health",
            "db_status": "/db-status",
            "wake_db": "/wake-db",
            "auth": f"{prefix}/auth",
            "operations": f"{prefix}/operations",
        },
    }


# --- 2. HEALTH (always answers, even with the database asleep) ---
@router.get("/health")
def health(request: Request, store: Database = Depends(get_database)):
    return {
        "status": "OK",
        "server": "running",
        "database": "connected" if store.reachable else "unreachable",
        "timestamp": _now(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }


# --- 3. DATABASE STATUS (reads the flag, no query) ---
@router.get("/db-status")
def db_status(request: Request, store: Database = Depends(get_database)):
    settings = request.app.state.settings
    return {
        "success": True,
        "database": {
            "status": "AWAKE" if store.reachable else "SLEEPING",
            "connected": store.reachable,
            "url_configured": bool(settings.DATABASE_URL),
            "keepalive_enabled": settings.KEEPALIVE_ENABLED,
        },
        "timestamp": _now(),
    }


# --- 4. FORCED WAKE-UP ---
@router.get("/wake-db")
async def wake_db(store: Database = Depends(get_database)):
    if not await run_in_threadpool(store.ping):
        raise ServiceUnavailable(retry_after=store.retry_after)
    return {"success": True, "message": "Database is awake", "timestamp": _now()}
