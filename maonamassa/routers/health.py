# maonamassa/routers/health.py
import time

from fastapi import APIRouter, Depends

from maonamassa.core.config import Settings, get_settings
from maonamassa.core.permissions import RULES, Collection
from maonamassa.core.timestamps import utcnow_iso

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    """Health check: uptime (seconds) and the collections with their rule mode."""
    return {
        "status": "OK",
        "api": settings.PROJECT_NAME,
        "timestamp": utcnow_iso(),
        "uptime": int(time.monotonic() - STARTED_AT),
        "collections": [
            {"name": collection.value, "mode": RULES[collection].mode}
            for collection in Collection
        ],
    }
