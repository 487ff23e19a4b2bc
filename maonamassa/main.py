# maonamassa/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from maonamassa.core.config import get_settings
from maonamassa.core.errors import ApiError, api_error_handler
from maonamassa.core.permissions import RULES, validate_rules
from maonamassa.database import create_db_and_tables, get_store, seed_store

# Routers
from maonamassa.routers.auth import router as auth_router
from maonamassa.routers.contracts import router as contracts_router
from maonamassa.routers.health import router as health_router
from maonamassa.routers.records import routers as record_routers
from maonamassa.routers.search import router as search_router
from maonamassa.routers.users import router as users_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Check that every collection has an ownership rule.
      - Create the record store tables.
      - Load SEED_FILE into an empty store, if configured.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    validate_rules()
    logger.info(
        "🔐 Ownership rules: "
        + ", ".join(f"{c.value}={r.mode}" for c, r in RULES.items())
    )

    logger.info("🔄 Startup: preparing record store...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: record store ready.")
    except Exception as e:
        logger.error(f"❌ Startup: record store FAILED: {e}")
        raise

    if settings.SEED_FILE:
        count = seed_store(get_store(), settings.SEED_FILE)
        logger.info(f"🌱 Seeded {count} records from {settings.SEED_FILE}")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(ApiError, api_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fixed paths first: /professionals/search and /users/me would otherwise
# be captured by /{collection}/{record_id}.
app.include_router(health_router, prefix=settings.API_PREFIX)
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(search_router, prefix=settings.API_PREFIX)
app.include_router(users_router, prefix=settings.API_PREFIX)
app.include_router(contracts_router, prefix=settings.API_PREFIX)
for record_router in record_routers:
    app.include_router(record_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Service banner."""
    return {"status": "ok", "service": "maonamassa-api"}
