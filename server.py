from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent

# Load .env only if exists (development fallback); must run before config import.
env_path = ROOT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

from fastapi import Depends, FastAPI  # noqa: E402
from starlette.middleware.cors import CORSMiddleware  # noqa: E402

from shelterpay.config import APP_NAME, APP_VERSION, CORS_ORIGINS, ENABLE_ACCESS_LOG  # noqa: E402
from shelterpay.db import close_mongo, connect_mongo, get_db, ping_db  # noqa: E402
from shelterpay.exception_handlers import register_exception_handlers  # noqa: E402
from shelterpay.indexes.booking_indexes import ensure_booking_indexes  # noqa: E402
from shelterpay.middleware.correlation_id import CorrelationIdMiddleware  # noqa: E402
from shelterpay.middleware.structured_logging_middleware import StructuredLoggingMiddleware  # noqa: E402
from shelterpay.routers.payments import router as payments_router  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("shelterpay")

app = FastAPI(title=APP_NAME, version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
if ENABLE_ACCESS_LOG:
    app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(payments_router)


@app.get("/api/health")
async def health(db=Depends(get_db)) -> dict[str, Any]:
    """Main health check with database ping"""
    return {"ok": await ping_db(db), "service": "shelterpay"}


@app.get("/health")
async def deployment_health() -> dict[str, Any]:
    """Simple health check for deployment platforms"""
    return {"ok": True, "service": "shelterpay", "status": "healthy"}


@app.on_event("startup")
async def _startup() -> None:
    db = await connect_mongo()
    await ensure_booking_indexes(db)
    logger.info("Startup complete")


@app.on_event("shutdown")
async def _shutdown() -> None:
    await close_mongo()
    logger.info("Shutdown complete")
