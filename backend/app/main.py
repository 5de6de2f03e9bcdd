from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import (
    GZipMiddleware,
)
from sqlalchemy import text
from sqlalchemy.orm import Session
import structlog

from app.api.dev_routes import router as dev_router
from app.api.errors import problem_response, register_exception_handlers
from app.api.routes import router as products_router
from app.core.config import settings
from app.core.logger import configure_logging
from app.db.session import SessionLocal, get_db
from app.marketplaces import build_price_fetcher
from app.services.refresh import PriceRefreshService

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    fetcher = build_price_fetcher(settings)
    app.state.price_fetcher = fetcher

    refresher = PriceRefreshService(
        session_factory=SessionLocal,
        fetcher=fetcher,
        options=settings.refresh_options(),
    )
    if refresher.options.enabled:
        refresher.start()
    else:
        logger.info("price_refresh.disabled")
    app.state.price_refresher = refresher

    logger.info("app.started", fetcher=type(fetcher).__name__, env=settings.APP_ENV)
    yield

    await refresher.stop()
    logger.info("app.stopped")


app = FastAPI(
    title="TagTrack API",
    description="Product catalog with scheduled marketplace price tracking",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(products_router)
if settings.ENABLE_DEV_ROUTES:
    app.include_router(dev_router)


@app.api_route("/health", methods=["GET", "HEAD"])
def health_check():
    return {"status": "healthy", "service": "tagtrack-api"}


@app.get("/health/db")
def health_db(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("health.db_unreachable", error=str(e))
        return problem_response(503, "Database Unreachable", str(e))

    return {"status": "ok"}
