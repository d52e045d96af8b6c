import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.config import settings
from app.database import Base, engine

from app import models  # noqa: F401  registers tables on Base.metadata
from app.middleware.audit import AuditMiddleware
from app.services.data_loader import DataLoader

from app.routes.airlines import router as airlines_router
from app.routes.features import router as features_router
from app.routes.implementations import router as implementations_router
from app.routes.chat import router as chat_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    if settings.seed_on_startup:
        loader = DataLoader()
        try:
            loader.seed_sample_data()
        finally:
            loader.close()

    if not settings.llm_api_key:
        logger.warning("LLM_API_KEY not set - chat functionality will be disabled")

    yield


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Middlewares
app.add_middleware(AuditMiddleware)


@app.get("/")
async def root():
    """Service description"""
    return {
        "message": "NDC Features API is running",
        "version": settings.api_version,
        "docs": "/docs",
        "endpoints": {
            "airlines": "/api/airlines",
            "features": "/api/features",
            "implementations": "/api/implementations",
            "chat": "/api/chat",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {"status": "Alive"}

# Routers
app.include_router(airlines_router)
app.include_router(features_router)
app.include_router(implementations_router)
app.include_router(chat_router)
