"""Arena API application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arena.core.config import settings
from arena.core.database import create_tables
from arena.routes import auth, bookings, catalog, pricing_rules
from arena.services.errors import ReservationError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Database tables created")
    yield


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url=f"{settings.api_prefix}/docs",
    openapi_url=f"{settings.api_prefix}/openapi.json",
    lifespan=lifespan,
)

# CORS - permissive in dev, lock down in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Mount routes
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(bookings.router, prefix=settings.api_prefix)
app.include_router(catalog.courts_router, prefix=settings.api_prefix)
app.include_router(catalog.coaches_router, prefix=settings.api_prefix)
app.include_router(catalog.equipment_router, prefix=settings.api_prefix)
app.include_router(pricing_rules.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.app_name}
