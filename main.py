"""
Control de Visitantes - Backend API
FastAPI + SQLModel + Supabase (Postgres, Auth, Storage)
"""
from dotenv import load_dotenv
load_dotenv()  # Load .env before any other imports

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.v1 import (
    auth,
    custom_fields,
    dashboard,
    public,
    search_page,
    users,
    visitors,
)
from config import get_settings
from domain.errors import VisitorControlError
from infrastructure.database import dispose_engine

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tables live in Supabase; the engine connects lazily on first use
    logger.info("Backend API started successfully")

    yield

    await dispose_engine()
    logger.info("Backend API shutting down")

app = FastAPI(
    title="Control de Visitantes API",
    description="Verificación de visitantes por cédula y administración del sistema",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(VisitorControlError)
async def visitor_control_error_handler(request: Request, exc: VisitorControlError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
    )


# Routers
app.include_router(search_page.router, tags=["search-page"])
app.include_router(public.router, prefix="/api/v1/public", tags=["public"])
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(visitors.router, prefix="/api/v1/visitors", tags=["visitors"])
app.include_router(custom_fields.router, prefix="/api/v1/custom-fields", tags=["custom-fields"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])

@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "control-visitantes-backend"}
