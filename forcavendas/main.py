"""Força de Vendas API - sincronização de pedidos do app mobile."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from .config import settings
from .database import Base, engine
from .routers import admin_sync_logs, mobile_auth, mobile_sync
from .schemas import HealthResponse

# === Logging ===

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# === Lifespan ===


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia o ciclo de vida da aplicação."""
    logger.info("Iniciando Força de Vendas API...")

    # Startup: criar tabelas (em produção, usar Alembic)
    if settings.is_development:
        logger.info("Ambiente de desenvolvimento: criando tabelas...")
        Base.metadata.create_all(bind=engine)

    logger.info("API iniciada com sucesso!")
    yield

    # Shutdown
    logger.info("Encerrando Força de Vendas API...")


# === App ===

app = FastAPI(
    title="Força de Vendas API",
    description="Sincronização de pedidos capturados offline pelos vendedores",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

# Rate limiter
app.state.limiter = mobile_sync.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# === Middleware ===

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# === Exception Handlers ===


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler global para exceções não tratadas."""
    logger.exception(f"Erro não tratado: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Erro interno do servidor"
            if settings.is_production
            else str(exc)
        },
    )


# === Routers ===

app.include_router(mobile_auth.router, prefix="/mobile", tags=["mobile-auth"])
app.include_router(mobile_sync.router, prefix="/mobile", tags=["mobile-sync"])
app.include_router(admin_sync_logs.router, prefix="/admin", tags=["admin"])


# === Health Check ===


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health_check() -> HealthResponse:
    """Verifica a saúde da aplicação e do banco de dados."""
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning(f"Health check DB falhou: {e}")

    return HealthResponse(status="ok" if db_ok else "down", db=db_ok)


@app.get("/", tags=["root"])
def root() -> dict:
    """Endpoint raiz com informações básicas da API."""
    return {
        "app": "Força de Vendas API",
        "version": "1.0.0",
        "docs": "/docs" if settings.is_development else None,
        "health": "/health",
    }
