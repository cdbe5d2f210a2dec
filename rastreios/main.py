"""Rastreios Reversa API - Aplicação principal FastAPI."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from .config import DEFAULT_SECRET_KEY, settings
from .database import Base, SessionLocal, engine
from .models import UserSession
from .routers import (
    auth_router,
    names_router,
    reports_router,
    trackings_router,
    users_router,
)
from .routers.auth import limiter
from .schemas import HealthResponse
from .services.auth import AuthService

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
    logger.info("Iniciando Rastreios API...")

    if settings.is_production and settings.secret_key == DEFAULT_SECRET_KEY:
        raise RuntimeError("SECRET_KEY é obrigatória em produção")

    # Startup: criar tabelas (em produção, usar Alembic)
    if settings.is_development:
        logger.info("Ambiente de desenvolvimento: criando tabelas...")
        Base.metadata.create_all(bind=engine)

    # A tabela de sessões é garantida sempre, de forma idempotente
    UserSession.__table__.create(bind=engine, checkfirst=True)

    db = SessionLocal()
    try:
        purged = AuthService(db).purge_expired_sessions()
        if purged:
            logger.info(f"{purged} sessões expiradas removidas")
    finally:
        db.close()

    logger.info("API iniciada com sucesso!")
    yield

    # Shutdown
    logger.info("Encerrando Rastreios API...")


# === App ===

app = FastAPI(
    title="Rastreios API",
    description="API para entrada, finalização e relatórios de códigos de rastreio",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

# Rate limiter (login)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# === Middleware ===

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# === Exception Handlers ===


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Erros de validação viram 400 com a lista de campos inválidos."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Dados inválidos", "errors": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler global para exceções não tratadas."""
    logger.exception(f"Erro não tratado em {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Erro interno do servidor"},
    )


# === Routers ===

app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(trackings_router, prefix="/api/trackings", tags=["trackings"])
app.include_router(names_router, prefix="/api/names", tags=["names"])
app.include_router(reports_router, prefix="/api/reports", tags=["reports"])


# === Health Check ===


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health_check() -> HealthResponse:
    """Verifica a saúde da aplicação e do banco."""
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
        "app": "Rastreios API",
        "version": "1.0.0",
        "docs": "/docs" if settings.is_development else None,
        "health": "/health",
    }
