"""MinhasCompras API - Aplicação principal FastAPI."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy import text

from .config import settings
from .database import Base, engine
from .routers import (
    auth,
    categories,
    comparison,
    dashboard,
    expenses,
    products,
    stores,
)
from .schemas import HealthResponse
from .services.auth import UserContext, on_auth_state_change

# === Logging ===

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def log_auth_event(event: str, ctx: Optional[UserContext]) -> None:
    """Registra logins e logouts no log da aplicação."""
    if ctx:
        logger.info(f"Auth: {event} (usuário {ctx.user_id}, sessão {ctx.session_id})")
    else:
        logger.info(f"Auth: {event}")


# === Rate Limiter ===

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


# === Lifespan ===


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia o ciclo de vida da aplicação."""
    logger.info("Iniciando MinhasCompras API...")

    # Startup: criar tabelas (em produção, usar Alembic)
    if settings.is_development:
        logger.info("Ambiente de desenvolvimento: criando tabelas...")
        Base.metadata.create_all(bind=engine)

    unsubscribe = on_auth_state_change(log_auth_event)

    logger.info("API iniciada com sucesso!")
    yield

    # Shutdown
    unsubscribe()
    logger.info("Encerrando MinhasCompras API...")


# === App ===

app = FastAPI(
    title="MinhasCompras API",
    description="API para registro de compras de mercado, gastos mensais e variação de preços",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# === Middleware ===

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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

app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(categories.router, prefix="/categories", tags=["categories"])
app.include_router(stores.router, prefix="/stores", tags=["stores"])
app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
app.include_router(comparison.router, prefix="/comparison", tags=["comparison"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])


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
        "app": "MinhasCompras API",
        "version": "1.0.0",
        "docs": "/docs" if settings.is_development else None,
        "health": "/health",
    }
