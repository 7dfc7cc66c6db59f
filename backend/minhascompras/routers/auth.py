"""Router para autenticação (cadastro, login, logout, sessão atual)."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, EmailStr, Field
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..services.auth import AuthService, EmailAlreadyRegistered
from .deps import CurrentContext

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


# =============================================================================
# SCHEMAS
# =============================================================================

class RegisterRequest(BaseModel):
    """Schema para cadastro de usuário."""
    email: EmailStr
    password: str = Field(..., min_length=6)
    display_name: str = Field(..., min_length=2, max_length=255)


class LoginRequest(BaseModel):
    """Schema para login."""
    email: EmailStr
    password: str = Field(..., min_length=6)


class RefreshRequest(BaseModel):
    """Schema para refresh de token."""
    refresh_token: str


class UserOut(BaseModel):
    """Schema de saída para usuário."""
    id: int
    email: str
    display_name: str


class TokenResponse(BaseModel):
    """Schema de resposta com tokens."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    """Schema de resposta do login."""
    user: UserOut


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(request: Request, data: RegisterRequest, db: DbSession):
    """Cria uma nova conta."""
    try:
        user = AuthService(db).register(data.email, data.password, data.display_name.strip())
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Já existe uma conta com este email"
        )
    return UserOut(id=user.id, email=user.email, display_name=user.display_name)


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
def login(request: Request, data: LoginRequest, db: DbSession):
    """Autentica um usuário e retorna tokens."""
    auth_service = AuthService(db)

    user = auth_service.authenticate(data.email, data.password)
    if not user:
        logger.info(f"Login falhou para {data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou senha incorretos"
        )

    access_token, refresh_token = auth_service.sign_in(
        user=user,
        device_info=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None
    )

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserOut(id=user.id, email=user.email, display_name=user.display_name),
    )


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit("30/minute")
def refresh_token(request: Request, data: RefreshRequest, db: DbSession):
    """Renova os tokens de uma sessão ativa."""
    tokens = AuthService(db).refresh(data.refresh_token)
    if not tokens:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token inválido ou expirado"
        )
    access_token, new_refresh_token = tokens
    return TokenResponse(access_token=access_token, refresh_token=new_refresh_token)


@router.post("/logout")
@limiter.limit("30/minute")
def logout(request: Request, db: DbSession, ctx: CurrentContext):
    """Encerra a sessão atual."""
    if ctx is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não autenticado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    AuthService(db).sign_out(ctx)
    return {"message": "Logout realizado com sucesso"}


@router.get("/me", response_model=UserOut)
@limiter.limit("60/minute")
def get_me(request: Request, ctx: CurrentContext):
    """Retorna o usuário da sessão atual."""
    if ctx is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não autenticado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return UserOut(id=ctx.user_id, email=ctx.email, display_name=ctx.display_name)
