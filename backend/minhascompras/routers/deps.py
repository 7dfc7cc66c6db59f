"""Dependências compartilhadas pelos routers."""

from typing import Annotated, Optional, TypeVar

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..database import DbSession
from ..services.auth import AuthService, UserContext
from ..services.results import ErrorKind, ServiceResult

T = TypeVar("T")

security = HTTPBearer(auto_error=False)

ERROR_STATUS = {
    ErrorKind.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BACKEND: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_current_context(
    db: DbSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[UserContext]:
    """
    Contexto do usuário a partir do Bearer token, ou None.

    Não lança 401 aqui: o serviço chamado devolve AUTH_REQUIRED.
    """
    if not credentials:
        return None
    return AuthService(db).context_from_token(credentials.credentials)


CurrentContext = Annotated[Optional[UserContext], Depends(get_current_context)]


def unwrap(result: ServiceResult[T]) -> T:
    """Devolve o dado do resultado ou converte o erro em HTTPException."""
    if result.ok:
        return result.data

    error = result.error
    headers = {"WWW-Authenticate": "Bearer"} if error.kind == ErrorKind.AUTH_REQUIRED else None
    raise HTTPException(
        status_code=ERROR_STATUS[error.kind],
        detail=error.message,
        headers=headers,
    )
