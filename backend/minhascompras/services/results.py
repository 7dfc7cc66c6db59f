"""Resultado padronizado dos serviços (sucesso xor erro)."""

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTH_REQUIRED_MESSAGE = "Usuário não autenticado. Faça login para continuar."
BACKEND_MESSAGE = "Não foi possível acessar o banco de dados. Tente novamente."


class ErrorKind(str, Enum):
    """Tipos de erro devolvidos pelos serviços."""

    AUTH_REQUIRED = "auth_required"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BACKEND = "backend"


@dataclass
class ServiceError:
    """Erro de serviço com mensagem pronta para exibição."""
    kind: ErrorKind
    message: str


@dataclass
class ServiceResult(Generic[T]):
    """Resultado de uma operação: `data` quando ok, `error` caso contrário."""
    data: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T = None) -> "ServiceResult[T]":
        return cls(data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message))

    @classmethod
    def validation(cls, message: str) -> "ServiceResult[T]":
        return cls.fail(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> "ServiceResult[T]":
        return cls.fail(ErrorKind.NOT_FOUND, message)


def service_operation(func: Callable[..., ServiceResult[Any]]) -> Callable[..., ServiceResult[Any]]:
    """
    Fronteira dos serviços.

    O primeiro argumento após `self` é o contexto do usuário; `None` vira
    AUTH_REQUIRED. Falhas do SQLAlchemy viram BACKEND (com rollback).
    """

    @functools.wraps(func)
    def wrapper(self, ctx, *args, **kwargs) -> ServiceResult[Any]:
        if ctx is None:
            return ServiceResult.fail(ErrorKind.AUTH_REQUIRED, AUTH_REQUIRED_MESSAGE)
        try:
            return func(self, ctx, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception(f"Erro de banco em {func.__qualname__}: {e}")
            self.store.rollback()
            return ServiceResult.fail(ErrorKind.BACKEND, BACKEND_MESSAGE)

    return wrapper
