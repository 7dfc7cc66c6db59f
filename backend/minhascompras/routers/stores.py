"""Router para operações com lojas/estabelecimentos."""

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..schemas import CreatedResponse, MessageResponse, StoreCreate, StoreOut, StoreUpdate
from ..services.records import StoreService
from .deps import CurrentContext, unwrap

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.post("/", response_model=CreatedResponse, status_code=201)
@limiter.limit("30/minute")
def create_store(request: Request, payload: StoreCreate, db: DbSession, ctx: CurrentContext):
    """
    Cria uma nova loja.

    - **name**: Nome da loja (obrigatório)
    """
    store_id = unwrap(StoreService(db).add(ctx, payload))
    return CreatedResponse(id=store_id, message="Loja criada com sucesso")


@router.get("/", response_model=list[StoreOut])
@limiter.limit("60/minute")
def list_stores(request: Request, db: DbSession, ctx: CurrentContext):
    """Lista as lojas ativas, em ordem alfabética."""
    return unwrap(StoreService(db).list(ctx))


@router.get("/{store_id}", response_model=StoreOut)
@limiter.limit("60/minute")
def get_store(request: Request, store_id: int, db: DbSession, ctx: CurrentContext):
    """
    Busca uma loja pelo ID.

    - **store_id**: ID da loja
    """
    return unwrap(StoreService(db).get(ctx, store_id))


@router.put("/{store_id}", response_model=StoreOut)
@limiter.limit("30/minute")
def update_store(request: Request, store_id: int, payload: StoreUpdate, db: DbSession, ctx: CurrentContext):
    """
    Atualiza uma loja existente.

    - **store_id**: ID da loja
    """
    return unwrap(StoreService(db).update(ctx, store_id, payload))


@router.delete("/{store_id}", response_model=MessageResponse)
@limiter.limit("10/minute")
def delete_store(request: Request, store_id: int, db: DbSession, ctx: CurrentContext):
    """
    Remove uma loja (soft delete).

    - **store_id**: ID da loja
    """
    unwrap(StoreService(db).delete(ctx, store_id))
    return MessageResponse(message="Loja removida com sucesso", id=store_id)
