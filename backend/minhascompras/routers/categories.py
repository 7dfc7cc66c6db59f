"""Router para categorias do usuário."""

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..schemas import CategoryCreate, CategoryOut, CategoryUpdate, CreatedResponse, MessageResponse
from ..services.records import CategoryService
from .deps import CurrentContext, unwrap

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.post("/", response_model=CreatedResponse, status_code=201)
@limiter.limit("30/minute")
def create_category(request: Request, payload: CategoryCreate, db: DbSession, ctx: CurrentContext):
    """
    Cria uma nova categoria.

    - **name**: Nome da categoria (obrigatório)
    """
    category_id = unwrap(CategoryService(db).add(ctx, payload))
    return CreatedResponse(id=category_id, message="Categoria criada com sucesso")


@router.get("/", response_model=list[CategoryOut])
@limiter.limit("60/minute")
def list_categories(request: Request, db: DbSession, ctx: CurrentContext):
    """Lista as categorias ativas, em ordem alfabética."""
    return unwrap(CategoryService(db).list(ctx))


@router.get("/{category_id}", response_model=CategoryOut)
@limiter.limit("60/minute")
def get_category(request: Request, category_id: int, db: DbSession, ctx: CurrentContext):
    """Busca uma categoria pelo ID."""
    return unwrap(CategoryService(db).get(ctx, category_id))


@router.put("/{category_id}", response_model=CategoryOut)
@limiter.limit("30/minute")
def update_category(
    request: Request, category_id: int, payload: CategoryUpdate, db: DbSession, ctx: CurrentContext
):
    """
    Renomeia uma categoria.

    ⚠️ Produtos já cadastrados continuam exibindo o nome anterior.
    """
    return unwrap(CategoryService(db).update(ctx, category_id, payload))


@router.delete("/{category_id}", response_model=MessageResponse)
@limiter.limit("10/minute")
def delete_category(request: Request, category_id: int, db: DbSession, ctx: CurrentContext):
    """Desativa uma categoria (os produtos vinculados não são alterados)."""
    unwrap(CategoryService(db).delete(ctx, category_id))
    return MessageResponse(message="Categoria removida com sucesso", id=category_id)
