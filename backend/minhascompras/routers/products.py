"""Router para operações com produtos e histórico de preços."""

from fastapi import APIRouter, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..schemas import (
    CreatedResponse,
    MessageResponse,
    PriceHistoryOut,
    PriceRecordCreate,
    ProductCreate,
    ProductFilters,
    ProductOut,
    ProductSortField,
    ProductUpdate,
    SortDirection,
)
from ..services.products import PriceHistoryRecorder, ProductService
from .deps import CurrentContext, unwrap

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.post("/", response_model=CreatedResponse, status_code=201)
@limiter.limit("30/minute")
def create_product(request: Request, payload: ProductCreate, db: DbSession, ctx: CurrentContext):
    """
    Cria um novo produto e registra o preço inicial no histórico.

    - **name**: Nome do produto (obrigatório)
    - **price**: Preço pago (maior que zero)
    - **category_id**: Categoria ativa do usuário (obrigatório)
    - **store_id**: Loja ativa do usuário (obrigatório)
    - **unit** / **quantity**: Unidade (unit, kg, g, l, ml) e quantidade
    """
    product_id = unwrap(ProductService(db).add(ctx, payload))
    return CreatedResponse(id=product_id, message="Produto criado com sucesso")


@router.get("/", response_model=list[ProductOut])
@limiter.limit("60/minute")
def list_products(
    request: Request,
    db: DbSession,
    ctx: CurrentContext,
    search: str | None = Query(None, description="Buscar por nome ou marca"),
    category_id: int | None = Query(None, description="Filtrar por categoria"),
    store_id: int | None = Query(None, description="Filtrar por loja"),
    brand: str | None = Query(None, description="Filtrar por marca (exata)"),
    order_by: ProductSortField = Query(ProductSortField.CREATED_AT, description="Campo de ordenação"),
    direction: SortDirection = Query(SortDirection.DESC, description="asc ou desc"),
):
    """
    Lista produtos ativos com filtros.

    Filtros e ordenação são aplicados em memória sobre todos os produtos do usuário.
    """
    filters = ProductFilters(
        search=search,
        category_id=category_id,
        store_id=store_id,
        brand=brand,
        order_by=order_by,
        direction=direction,
    )
    return unwrap(ProductService(db).list(ctx, filters))


@router.get("/{product_id}", response_model=ProductOut)
@limiter.limit("60/minute")
def get_product(request: Request, product_id: int, db: DbSession, ctx: CurrentContext):
    """
    Busca um produto pelo ID.

    - **product_id**: ID do produto
    """
    return unwrap(ProductService(db).get(ctx, product_id))


@router.put("/{product_id}", response_model=ProductOut)
@limiter.limit("30/minute")
def update_product(
    request: Request, product_id: int, payload: ProductUpdate, db: DbSession, ctx: CurrentContext
):
    """
    Atualiza um produto existente.

    - Apenas campos fornecidos serão atualizados
    - Se **price** for enviado, um novo ponto é adicionado ao histórico
    """
    return unwrap(ProductService(db).update(ctx, product_id, payload))


@router.delete("/{product_id}", response_model=MessageResponse)
@limiter.limit("10/minute")
def delete_product(request: Request, product_id: int, db: DbSession, ctx: CurrentContext):
    """
    Remove um produto (soft delete). O histórico de preços é mantido.
    """
    unwrap(ProductService(db).delete(ctx, product_id))
    return MessageResponse(message="Produto removido com sucesso", id=product_id)


@router.get("/{product_id}/history", response_model=list[PriceHistoryOut])
@limiter.limit("60/minute")
def get_product_history(request: Request, product_id: int, db: DbSession, ctx: CurrentContext):
    """Histórico de preços do produto, do mais recente para o mais antigo."""
    return unwrap(PriceHistoryRecorder(db).history(ctx, product_id))


@router.post("/{product_id}/history", response_model=CreatedResponse, status_code=201)
@limiter.limit("30/minute")
def record_product_price(
    request: Request, product_id: int, payload: PriceRecordCreate, db: DbSession, ctx: CurrentContext
):
    """
    Registra um preço observado sem alterar o produto.

    - **price**: Preço observado (maior que zero)
    - **store**: Rótulo da loja (padrão: loja atual do produto)
    - **date**: Data da observação (padrão: agora)
    """
    entry_id = unwrap(
        PriceHistoryRecorder(db).record(ctx, product_id, payload.price, payload.store, payload.date)
    )
    return CreatedResponse(id=entry_id, message="Preço registrado com sucesso")
