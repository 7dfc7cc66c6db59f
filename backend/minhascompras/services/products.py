"""Serviço de produtos e histórico de preços."""

import logging
import math
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models import Category, PriceHistoryEntry, Product, Store, as_utc, utc_now
from ..schemas import ProductCreate, ProductFilters, ProductUpdate, SortDirection
from .auth import UserContext
from .entity_store import EntityStore
from .results import ServiceResult, service_operation

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Produto não encontrado"
INVALID_PRICE = "O preço deve ser maior que zero"


def is_valid_price(value: Any) -> bool:
    """Preço numérico, finito e positivo."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, datetime):
        return as_utc(value)
    return value


def sort_products(products: list[Product], field: str, direction: SortDirection) -> list[Product]:
    """Ordena em memória; valores ausentes vão sempre para o fim."""
    present = [p for p in products if getattr(p, field) is not None]
    missing = [p for p in products if getattr(p, field) is None]
    present.sort(
        key=lambda p: _sort_key(getattr(p, field)),
        reverse=direction == SortDirection.DESC,
    )
    return present + missing


def matches_search(product: Product, term: str) -> bool:
    """Busca parcial, sem diferenciar maiúsculas, no nome e na marca."""
    needle = term.strip().casefold()
    if not needle:
        return True
    haystacks = (product.name or "", product.brand or "")
    return any(needle in h.casefold() for h in haystacks)


class PriceHistoryRecorder:
    """Log somente-inclusão de preços observados por produto."""

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    def append(
        self,
        product_id: int,
        price: float,
        store_label: Optional[str],
        date: Optional[datetime] = None,
    ) -> PriceHistoryEntry:
        """Inclui a entrada sem commit (usado dentro da escrita do produto)."""
        entry = PriceHistoryEntry(
            product_id=product_id,
            price=price,
            store=store_label,
            date=as_utc(date) if date else utc_now(),
        )
        self.store.insert(entry)
        return entry

    @service_operation
    def record(
        self,
        ctx: UserContext,
        product_id: int,
        price: float,
        store_label: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> ServiceResult[int]:
        """Registra um preço para o produto. Sem rótulo, usa a loja atual do produto."""
        if not is_valid_price(price):
            return ServiceResult.validation(INVALID_PRICE)

        product = self.store.get(Product, ctx.user_id, product_id)
        if not product:
            return ServiceResult.not_found(PRODUCT_NOT_FOUND)

        label = store_label if store_label is not None else product.store_name
        entry = self.append(product.id, price, label, date)
        self.store.commit()

        logger.info(f"Preço registrado: produto={product.id}, valor={price}")
        return ServiceResult.success(entry.id)

    @service_operation
    def history(self, ctx: UserContext, product_id: int) -> ServiceResult[list[PriceHistoryEntry]]:
        """Histórico do produto, do mais recente para o mais antigo."""
        product = self.store.get(Product, ctx.user_id, product_id)
        if not product:
            return ServiceResult.not_found(PRODUCT_NOT_FOUND)

        return ServiceResult.success(list(product.price_history))


class ProductService:
    """CRUD de produtos com soft delete e registro automático de preço."""

    def __init__(self, db: Session):
        self.store = EntityStore(db)
        self.recorder = PriceHistoryRecorder(db)

    @service_operation
    def add(self, ctx: UserContext, data: ProductCreate) -> ServiceResult[int]:
        name = (data.name or "").strip()
        if not name:
            return ServiceResult.validation("O nome do produto é obrigatório")
        if not is_valid_price(data.price):
            return ServiceResult.validation(INVALID_PRICE)

        category, error = self._resolve(ctx, Category, data.category_id, "categoria")
        if error:
            return error
        store, error = self._resolve(ctx, Store, data.store_id, "loja")
        if error:
            return error

        now = utc_now()
        product = Product(
            owner_id=ctx.user_id,
            name=name,
            brand=data.brand,
            price=data.price,
            unit=data.unit.value,
            quantity=data.quantity,
            notes=data.notes,
            category_id=category.id,
            category_name=category.name,
            store_id=store.id,
            store_name=store.name,
            created_at=now,
            is_active=True,
        )
        product_id = self.store.insert(product)
        self.recorder.append(product_id, product.price, product.store_name, now)
        self.store.commit()

        logger.info(f"Produto criado: {product_id} - {name}")
        return ServiceResult.success(product_id)

    @service_operation
    def update(self, ctx: UserContext, product_id: int, data: ProductUpdate) -> ServiceResult[Product]:
        product = self.store.get(Product, ctx.user_id, product_id)
        if not product:
            return ServiceResult.not_found(PRODUCT_NOT_FOUND)

        values = data.model_dump(exclude_unset=True)

        if "name" in values:
            values["name"] = (values["name"] or "").strip()
            if not values["name"]:
                return ServiceResult.validation("O nome do produto é obrigatório")
        if "price" in values and not is_valid_price(values["price"]):
            return ServiceResult.validation(INVALID_PRICE)
        if "unit" in values:
            if values["unit"] is None:
                return ServiceResult.validation("Unidade inválida")
            values["unit"] = values["unit"].value
        if "quantity" in values and values["quantity"] is None:
            return ServiceResult.validation("A quantidade deve ser maior que zero")

        if "category_id" in values:
            category, error = self._resolve(ctx, Category, values["category_id"], "categoria")
            if error:
                return error
            values["category_name"] = category.name
        if "store_id" in values:
            store, error = self._resolve(ctx, Store, values["store_id"], "loja")
            if error:
                return error
            values["store_name"] = store.name

        now = utc_now()
        values["updated_at"] = now
        self.store.update(product, values)

        # Todo update com preço gera um ponto novo, mesmo que o valor não mude
        if "price" in values:
            self.recorder.append(product.id, product.price, product.store_name, now)

        self.store.commit()

        logger.info(f"Produto atualizado: {product.id}")
        return ServiceResult.success(product)

    @service_operation
    def delete(self, ctx: UserContext, product_id: int) -> ServiceResult[int]:
        product = self.store.get(Product, ctx.user_id, product_id)
        if not product:
            return ServiceResult.not_found(PRODUCT_NOT_FOUND)

        self.store.soft_delete(product)
        self.store.commit()

        logger.info(f"Produto desativado: {product_id}")
        return ServiceResult.success(product_id)

    @service_operation
    def get(self, ctx: UserContext, product_id: int) -> ServiceResult[Product]:
        product = self.store.get(Product, ctx.user_id, product_id)
        if not product:
            return ServiceResult.not_found(PRODUCT_NOT_FOUND)
        return ServiceResult.success(product)

    def _resolve(self, ctx: UserContext, model, record_id: Optional[int], label: str):
        """Busca categoria/loja ativa do usuário; devolve (registro, erro)."""
        if record_id is None:
            return None, ServiceResult.validation(f"Selecione uma {label}")
        record = self.store.get(model, ctx.user_id, record_id)
        if not record:
            return None, ServiceResult.validation(f"A {label} selecionada não existe ou foi removida")
        return record, None

    @service_operation
    def list(self, ctx: UserContext, filters: Optional[ProductFilters] = None) -> ServiceResult[list[Product]]:
        filters = filters or ProductFilters()

        equality = {
            field: getattr(filters, field)
            for field in ("category_id", "store_id", "brand")
            if getattr(filters, field) is not None
        }
        products = self.store.query(Product, ctx.user_id, **equality)

        if filters.search:
            products = [p for p in products if matches_search(p, filters.search)]

        return ServiceResult.success(
            sort_products(products, filters.order_by.value, filters.direction)
        )
