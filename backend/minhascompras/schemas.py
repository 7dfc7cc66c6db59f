"""Schemas Pydantic para validação e serialização."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# === Enums ===


class ProductUnit(str, Enum):
    """Unidades aceitas para produtos."""

    UNIT = "unit"
    KG = "kg"
    G = "g"
    L = "l"
    ML = "ml"


class SortDirection(str, Enum):
    """Direção de ordenação das listagens."""

    ASC = "asc"
    DESC = "desc"


class ProductSortField(str, Enum):
    """Campos aceitos para ordenar produtos."""

    NAME = "name"
    BRAND = "brand"
    PRICE = "price"
    QUANTITY = "quantity"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


# === Category / Store Schemas ===


class NamedRecordIn(BaseModel):
    """Payload de criação/edição de categoria ou loja."""

    name: str = Field(..., max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class CategoryCreate(NamedRecordIn):
    """Schema para criar categoria."""

    pass


class CategoryUpdate(CategoryCreate):
    """Schema para atualizar categoria."""

    pass


class StoreCreate(NamedRecordIn):
    """Schema para criar loja."""

    pass


class StoreUpdate(StoreCreate):
    """Schema para atualizar loja."""

    pass


class CategoryOut(BaseModel):
    """Schema de saída para categoria."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoreOut(CategoryOut):
    """Schema de saída para loja."""

    pass


# === Product Schemas ===


class ProductBase(BaseModel):
    """Campos comuns de produto."""

    brand: str | None = Field(None, max_length=120)
    unit: ProductUnit = ProductUnit.UNIT
    quantity: float = Field(default=1.0, gt=0)
    notes: str | None = None


class ProductCreate(ProductBase):
    """
    Schema para criar produto.

    As regras de negócio (nome preenchido, preço positivo, categoria e loja
    ativas) são verificadas pelo serviço, não aqui.
    """

    name: str = Field(..., max_length=255)
    price: float
    category_id: int | None = None
    store_id: int | None = None


class ProductUpdate(BaseModel):
    """Schema para atualizar produto. Apenas campos fornecidos são alterados."""

    name: str | None = Field(None, max_length=255)
    brand: str | None = Field(None, max_length=120)
    price: float | None = None
    unit: ProductUnit | None = None
    quantity: float | None = Field(None, gt=0)
    notes: str | None = None
    category_id: int | None = None
    store_id: int | None = None


class ProductOut(BaseModel):
    """Schema de saída para produto."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand: str | None = None
    price: float
    unit: str
    quantity: float
    notes: str | None = None
    category_id: int | None = None
    category_name: str | None = None
    store_id: int | None = None
    store_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductFilters(BaseModel):
    """Filtros da listagem de produtos (aplicados em memória)."""

    category_id: int | None = None
    store_id: int | None = None
    brand: str | None = None
    search: str | None = None
    order_by: ProductSortField = ProductSortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


# === Price History Schemas ===


class PriceRecordCreate(BaseModel):
    """Schema para registrar um preço manualmente."""

    price: float
    store: str | None = Field(None, max_length=255)
    date: datetime | None = None


class PriceHistoryOut(BaseModel):
    """Schema de saída para entrada do histórico de preços."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    price: float
    store: str | None = None
    date: datetime


# === Aggregation Schemas ===


class CategoryExpenseOut(BaseModel):
    """Gasto agrupado por categoria."""

    model_config = ConfigDict(from_attributes=True)

    category_id: int | str
    category_name: str
    total: float
    items: list[ProductOut]


class MonthlyExpensesOut(BaseModel):
    """Gastos de um mês."""

    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    start_date: datetime
    end_date: datetime
    total: float
    expenses: list[ProductOut]
    category_breakdown: list[CategoryExpenseOut]


class PricePointOut(BaseModel):
    """Ponto da série de preços (para gráficos)."""

    model_config = ConfigDict(from_attributes=True)

    price: float
    store: str | None = None
    date: datetime


class PriceTrendOut(BaseModel):
    """Resumo de variação de preço de um produto."""

    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: str
    category_id: int | None = None
    category_name: str | None = None
    store_name: str | None = None
    current_price: float
    lowest_price: float
    highest_price: float
    price_change: float
    percentage_change: float
    price_history: list[PricePointOut]


class PriceComparisonOut(BaseModel):
    """Resposta da comparação de preços."""

    months: int
    start_date: datetime
    end_date: datetime
    products: list[PriceTrendOut]


class DashboardOut(BaseModel):
    """Resumo exibido no painel principal."""

    model_config = ConfigDict(from_attributes=True)

    total_products: int
    total_categories: int
    total_stores: int
    monthly_total: float
    recent_products: list[ProductOut]


# === Generic ===


class CreatedResponse(BaseModel):
    """Response após criação de registro."""

    id: int
    message: str = "Registro criado com sucesso"


class MessageResponse(BaseModel):
    """Response simples com mensagem."""

    message: str
    id: int | None = None


class HealthResponse(BaseModel):
    """Response do health check."""

    status: str
    db: bool
    version: str = "1.0.0"
