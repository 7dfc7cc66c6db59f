"""Models SQLAlchemy para o MinhasCompras."""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def utc_now() -> datetime:
    """Retorna datetime atual em UTC."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Normaliza um datetime para UTC (SQLite devolve valores sem timezone)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# =============================================================================
# AUTENTICAÇÃO
# =============================================================================

class User(Base):
    """Modelo para usuários da aplicação."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utc_now)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_users_email_active", "email", "is_active"),
    )


class UserSession(Base):
    """Modelo para sessões de usuário (uma por login)."""

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    device_info = Column(String(255), nullable=True)  # User-Agent
    ip_address = Column(String(45), nullable=True)  # IPv4 ou IPv6
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    last_used_at = Column(DateTime(timezone=True), default=utc_now)

    # Relationships
    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("ix_sessions_user_active", "user_id", "is_active"),
    )


# =============================================================================
# CADASTROS DO USUÁRIO
# =============================================================================

class Category(Base):
    """Categoria de produtos definida pelo usuário."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)  # Soft delete
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_categories_owner_active", "owner_id", "is_active"),
    )


class Store(Base):
    """Loja/estabelecimento cadastrado pelo usuário."""

    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)  # Soft delete
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_stores_owner_active", "owner_id", "is_active"),
    )


class Product(Base):
    """Produto comprado pelo usuário."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    brand = Column(String(120), nullable=True)
    price = Column(Float, nullable=False)
    unit = Column(String(10), nullable=False, default="unit")  # unit, kg, g, l, ml
    quantity = Column(Float, nullable=False, default=1.0)
    notes = Column(Text, nullable=True)

    # Referências + nomes copiados no momento da escrita (podem ficar desatualizados)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    category_name = Column(String(255), nullable=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=True, index=True)
    store_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True)  # Soft delete
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    price_history = relationship(
        "PriceHistoryEntry",
        back_populates="product",
        order_by="desc(PriceHistoryEntry.date)",
    )

    __table_args__ = (
        Index("ix_products_owner_active", "owner_id", "is_active"),
    )


class PriceHistoryEntry(Base):
    """Registro imutável de preço observado para um produto."""

    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    price = Column(Float, nullable=False)
    store = Column(String(255), nullable=True)  # Rótulo livre, não é FK
    date = Column(DateTime(timezone=True), default=utc_now, index=True)

    # Relationships
    product = relationship("Product", back_populates="price_history")

    __table_args__ = (
        Index("ix_price_history_product_date", "product_id", "date"),
    )
