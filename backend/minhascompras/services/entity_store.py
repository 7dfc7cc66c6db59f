"""
Acesso aos registros do usuário.

Toda leitura é filtrada por dono e `is_active`. Filtros por faixa de data e
ordenação ficam a cargo de quem chama (em memória), então o custo de cada
listagem é uma varredura da coleção inteira do usuário.
"""

from typing import Any, Iterable, TypeVar

from sqlalchemy.orm import Session

from ..models import PriceHistoryEntry

M = TypeVar("M")


class EntityStore:
    """Leituras e escritas escopadas por dono sobre uma sessão SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def query(self, model: type[M], owner_id: int, **filters: Any) -> list[M]:
        """Registros ativos do dono, com filtros de igualdade opcionais."""
        q = self.db.query(model).filter(
            model.owner_id == owner_id,
            model.is_active == True,  # noqa: E712
        )
        for field, value in filters.items():
            q = q.filter(getattr(model, field) == value)
        return q.all()

    def get(self, model: type[M], owner_id: int, record_id: int) -> M | None:
        """Registro ativo do dono pelo id, ou None."""
        return self.db.query(model).filter(
            model.id == record_id,
            model.owner_id == owner_id,
            model.is_active == True,  # noqa: E712
        ).first()

    def insert(self, record: Any) -> int:
        """Adiciona o registro e devolve o id gerado (sem commit)."""
        self.db.add(record)
        self.db.flush()
        return record.id

    def update(self, record: Any, values: dict[str, Any]) -> None:
        """Aplica uma atualização parcial no registro (sem commit)."""
        for field, value in values.items():
            setattr(record, field, value)
        self.db.flush()

    def soft_delete(self, record: Any) -> None:
        self.update(record, {"is_active": False})

    def history_for(self, product_ids: Iterable[int]) -> list[PriceHistoryEntry]:
        """Entradas de histórico dos produtos informados."""
        ids = list(product_ids)
        if not ids:
            return []
        return self.db.query(PriceHistoryEntry).filter(
            PriceHistoryEntry.product_id.in_(ids)
        ).all()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
