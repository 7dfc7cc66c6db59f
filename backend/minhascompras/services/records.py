"""Serviços de categorias e lojas (registros nomeados do usuário)."""

import logging
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ..models import Category, Store, utc_now
from ..schemas import NamedRecordIn
from .auth import UserContext
from .entity_store import EntityStore
from .results import ServiceResult, service_operation

logger = logging.getLogger(__name__)

R = TypeVar("R", Category, Store)


class NamedRecordService(Generic[R]):
    """CRUD com soft delete para registros que só têm nome."""

    model: type[R]
    label: str

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    @service_operation
    def add(self, ctx: UserContext, data: NamedRecordIn) -> ServiceResult[int]:
        name = (data.name or "").strip()
        if not name:
            return ServiceResult.validation(f"O nome da {self.label} é obrigatório")

        record = self.model(
            owner_id=ctx.user_id,
            name=name,
            created_at=utc_now(),
            is_active=True,
        )
        record_id = self.store.insert(record)
        self.store.commit()

        logger.info(f"{self.label.capitalize()} criada: {record_id} - {name}")
        return ServiceResult.success(record_id)

    @service_operation
    def update(self, ctx: UserContext, record_id: int, data: NamedRecordIn) -> ServiceResult[R]:
        record = self.store.get(self.model, ctx.user_id, record_id)
        if not record:
            return ServiceResult.not_found(self._not_found_message)

        name = (data.name or "").strip()
        if not name:
            return ServiceResult.validation(f"O nome da {self.label} é obrigatório")

        # Produtos já gravados mantêm o nome antigo (cópia desnormalizada)
        self.store.update(record, {"name": name, "updated_at": utc_now()})
        self.store.commit()

        logger.info(f"{self.label.capitalize()} atualizada: {record_id}")
        return ServiceResult.success(record)

    @service_operation
    def delete(self, ctx: UserContext, record_id: int) -> ServiceResult[int]:
        record = self.store.get(self.model, ctx.user_id, record_id)
        if not record:
            return ServiceResult.not_found(self._not_found_message)

        self.store.soft_delete(record)
        self.store.commit()

        logger.info(f"{self.label.capitalize()} desativada: {record_id}")
        return ServiceResult.success(record_id)

    @service_operation
    def get(self, ctx: UserContext, record_id: int) -> ServiceResult[R]:
        record = self.store.get(self.model, ctx.user_id, record_id)
        if not record:
            return ServiceResult.not_found(self._not_found_message)
        return ServiceResult.success(record)

    @service_operation
    def list(self, ctx: UserContext) -> ServiceResult[list[R]]:
        records = self.store.query(self.model, ctx.user_id)
        records.sort(key=lambda r: r.name.casefold())
        return ServiceResult.success(records)

    @property
    def _not_found_message(self) -> str:
        return f"{self.label.capitalize()} não encontrada"


class CategoryService(NamedRecordService[Category]):
    model = Category
    label = "categoria"


class StoreService(NamedRecordService[Store]):
    model = Store
    label = "loja"
