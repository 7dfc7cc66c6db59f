"""Serviços de gastos mensais e do painel principal."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models import Category, Product, Store, as_utc, utc_now
from .aggregation import CategoryExpense, MonthlyExpenses, aggregate_monthly
from .auth import UserContext
from .entity_store import EntityStore
from .results import ServiceResult, service_operation

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Números exibidos no painel."""
    total_products: int
    total_categories: int
    total_stores: int
    monthly_total: float
    recent_products: list[Product]


class ExpenseService:
    """Gastos de um mês calendário a partir dos produtos ativos do usuário."""

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    @service_operation
    def monthly(self, ctx: UserContext, year: int, month: int) -> ServiceResult[MonthlyExpenses]:
        products = self.store.query(Product, ctx.user_id)
        try:
            result = aggregate_monthly(products, year, month)
        except ValueError as e:
            return ServiceResult.validation(str(e))

        logger.debug(
            f"Gastos {month:02d}/{year} do usuário {ctx.user_id}: "
            f"{len(result.expenses)} produto(s), total={result.total}"
        )
        return ServiceResult.success(result)

    def by_category(self, ctx: Optional[UserContext], year: int, month: int) -> ServiceResult[list[CategoryExpense]]:
        result = self.monthly(ctx, year, month)
        if not result.ok:
            return ServiceResult(error=result.error)
        return ServiceResult.success(result.data.category_breakdown)


class DashboardService:
    """Resumo do painel: contagens, total do mês e compras recentes."""

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    @service_operation
    def summary(self, ctx: UserContext, now: Optional[datetime] = None) -> ServiceResult[DashboardSummary]:
        now = as_utc(now) if now else utc_now()

        products = self.store.query(Product, ctx.user_id)
        categories = self.store.query(Category, ctx.user_id)
        stores = self.store.query(Store, ctx.user_id)

        month = aggregate_monthly(products, now.year, now.month)

        return ServiceResult.success(DashboardSummary(
            total_products=len(products),
            total_categories=len(categories),
            total_stores=len(stores),
            monthly_total=month.total,
            recent_products=month.expenses[:settings.dashboard_recent_limit],
        ))
