"""Serviço de comparação de preços ao longo do tempo."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models import Product, utc_now
from .aggregation import PriceTrend, compare_prices, trailing_window
from .auth import UserContext
from .entity_store import EntityStore
from .results import ServiceResult, service_operation

logger = logging.getLogger(__name__)


@dataclass
class PriceComparison:
    months: int
    start_date: datetime
    end_date: datetime
    products: list[PriceTrend]


class PriceComparisonService:
    """Carrega produtos e histórico do usuário e calcula as tendências."""

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    @service_operation
    def compare(
        self,
        ctx: UserContext,
        months_back: int = settings.comparison_default_months,
        now: Optional[datetime] = None,
    ) -> ServiceResult[PriceComparison]:
        if not 1 <= months_back <= settings.comparison_max_months:
            return ServiceResult.validation(
                f"Período deve estar entre 1 e {settings.comparison_max_months} meses"
            )

        now = now or utc_now()
        start, end = trailing_window(months_back, now)

        products = self.store.query(Product, ctx.user_id)
        history = self.store.history_for(p.id for p in products)
        trends = compare_prices(products, history, months_back, now=end)

        logger.debug(f"Comparação de {months_back} mês(es): {len(trends)} série(s)")
        return ServiceResult.success(PriceComparison(
            months=months_back,
            start_date=start,
            end_date=end,
            products=trends,
        ))
