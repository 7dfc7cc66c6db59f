"""Router para comparação de preços ao longo do tempo."""

from fastapi import APIRouter, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..schemas import PriceComparisonOut
from ..services.comparison import PriceComparisonService
from .deps import CurrentContext, unwrap

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.get("/prices", response_model=PriceComparisonOut)
@limiter.limit("30/minute")
def compare_prices(
    request: Request,
    db: DbSession,
    ctx: CurrentContext,
    months: int = Query(
        settings.comparison_default_months,
        ge=1,
        le=settings.comparison_max_months,
        description="Considerar preços dos últimos N meses",
    ),
):
    """
    Variação de preço de cada produto nos últimos N meses.

    Produtos com o mesmo nome e categoria formam uma única série. Retorna menor e
    maior preço, variação absoluta e percentual, ordenados pela maior variação.
    """
    result = unwrap(PriceComparisonService(db).compare(ctx, months))
    return PriceComparisonOut.model_validate(result, from_attributes=True)
