"""Router para gastos mensais."""

from datetime import UTC, datetime

from fastapi import APIRouter, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..schemas import CategoryExpenseOut, MonthlyExpensesOut
from ..services.expenses import ExpenseService
from .deps import CurrentContext, unwrap

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def _resolve_period(year: int | None, month: int | None) -> tuple[int, int]:
    """Ano/mês informados ou o mês corrente (UTC)."""
    now = datetime.now(UTC)
    return year or now.year, month or now.month


@router.get("/monthly", response_model=MonthlyExpensesOut)
@limiter.limit("60/minute")
def get_monthly_expenses(
    request: Request,
    db: DbSession,
    ctx: CurrentContext,
    year: int | None = Query(None, ge=1970, le=9998, description="Ano (padrão: atual)"),
    month: int | None = Query(None, ge=1, le=12, description="Mês 1-12 (padrão: atual)"),
):
    """
    Total gasto no mês e divisão por categoria.

    Considera produtos criados no intervalo [início do mês, início do mês seguinte).
    """
    year, month = _resolve_period(year, month)
    result = unwrap(ExpenseService(db).monthly(ctx, year, month))
    return MonthlyExpensesOut.model_validate(result, from_attributes=True)


@router.get("/by-category", response_model=list[CategoryExpenseOut])
@limiter.limit("60/minute")
def get_expenses_by_category(
    request: Request,
    db: DbSession,
    ctx: CurrentContext,
    year: int | None = Query(None, ge=1970, le=9998, description="Ano (padrão: atual)"),
    month: int | None = Query(None, ge=1, le=12, description="Mês 1-12 (padrão: atual)"),
):
    """Gastos do mês agrupados por categoria, do maior para o menor."""
    year, month = _resolve_period(year, month)
    groups = unwrap(ExpenseService(db).by_category(ctx, year, month))
    return [CategoryExpenseOut.model_validate(g, from_attributes=True) for g in groups]
