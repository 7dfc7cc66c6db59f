"""Router para o painel principal do usuário."""

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..schemas import DashboardOut
from ..services.expenses import DashboardService
from .deps import CurrentContext, unwrap

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.get("", response_model=DashboardOut)
@limiter.limit("30/minute")
def get_dashboard(request: Request, db: DbSession, ctx: CurrentContext):
    """Contagens, total do mês corrente e compras mais recentes."""
    summary = unwrap(DashboardService(db).summary(ctx))
    return DashboardOut.model_validate(summary, from_attributes=True)
