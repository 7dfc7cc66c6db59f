"""
Agregações de gastos e variação de preços.

Funções puras sobre registros já carregados; nenhuma consulta ao banco aqui.
"""

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Iterable, Optional

from ..models import PriceHistoryEntry, Product, as_utc, utc_now

UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_LABEL = "Sem categoria"


@dataclass
class CategoryExpense:
    """Gasto de uma categoria no mês."""
    category_id: int | str
    category_name: str
    total: float = 0.0
    items: list[Product] = field(default_factory=list)


@dataclass
class MonthlyExpenses:
    """Resultado da agregação mensal."""
    year: int
    month: int
    start_date: datetime
    end_date: datetime
    expenses: list[Product]
    total: float
    category_breakdown: list[CategoryExpense]


@dataclass
class PricePoint:
    """Ponto de preço dentro da janela."""
    price: float
    store: Optional[str]
    date: datetime


@dataclass
class PriceTrend:
    """Resumo de variação de preço de uma série (nome + categoria)."""
    product_id: int
    name: str
    category_id: Optional[int]
    category_name: Optional[str]
    store_name: Optional[str]
    current_price: float
    lowest_price: float
    highest_price: float
    price_change: float = 0.0
    percentage_change: float = 0.0
    price_history: list[PricePoint] = field(default_factory=list)


# =============================================================================
# JANELAS DE TEMPO
# =============================================================================

def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    """Intervalo semiaberto [primeiro instante do mês, primeiro instante do mês seguinte)."""
    if not 1 <= month <= 12:
        raise ValueError("O mês deve estar entre 1 e 12")
    start = datetime(year, month, 1, tzinfo=UTC)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=UTC)
    else:
        end = datetime(year, month + 1, 1, tzinfo=UTC)
    return start, end


def subtract_months(moment: datetime, months: int) -> datetime:
    """Volta N meses no calendário, limitando o dia ao fim do mês de destino."""
    index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def trailing_window(months_back: int, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Janela fechada [agora - N meses, agora]."""
    if months_back < 1:
        raise ValueError("Informe pelo menos 1 mês para comparar")
    end = as_utc(now) if now else utc_now()
    return subtract_months(end, months_back), end


# =============================================================================
# GASTOS MENSAIS
# =============================================================================

def aggregate_monthly(products: Iterable[Product], year: int, month: int) -> MonthlyExpenses:
    """
    Total e gasto por categoria dos produtos criados no mês.

    Soma apenas `price` (a quantidade não entra no total). O total é a soma
    dos totais por categoria, então os dois sempre fecham.
    """
    start, end = month_window(year, month)

    expenses = [
        p for p in products
        if p.is_active and start <= as_utc(p.created_at) < end
    ]
    expenses.sort(key=lambda p: as_utc(p.created_at), reverse=True)

    groups: dict[int | str, CategoryExpense] = {}
    for product in expenses:
        key = product.category_id if product.category_id is not None else UNCATEGORIZED_ID
        group = groups.get(key)
        if group is None:
            name = product.category_name if key != UNCATEGORIZED_ID else None
            group = groups[key] = CategoryExpense(
                category_id=key,
                category_name=name or UNCATEGORIZED_LABEL,
            )
        group.total += product.price or 0.0
        group.items.append(product)

    breakdown = sorted(groups.values(), key=lambda g: g.total, reverse=True)

    return MonthlyExpenses(
        year=year,
        month=month,
        start_date=start,
        end_date=end,
        expenses=expenses,
        total=sum(g.total for g in breakdown),
        category_breakdown=breakdown,
    )


# =============================================================================
# COMPARAÇÃO DE PREÇOS
# =============================================================================

def _last_written(product: Product) -> datetime:
    return as_utc(product.updated_at or product.created_at)


def percentage_change(current: float, oldest: float) -> float:
    """Variação percentual; 0.0 quando o preço de referência é zero."""
    if not oldest:
        return 0.0
    return (current - oldest) / oldest * 100


def compare_prices(
    products: Iterable[Product],
    history: Iterable[PriceHistoryEntry],
    months_back: int,
    now: Optional[datetime] = None,
) -> list[PriceTrend]:
    """
    Variação de preço por série de produtos na janela dos últimos N meses.

    Produtos com o mesmo nome e a mesma categoria formam uma série. O preço
    atual é o do produto escrito por último; mínimo e máximo vêm dos pontos
    dentro da janela (ou do preço atual, se não houver pontos). A lista sai
    ordenada pela maior variação percentual absoluta.
    """
    start, end = trailing_window(months_back, now)

    series: dict[tuple[str, Optional[int]], list[Product]] = defaultdict(list)
    for product in products:
        if product.is_active:
            series[(product.name, product.category_id)].append(product)

    key_by_product = {
        p.id: key for key, members in series.items() for p in members
    }
    points: dict[tuple[str, Optional[int]], list[PricePoint]] = defaultdict(list)
    for entry in history:
        key = key_by_product.get(entry.product_id)
        date = as_utc(entry.date)
        if key is not None and start <= date <= end:
            points[key].append(PricePoint(price=entry.price, store=entry.store, date=date))

    trends = []
    for key, members in series.items():
        latest = max(members, key=_last_written)
        current = latest.price or 0.0
        window = sorted(points.get(key, []), key=lambda pt: pt.date, reverse=True)
        prices = [pt.price for pt in window]

        trend = PriceTrend(
            product_id=latest.id,
            name=latest.name,
            category_id=latest.category_id,
            category_name=latest.category_name,
            store_name=latest.store_name,
            current_price=current,
            lowest_price=min(prices) if prices else current,
            highest_price=max(prices) if prices else current,
            price_history=window,
        )
        if len(window) > 1:
            oldest = window[-1].price
            trend.price_change = current - oldest
            trend.percentage_change = percentage_change(current, oldest)
        trends.append(trend)

    trends.sort(key=lambda t: abs(t.percentage_change), reverse=True)
    return trends
