"""Testes para as agregações de gastos e variação de preços."""

from datetime import UTC, datetime

import pytest

from minhascompras.models import PriceHistoryEntry, Product
from minhascompras.services.aggregation import (
    UNCATEGORIZED_ID,
    UNCATEGORIZED_LABEL,
    aggregate_monthly,
    compare_prices,
    month_window,
    percentage_change,
    subtract_months,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def make_product(pid, price, created_at, name="Arroz", category_id=1, category_name="Grãos", **kwargs):
    return Product(
        id=pid,
        owner_id=1,
        name=name,
        price=price,
        category_id=category_id,
        category_name=category_name,
        store_name=kwargs.pop("store_name", "Mercado Central"),
        created_at=created_at,
        updated_at=kwargs.pop("updated_at", None),
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )


def entry(product_id, price, date, store="Mercado Central"):
    return PriceHistoryEntry(product_id=product_id, price=price, store=store, date=date)


class TestMonthWindow:
    """Testes para janelas de tempo."""

    def test_regular_month(self):
        """Mês comum vai do dia 1 ao dia 1 do mês seguinte."""
        start, end = month_window(2024, 2)
        assert start == datetime(2024, 2, 1, tzinfo=UTC)
        assert end == datetime(2024, 3, 1, tzinfo=UTC)

    def test_december_rolls_over(self):
        """Dezembro termina em janeiro do ano seguinte."""
        start, end = month_window(2023, 12)
        assert end == datetime(2024, 1, 1, tzinfo=UTC)

    def test_invalid_month(self):
        """Mês fora de 1-12 gera ValueError."""
        with pytest.raises(ValueError):
            month_window(2024, 13)

    def test_subtract_months_clamps_day(self):
        """Dia é limitado ao fim do mês de destino."""
        assert subtract_months(datetime(2024, 3, 31, tzinfo=UTC), 1) == datetime(2024, 2, 29, tzinfo=UTC)
        assert subtract_months(datetime(2024, 1, 15, tzinfo=UTC), 3) == datetime(2023, 10, 15, tzinfo=UTC)


class TestMonthlyAggregation:
    """Testes para o total mensal e a divisão por categoria."""

    def test_empty_month(self):
        """Mês sem compras tem total zero e listas vazias."""
        result = aggregate_monthly([], 2024, 6)
        assert result.total == 0
        assert result.expenses == []
        assert result.category_breakdown == []

    def test_half_open_interval(self):
        """Início do mês entra, início do mês seguinte não."""
        on_start = make_product(1, 10.0, datetime(2024, 6, 1, tzinfo=UTC))
        on_end = make_product(2, 20.0, datetime(2024, 7, 1, tzinfo=UTC))
        result = aggregate_monthly([on_start, on_end], 2024, 6)
        assert [p.id for p in result.expenses] == [1]
        assert result.total == 10.0

    def test_naive_datetimes_are_treated_as_utc(self):
        """Datas sem timezone são tratadas como UTC."""
        naive = make_product(1, 5.0, datetime(2024, 6, 10, 8, 0))
        result = aggregate_monthly([naive], 2024, 6)
        assert result.total == 5.0

    def test_total_ignores_quantity(self):
        """Total soma apenas o preço."""
        product = make_product(1, 4.5, datetime(2024, 6, 3, tzinfo=UTC), quantity=3)
        assert aggregate_monthly([product], 2024, 6).total == 4.5

    def test_breakdown_sorted_and_reconciled(self):
        """Categorias ordenadas por total e somando o total do mês."""
        products = [
            make_product(1, 0.1, datetime(2024, 6, 2, tzinfo=UTC), category_id=1, category_name="Grãos"),
            make_product(2, 0.2, datetime(2024, 6, 3, tzinfo=UTC), category_id=2, category_name="Limpeza"),
            make_product(3, 0.7, datetime(2024, 6, 4, tzinfo=UTC), category_id=1, category_name="Grãos"),
            make_product(4, 3.3, datetime(2024, 6, 5, tzinfo=UTC), category_id=None, category_name=None),
        ]
        result = aggregate_monthly(products, 2024, 6)

        totals = [g.total for g in result.category_breakdown]
        assert totals == sorted(totals, reverse=True)
        assert sum(g.total for g in result.category_breakdown) == result.total

        first = result.category_breakdown[0]
        assert first.category_id == UNCATEGORIZED_ID
        assert first.category_name == UNCATEGORIZED_LABEL
        grains = next(g for g in result.category_breakdown if g.category_id == 1)
        assert [p.id for p in grains.items] == [3, 1]

    def test_expenses_sorted_by_creation_desc(self):
        """Compras do mês vêm da mais recente para a mais antiga."""
        products = [
            make_product(1, 1.0, datetime(2024, 6, 2, tzinfo=UTC)),
            make_product(2, 1.0, datetime(2024, 6, 20, tzinfo=UTC)),
            make_product(3, 1.0, datetime(2024, 6, 10, tzinfo=UTC)),
        ]
        result = aggregate_monthly(products, 2024, 6)
        assert [p.id for p in result.expenses] == [2, 3, 1]

    def test_inactive_products_are_ignored(self):
        """Produtos removidos não entram no total."""
        inactive = make_product(1, 9.0, datetime(2024, 6, 2, tzinfo=UTC), is_active=False)
        assert aggregate_monthly([inactive], 2024, 6).total == 0


class TestPriceComparison:
    """Testes para a variação de preços."""

    def test_single_point_has_zero_change(self):
        """Um único ponto não tem variação."""
        product = make_product(1, 8.0, datetime(2024, 5, 1, tzinfo=UTC))
        history = [entry(1, 8.0, datetime(2024, 5, 1, tzinfo=UTC))]

        [trend] = compare_prices([product], history, 3, now=NOW)

        assert trend.percentage_change == 0
        assert trend.price_change == 0
        assert trend.lowest_price == trend.highest_price == 8.0

    def test_price_moved_from_100_to_150(self):
        """De 100 para 150 é uma alta de 50%."""
        product = make_product(1, 150.0, datetime(2024, 4, 1, tzinfo=UTC),
                               updated_at=datetime(2024, 6, 1, tzinfo=UTC))
        history = [
            entry(1, 100.0, datetime(2024, 4, 1, tzinfo=UTC)),
            entry(1, 150.0, datetime(2024, 6, 1, tzinfo=UTC)),
        ]

        [trend] = compare_prices([product], history, 3, now=NOW)

        assert trend.percentage_change == 50.0
        assert trend.price_change == 50.0
        assert trend.lowest_price == 100.0
        assert trend.highest_price == 150.0
        assert [p.price for p in trend.price_history] == [150.0, 100.0]

    def test_zero_oldest_price_is_guarded(self):
        """Preço antigo zero não gera divisão por zero."""
        product = make_product(1, 10.0, datetime(2024, 5, 1, tzinfo=UTC))
        history = [
            entry(1, 0.0, datetime(2024, 5, 1, tzinfo=UTC)),
            entry(1, 10.0, datetime(2024, 6, 1, tzinfo=UTC)),
        ]

        [trend] = compare_prices([product], history, 3, now=NOW)

        assert trend.percentage_change == 0.0
        assert trend.price_change == 10.0

    def test_points_outside_window_are_ignored(self):
        """Pontos fora da janela são descartados."""
        product = make_product(1, 12.0, datetime(2023, 1, 1, tzinfo=UTC))
        history = [
            entry(1, 6.0, datetime(2023, 1, 1, tzinfo=UTC)),
            entry(1, 12.0, datetime(2024, 6, 1, tzinfo=UTC)),
        ]

        [trend] = compare_prices([product], history, 3, now=NOW)

        assert len(trend.price_history) == 1
        assert trend.percentage_change == 0
        assert trend.lowest_price == 12.0

    def test_no_points_in_window_uses_current_price(self):
        """Sem pontos na janela, mínimo e máximo usam o preço atual."""
        product = make_product(1, 7.0, datetime(2020, 1, 1, tzinfo=UTC))
        history = [entry(1, 7.0, datetime(2020, 1, 1, tzinfo=UTC))]

        [trend] = compare_prices([product], history, 3, now=NOW)

        assert trend.price_history == []
        assert trend.lowest_price == 7.0
        assert trend.highest_price == 7.0

    def test_grouped_by_name_and_category(self):
        """Mesmo nome e categoria formam uma série."""
        products = [
            make_product(1, 5.0, datetime(2024, 5, 1, tzinfo=UTC), name="Leite", category_id=1),
            make_product(2, 6.0, datetime(2024, 6, 1, tzinfo=UTC), name="Leite", category_id=1),
            make_product(3, 5.0, datetime(2024, 5, 1, tzinfo=UTC), name="Leite", category_id=2),
        ]
        history = [
            entry(1, 5.0, datetime(2024, 5, 1, tzinfo=UTC)),
            entry(2, 6.0, datetime(2024, 6, 1, tzinfo=UTC)),
            entry(3, 5.0, datetime(2024, 5, 1, tzinfo=UTC)),
        ]

        trends = compare_prices(products, history, 3, now=NOW)

        assert len(trends) == 2
        same_category = next(t for t in trends if t.category_id == 1)
        assert same_category.product_id == 2
        assert same_category.current_price == 6.0
        assert same_category.percentage_change == pytest.approx(20.0)
        assert len(same_category.price_history) == 2

    def test_sorted_by_absolute_change(self):
        """Séries ordenadas pela maior variação absoluta."""
        products = [
            make_product(1, 11.0, datetime(2024, 5, 1, tzinfo=UTC), name="Café",
                         updated_at=datetime(2024, 6, 1, tzinfo=UTC)),
            make_product(2, 5.0, datetime(2024, 5, 1, tzinfo=UTC), name="Açúcar",
                         updated_at=datetime(2024, 6, 1, tzinfo=UTC)),
        ]
        history = [
            entry(1, 10.0, datetime(2024, 5, 1, tzinfo=UTC)),
            entry(1, 11.0, datetime(2024, 6, 1, tzinfo=UTC)),
            entry(2, 10.0, datetime(2024, 5, 1, tzinfo=UTC)),
            entry(2, 5.0, datetime(2024, 6, 1, tzinfo=UTC)),
        ]

        trends = compare_prices(products, history, 3, now=NOW)

        assert [t.name for t in trends] == ["Açúcar", "Café"]
        assert trends[0].percentage_change == -50.0

    def test_invalid_months_back(self):
        """Período menor que 1 mês gera ValueError."""
        with pytest.raises(ValueError):
            compare_prices([], [], 0, now=NOW)

    def test_percentage_change_helper(self):
        """Cálculo da variação percentual."""
        assert percentage_change(150, 100) == 50.0
        assert percentage_change(10, 0) == 0.0
