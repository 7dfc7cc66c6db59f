"""Testes para schemas Pydantic."""

import pytest
from pydantic import ValidationError

from minhascompras.schemas import (
    CategoryCreate,
    ProductCreate,
    ProductFilters,
    ProductSortField,
    ProductUnit,
    ProductUpdate,
    SortDirection,
    StoreUpdate,
)


class TestNamedRecordIn:
    """Testes para payloads de categoria e loja."""

    def test_name_is_stripped(self):
        """Remove espaços das pontas do nome."""
        assert CategoryCreate(name="  Bebidas  ").name == "Bebidas"
        assert StoreUpdate(name="\tFeira\n").name == "Feira"

    def test_name_too_long(self):
        """Rejeita nome com mais de 255 caracteres."""
        with pytest.raises(ValidationError):
            CategoryCreate(name="x" * 256)

    def test_name_required(self):
        """Nome é obrigatório."""
        with pytest.raises(ValidationError):
            CategoryCreate()


class TestProductCreate:
    """Testes para schema de criação de produto."""

    def test_defaults(self):
        """Valores padrão."""
        product = ProductCreate(name="Arroz", price=25.9)
        assert product.unit == ProductUnit.UNIT
        assert product.quantity == 1.0
        assert product.category_id is None

    @pytest.mark.parametrize("unit", ["unit", "kg", "g", "l", "ml"])
    def test_accepted_units(self, unit):
        """Aceita as unidades conhecidas."""
        assert ProductCreate(name="Arroz", price=1, unit=unit).unit.value == unit

    def test_unknown_unit(self):
        """Rejeita unidade desconhecida."""
        with pytest.raises(ValidationError):
            ProductCreate(name="Arroz", price=1, unit="dúzia")

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_must_be_positive(self, quantity):
        """Rejeita quantidade zero ou negativa."""
        with pytest.raises(ValidationError):
            ProductCreate(name="Arroz", price=1, quantity=quantity)

    def test_price_is_checked_by_service(self):
        """Preço zero passa no schema; a regra de negócio fica no serviço."""
        assert ProductCreate(name="Arroz", price=0).price == 0


class TestProductUpdate:
    """Testes para atualização parcial."""

    def test_only_sent_fields_are_set(self):
        """Apenas campos enviados aparecem no dump parcial."""
        update = ProductUpdate(price=3.5)
        assert update.model_dump(exclude_unset=True) == {"price": 3.5}


class TestProductFilters:
    """Testes para filtros de listagem."""

    def test_defaults(self):
        """Valores padrão."""
        filters = ProductFilters()
        assert filters.order_by == ProductSortField.CREATED_AT
        assert filters.direction == SortDirection.DESC

    def test_invalid_sort_field(self):
        """Rejeita campo de ordenação desconhecido."""
        with pytest.raises(ValidationError):
            ProductFilters(order_by="owner_id")
