"""MinhasCompras - registro de compras de mercado e variação de preços."""

__version__ = "1.0.0"
