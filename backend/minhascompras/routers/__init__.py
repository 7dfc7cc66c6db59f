"""Routers module."""

from .auth import router as auth_router
from .categories import router as categories_router
from .comparison import router as comparison_router
from .dashboard import router as dashboard_router
from .expenses import router as expenses_router
from .products import router as products_router
from .stores import router as stores_router

__all__ = [
    "auth_router",
    "categories_router",
    "comparison_router",
    "dashboard_router",
    "expenses_router",
    "products_router",
    "stores_router",
]
