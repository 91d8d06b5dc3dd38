from .admin import AdminCategoryViewSet, AdminProductViewSet
from .public import CategoryViewSet, ProductViewSet

__all__ = [
    "AdminCategoryViewSet",
    "AdminProductViewSet",
    "CategoryViewSet",
    "ProductViewSet",
]
