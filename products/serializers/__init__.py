from .category import CategorySerializer, CategorySummarySerializer
from .product import AdminProductSerializer, ProductSearchResultSerializer, ProductSerializer

__all__ = [
    "AdminProductSerializer",
    "CategorySerializer",
    "CategorySummarySerializer",
    "ProductSearchResultSerializer",
    "ProductSerializer",
]
