# products/urls.py

"""
PRODUCTS URLS

Public catalog under /api/v1/products/ and /api/v1/categories/,
management under /api/v1/admin/products/ and /api/v1/admin/categories/.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import (
    AdminCategoryViewSet,
    AdminProductViewSet,
    CategoryViewSet,
    ProductViewSet,
)

app_name = "products"

router = SimpleRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"admin/products", AdminProductViewSet, basename="admin-product")
router.register(r"admin/categories", AdminCategoryViewSet, basename="admin-category")

urlpatterns = [
    path("", include(router.urls)),
]
