# cart/urls.py

from django.urls import path

from cart.views import (
    CartItemDetailView,
    CartItemListView,
    CartView,
    SaveForLaterView,
    SyncCartView,
    ValidateCartView,
    WishlistItemView,
    WishlistView,
)

app_name = "cart"

urlpatterns = [
    path("cart/", CartView.as_view(), name="cart"),
    path("cart/items/", CartItemListView.as_view(), name="items"),
    path("cart/items/<uuid:item_id>/", CartItemDetailView.as_view(), name="item-detail"),
    path("cart/items/<uuid:item_id>/save-for-later/", SaveForLaterView.as_view(), name="save-for-later"),
    path("cart/validate/", ValidateCartView.as_view(), name="validate"),
    path("cart/sync/", SyncCartView.as_view(), name="sync"),
    path("customer/wishlist/", WishlistView.as_view(), name="wishlist"),
    path("customer/wishlist/<uuid:product_id>/", WishlistItemView.as_view(), name="wishlist-item"),
]
