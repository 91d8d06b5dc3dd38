from .cart import (
    CartItemDetailView,
    CartItemListView,
    CartView,
    SaveForLaterView,
    SyncCartView,
    ValidateCartView,
)
from .wishlist import WishlistItemView, WishlistView

__all__ = [
    "CartItemDetailView",
    "CartItemListView",
    "CartView",
    "SaveForLaterView",
    "SyncCartView",
    "ValidateCartView",
    "WishlistItemView",
    "WishlistView",
]
