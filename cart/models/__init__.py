from .cart import Cart, CartItem, WishlistItem

__all__ = ["Cart", "CartItem", "WishlistItem"]
