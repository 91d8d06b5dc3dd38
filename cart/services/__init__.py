from .cart import (
    CartError,
    CartSummary,
    InvalidQuantityError,
    ProductUnavailableError,
    add_item,
    add_to_wishlist,
    cart_items,
    clear_cart,
    get_cart,
    remove_from_wishlist,
    remove_item,
    reorder_into_cart,
    save_for_later,
    summarize,
    sync_cart,
    update_item,
    validate_cart,
)

__all__ = [
    "CartError",
    "CartSummary",
    "InvalidQuantityError",
    "ProductUnavailableError",
    "add_item",
    "add_to_wishlist",
    "cart_items",
    "clear_cart",
    "get_cart",
    "remove_from_wishlist",
    "remove_item",
    "reorder_into_cart",
    "save_for_later",
    "summarize",
    "sync_cart",
    "update_item",
    "validate_cart",
]
