# cart/views/cart.py

"""
CART

GET    /cart/                             items + summary
DELETE /cart/                             clear
POST   /cart/items/                       add (merges)
PUT    /cart/items/{id}/                  set quantity
DELETE /cart/items/{id}/                  remove
POST   /cart/items/{id}/save-for-later/   move to wishlist
POST   /cart/validate/                    availability / stock / price check
POST   /cart/sync/                        merge a guest cart
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.responses import domain_error_response, error_response, success_response
from cart.models import CartItem
from cart.serializers import (
    AddCartItemSerializer,
    CartItemSerializer,
    SyncCartSerializer,
    UpdateCartItemSerializer,
    WishlistItemSerializer,
)
from cart.services import (
    CartError,
    ProductUnavailableError,
    add_item,
    cart_items,
    clear_cart,
    get_cart,
    remove_item,
    save_for_later,
    summarize,
    sync_cart,
    update_item,
    validate_cart,
)
from inventory.services import InsufficientStockError


def insufficient_stock_response(exc: InsufficientStockError):
    return domain_error_response(
        exc,
        product_id=str(exc.product.pk),
        available=exc.available,
        requested=exc.requested,
    )


def cart_payload(user) -> dict:
    cart = get_cart(user)
    return {
        "id": str(cart.pk),
        "items": CartItemSerializer(cart_items(cart), many=True).data,
        "summary": summarize(cart).as_dict(),
    }


def _own_item(request, item_id) -> CartItem:
    return get_object_or_404(CartItem.objects.select_related("product", "cart"), pk=item_id, cart__user=request.user)


class _CartView(APIView):
    permission_classes = [IsAuthenticated]


class CartView(_CartView):
    @extend_schema(tags=["Cart"], responses={200: dict})
    def get(self, request):
        return success_response(cart_payload(request.user))

    @extend_schema(tags=["Cart"], responses={200: dict})
    def delete(self, request):
        clear_cart(request.user)
        return success_response(cart_payload(request.user), message="Cart cleared.")


class CartItemListView(_CartView):
    @extend_schema(tags=["Cart"], request=AddCartItemSerializer, responses={201: dict})
    def post(self, request):
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            add_item(request.user, **serializer.validated_data)
        except ProductUnavailableError as exc:
            return error_response(code="NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND)
        except InsufficientStockError as exc:
            return insufficient_stock_response(exc)
        return success_response(
            cart_payload(request.user), message="Item added to cart.", http_status=status.HTTP_201_CREATED
        )


class CartItemDetailView(_CartView):
    @extend_schema(tags=["Cart"], request=UpdateCartItemSerializer, responses={200: dict})
    def put(self, request, item_id):
        item = _own_item(request, item_id)
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            update_item(item, quantity=serializer.validated_data["quantity"])
        except InsufficientStockError as exc:
            return insufficient_stock_response(exc)
        except CartError as exc:
            return domain_error_response(exc)
        return success_response(cart_payload(request.user), message="Cart updated.")

    patch = put

    @extend_schema(tags=["Cart"], responses={200: dict})
    def delete(self, request, item_id):
        remove_item(_own_item(request, item_id))
        return success_response(cart_payload(request.user), message="Item removed from cart.")


class SaveForLaterView(_CartView):
    @extend_schema(tags=["Cart"], request=None, responses={200: dict})
    def post(self, request, item_id):
        wish = save_for_later(_own_item(request, item_id))
        return success_response(
            cart_payload(request.user),
            message="Item moved to your wishlist.",
            wishlist_item=WishlistItemSerializer(wish).data,
        )


class ValidateCartView(_CartView):
    @extend_schema(tags=["Cart"], request=None, responses={200: dict})
    def post(self, request):
        result = validate_cart(request.user)
        result["summary"] = summarize(get_cart(request.user)).as_dict()
        return success_response(result)


class SyncCartView(_CartView):
    @extend_schema(tags=["Cart"], request=SyncCartSerializer, responses={200: dict})
    def post(self, request):
        serializer = SyncCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = sync_cart(request.user, serializer.validated_data["items"])
        return success_response(cart_payload(request.user), message="Cart synced.", **result)
