# cart/views/wishlist.py

"""
GET    /customer/wishlist/
POST   /customer/wishlist/                {product_id}
DELETE /customer/wishlist/{product_id}/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.pagination import paginate
from backend.responses import error_response, success_response
from cart.models import WishlistItem
from cart.serializers import AddWishlistItemSerializer, WishlistItemSerializer
from cart.services import ProductUnavailableError, add_to_wishlist, remove_from_wishlist
from store.services import settings as site_settings


class WishlistView(APIView):
    permission_classes = [IsAuthenticated]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.wishlist_enabled = bool(site_settings.get_setting("wishlist_enabled"))

    def _disabled(self):
        return error_response(
            code="FEATURE_DISABLED", message="The wishlist is not available.", http_status=status.HTTP_404_NOT_FOUND
        )

    @extend_schema(tags=["Wishlist"], responses={200: WishlistItemSerializer(many=True)})
    def get(self, request):
        if not self.wishlist_enabled:
            return self._disabled()
        qs = WishlistItem.objects.filter(user=request.user).select_related("product", "product__category")
        return paginate(self, qs, WishlistItemSerializer)

    @extend_schema(tags=["Wishlist"], request=AddWishlistItemSerializer, responses={201: WishlistItemSerializer})
    def post(self, request):
        if not self.wishlist_enabled:
            return self._disabled()
        serializer = AddWishlistItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item, created = add_to_wishlist(request.user, product_id=serializer.validated_data["product_id"])
        except ProductUnavailableError as exc:
            return error_response(code="NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND)
        return success_response(
            WishlistItemSerializer(item).data,
            message="Added to wishlist." if created else "Already in your wishlist.",
            http_status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class WishlistItemView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Wishlist"], responses={200: dict})
    def delete(self, request, product_id):
        if not remove_from_wishlist(request.user, product_id=product_id):
            return error_response(
                code="NOT_FOUND", message="Product is not in your wishlist.", http_status=status.HTTP_404_NOT_FOUND
            )
        return success_response(message="Removed from wishlist.")
