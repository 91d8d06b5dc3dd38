# products/serializers/category.py

from rest_framework import serializers

from products.models import Category


class CategorySerializer(serializers.ModelSerializer):
    """
    Category serializer.

    Rules:
    - slug is generated from name when omitted
    - products_count is only present when the queryset annotates it
    """

    name = serializers.CharField(required=True, allow_blank=False, max_length=255)
    slug = serializers.SlugField(required=False, allow_blank=True, max_length=255)
    products_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "image_url",
            "sort_order",
            "is_active",
            "products_count",
            "created_at",
        ]
        read_only_fields = ["id", "products_count", "created_at"]

    def validate_name(self, value: str):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name cannot be blank")
        return v

    def validate_slug(self, value: str):
        v = (value or "").strip().lower()
        if not v:
            return ""
        qs = Category.objects.filter(slug=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A category with this slug already exists.")
        return v


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]
