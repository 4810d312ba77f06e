from django.conf import settings
from rest_framework import serializers

DEFAULT_PAGE_SIZE = getattr(settings, "CATALOG_DEFAULT_PAGE_SIZE", 10)
MAX_PAGE_SIZE = getattr(settings, "CATALOG_MAX_PAGE_SIZE", 100)


def _optional_text():
    # Blank and missing values reach the service, which reports them per field.
    return serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )


# --- request payloads ---
class CategoryWriteSerializer(serializers.Serializer):
    name = _optional_text()
    description = _optional_text()


class CategoryUpdateSerializer(CategoryWriteSerializer):
    id = serializers.UUIDField(required=False, allow_null=True)


class ProductWriteSerializer(serializers.Serializer):
    # 'id' is server-assigned and ignored on create.
    name = _optional_text()
    price = serializers.DecimalField(
        max_digits=18, decimal_places=2, required=False, allow_null=True
    )
    description = _optional_text()
    categoryId = serializers.UUIDField(
        source="category_id", required=False, allow_null=True
    )


class ProductUpdateSerializer(ProductWriteSerializer):
    id = serializers.UUIDField(required=False, allow_null=True)


# --- query parameters ---
class PagedQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, default=1)
    pageSize = serializers.IntegerField(
        required=False, default=DEFAULT_PAGE_SIZE, max_value=MAX_PAGE_SIZE
    )


class SearchQuerySerializer(serializers.Serializer):
    term = serializers.CharField(
        required=False, allow_blank=True, default="", trim_whitespace=False
    )


class PriceRangeQuerySerializer(serializers.Serializer):
    minPrice = serializers.DecimalField(max_digits=None, decimal_places=None)
    maxPrice = serializers.DecimalField(max_digits=None, decimal_places=None)


class TopQuerySerializer(serializers.Serializer):
    count = serializers.IntegerField(required=False, default=5)


# --- responses (DTO dataclasses) ---
class CategorySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")


class ProductSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=18, decimal_places=2)
    categoryName = serializers.CharField(source="category_name", allow_blank=True)


class CategoryDetailsSerializer(CategorySerializer):
    products = ProductSummarySerializer(many=True)


class CategorySummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    productCount = serializers.IntegerField(source="product_count")


class ProductSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=18, decimal_places=2)
    description = serializers.CharField(allow_blank=True)
    categoryId = serializers.UUIDField(source="category_id")
    categoryName = serializers.CharField(source="category_name", allow_blank=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")


class ProductDetailsSerializer(ProductSerializer):
    category = CategorySerializer(allow_null=True)


class PageSerializer(serializers.Serializer):
    page = serializers.IntegerField()
    pageSize = serializers.IntegerField(source="page_size")
    totalCount = serializers.IntegerField(source="total_count")
    totalPages = serializers.IntegerField(source="total_pages")
    hasPreviousPage = serializers.BooleanField(source="has_previous_page")
    hasNextPage = serializers.BooleanField(source="has_next_page")


class ProductPageSerializer(PageSerializer):
    items = ProductSerializer(many=True)


class CategoryPageSerializer(PageSerializer):
    items = CategorySerializer(many=True)


class CountSerializer(serializers.Serializer):
    count = serializers.IntegerField()


class CanDeleteSerializer(serializers.Serializer):
    canDelete = serializers.BooleanField()
