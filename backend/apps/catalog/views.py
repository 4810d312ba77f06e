from uuid import UUID

from django.urls import reverse
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.views import APIView

from apps.api.schemas import ProblemSerializer, envelope
from apps.api.utils import envelope_response
from apps.common import get_logger
from .container import build_category_service, build_product_service
from .serializers import (
    CanDeleteSerializer,
    CategoryDetailsSerializer,
    CategoryPageSerializer,
    CategorySerializer,
    CategorySummarySerializer,
    CategoryUpdateSerializer,
    CategoryWriteSerializer,
    CountSerializer,
    PagedQuerySerializer,
    PriceRangeQuerySerializer,
    ProductDetailsSerializer,
    ProductPageSerializer,
    ProductSerializer,
    ProductUpdateSerializer,
    ProductWriteSerializer,
    SearchQuerySerializer,
    TopQuerySerializer,
)

logger = get_logger(__name__).bind(component="catalog", layer="view")

PROBLEM = OpenApiResponse(response=ProblemSerializer)
EMPTY = envelope(serializers.JSONField(allow_null=True), "Empty")


def _query(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _payload(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _body_id_matches(path_id: UUID, validated) -> bool:
    return validated.get("id") == path_id


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class ProductViewBase(APIView):
    service = build_product_service()


@extend_schema(tags=["Products"])
class ProductListView(ProductViewBase):
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        responses={200: envelope(ProductSerializer(many=True), "ProductList")},
    )
    def get(self, request):
        self.log.debug("Listing products")
        data = self.service.list_products()
        return envelope_response(
            ProductSerializer(data, many=True).data, "Products retrieved"
        )

    @extend_schema(
        operation_id="products_create",
        summary="Create product",
        request=ProductWriteSerializer,
        responses={201: envelope(ProductSerializer(), "Product"), 400: PROBLEM},
    )
    def post(self, request):
        payload = _payload(ProductWriteSerializer, request)
        self.log.info("Creating product via API", name=payload.get("name"))
        dto = self.service.create_product(payload)
        self.log.info("Product created via API", product_id=dto.id)
        return envelope_response(
            ProductSerializer(dto).data,
            "Product created",
            status.HTTP_201_CREATED,
            headers={"Location": reverse("api-products-detail", args=[dto.id])},
        )


@extend_schema(tags=["Products"])
class ProductCountView(ProductViewBase):
    @extend_schema(
        operation_id="products_count",
        summary="Count products",
        responses={200: envelope(CountSerializer(), "ProductCount")},
    )
    def get(self, request):
        count = self.service.count_products()
        return envelope_response({"count": count}, "Product count retrieved")


@extend_schema(tags=["Products"])
class ProductDetailView(ProductViewBase):
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        responses={200: envelope(ProductSerializer(), "Product"), 404: PROBLEM},
    )
    def get(self, request, product_id: UUID):
        self.log.debug("Fetching product", product_id=product_id)
        dto = self.service.get_product(product_id)
        return envelope_response(ProductSerializer(dto).data, "Product retrieved")

    @extend_schema(
        operation_id="products_update",
        summary="Replace product",
        request=ProductUpdateSerializer,
        responses={
            200: envelope(ProductSerializer(), "Product"),
            400: PROBLEM,
            404: PROBLEM,
        },
    )
    def put(self, request, product_id: UUID):
        payload = _payload(ProductUpdateSerializer, request)
        if not _body_id_matches(product_id, payload):
            self.log.info(
                "Product update rejected: id mismatch",
                product_id=product_id,
                body_id=payload.get("id"),
            )
            return envelope_response(
                None,
                "Mismatched product id",
                status.HTTP_400_BAD_REQUEST,
                success=False,
            )
        self.log.info("Updating product via API", product_id=product_id)
        dto = self.service.update_product(payload)
        return envelope_response(ProductSerializer(dto).data, "Product updated")

    @extend_schema(
        operation_id="products_delete",
        summary="Delete product",
        responses={200: EMPTY, 404: PROBLEM},
    )
    def delete(self, request, product_id: UUID):
        self.log.info("Deleting product via API", product_id=product_id)
        self.service.delete_product(product_id)
        return envelope_response(None, "Product deleted")


@extend_schema(tags=["Products"])
class ProductDetailsView(ProductViewBase):
    @extend_schema(
        operation_id="products_details",
        summary="Get product with its category",
        responses={200: envelope(ProductDetailsSerializer(), "ProductDetails"), 404: PROBLEM},
    )
    def get(self, request, product_id: UUID):
        dto = self.service.get_product_details(product_id)
        return envelope_response(
            ProductDetailsSerializer(dto).data, "Product details retrieved"
        )


@extend_schema(tags=["Products"])
class ProductSearchView(ProductViewBase):
    @extend_schema(
        operation_id="products_search",
        summary="Search products by name or description",
        parameters=[OpenApiParameter("term", str, required=False)],
        responses={200: envelope(ProductSerializer(many=True), "ProductList")},
    )
    def get(self, request):
        term = _query(SearchQuerySerializer, request)["term"]
        data = self.service.search_products(term)
        return envelope_response(
            ProductSerializer(data, many=True).data, "Products search result"
        )


@extend_schema(tags=["Products"])
class ProductsByCategoryView(ProductViewBase):
    @extend_schema(
        operation_id="products_by_category",
        summary="List products of a category",
        responses={200: envelope(ProductSerializer(many=True), "ProductList")},
    )
    def get(self, request, category_id: UUID):
        data = self.service.list_products_by_category(category_id)
        return envelope_response(
            ProductSerializer(data, many=True).data, "Products by category"
        )


@extend_schema(tags=["Products"])
class ProductCountByCategoryView(ProductViewBase):
    @extend_schema(
        operation_id="products_count_by_category",
        summary="Count products of a category",
        responses={200: envelope(CountSerializer(), "ProductCount")},
    )
    def get(self, request, category_id: UUID):
        count = self.service.count_products_by_category(category_id)
        return envelope_response(
            {"count": count}, "Product count by category retrieved"
        )


@extend_schema(tags=["Products"])
class ProductPriceRangeView(ProductViewBase):
    @extend_schema(
        operation_id="products_price_range",
        summary="List products within a price range",
        parameters=[
            OpenApiParameter("minPrice", float, required=True),
            OpenApiParameter("maxPrice", float, required=True),
        ],
        responses={200: envelope(ProductSerializer(many=True), "ProductList"), 400: PROBLEM},
    )
    def get(self, request):
        query = _query(PriceRangeQuerySerializer, request)
        data = self.service.list_products_by_price_range(
            query["minPrice"], query["maxPrice"]
        )
        return envelope_response(
            ProductSerializer(data, many=True).data, "Products by price range"
        )


@extend_schema(tags=["Products"])
class ProductPagedView(ProductViewBase):
    @extend_schema(
        operation_id="products_paged",
        summary="Page through products",
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("pageSize", int, required=False),
        ],
        responses={200: envelope(ProductPageSerializer(), "ProductPage"), 400: PROBLEM},
    )
    def get(self, request):
        query = _query(PagedQuerySerializer, request)
        result = self.service.get_products_paged(query["page"], query["pageSize"])
        return envelope_response(
            ProductPageSerializer(result).data, "Products page retrieved"
        )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
class CategoryViewBase(APIView):
    service = build_category_service()


@extend_schema(tags=["Categories"])
class CategoryListView(CategoryViewBase):
    log = logger.bind(view="CategoryListView")

    @extend_schema(
        operation_id="categories_list",
        summary="List categories",
        responses={200: envelope(CategorySerializer(many=True), "CategoryList")},
    )
    def get(self, request):
        self.log.debug("Listing categories")
        data = self.service.list_categories()
        return envelope_response(
            CategorySerializer(data, many=True).data, "Categories retrieved"
        )

    @extend_schema(
        operation_id="categories_create",
        summary="Create category",
        request=CategoryWriteSerializer,
        responses={
            201: envelope(CategorySerializer(), "Category"),
            400: PROBLEM,
            409: PROBLEM,
        },
    )
    def post(self, request):
        payload = _payload(CategoryWriteSerializer, request)
        self.log.info("Creating category via API", name=payload.get("name"))
        dto = self.service.create_category(payload)
        self.log.info("Category created via API", category_id=dto.id)
        return envelope_response(
            CategorySerializer(dto).data,
            "Category created",
            status.HTTP_201_CREATED,
            headers={"Location": reverse("api-categories-detail", args=[dto.id])},
        )


@extend_schema(tags=["Categories"])
class CategoryCountView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_count",
        summary="Count categories",
        responses={200: envelope(CountSerializer(), "CategoryCount")},
    )
    def get(self, request):
        count = self.service.count_categories()
        return envelope_response({"count": count}, "Category count retrieved")


@extend_schema(tags=["Categories"])
class CategoryDetailView(CategoryViewBase):
    log = logger.bind(view="CategoryDetailView")

    @extend_schema(
        operation_id="categories_retrieve",
        summary="Get category",
        responses={200: envelope(CategorySerializer(), "Category"), 404: PROBLEM},
    )
    def get(self, request, category_id: UUID):
        self.log.debug("Fetching category", category_id=category_id)
        dto = self.service.get_category(category_id)
        return envelope_response(CategorySerializer(dto).data, "Category retrieved")

    @extend_schema(
        operation_id="categories_update",
        summary="Replace category",
        request=CategoryUpdateSerializer,
        responses={
            200: envelope(CategorySerializer(), "Category"),
            400: PROBLEM,
            404: PROBLEM,
            409: PROBLEM,
        },
    )
    def put(self, request, category_id: UUID):
        payload = _payload(CategoryUpdateSerializer, request)
        if not _body_id_matches(category_id, payload):
            self.log.info(
                "Category update rejected: id mismatch",
                category_id=category_id,
                body_id=payload.get("id"),
            )
            return envelope_response(
                None,
                "Mismatched category id",
                status.HTTP_400_BAD_REQUEST,
                success=False,
            )
        self.log.info("Updating category via API", category_id=category_id)
        dto = self.service.update_category(payload)
        return envelope_response(CategorySerializer(dto).data, "Category updated")

    @extend_schema(
        operation_id="categories_delete",
        summary="Delete category",
        responses={200: EMPTY, 404: PROBLEM, 409: PROBLEM},
    )
    def delete(self, request, category_id: UUID):
        self.log.info("Deleting category via API", category_id=category_id)
        self.service.delete_category(category_id)
        return envelope_response(None, "Category deleted")


@extend_schema(tags=["Categories"])
class CategoryDetailsView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_details",
        summary="Get category with its products",
        responses={200: envelope(CategoryDetailsSerializer(), "CategoryDetails"), 404: PROBLEM},
    )
    def get(self, request, category_id: UUID):
        dto = self.service.get_category_details(category_id)
        return envelope_response(
            CategoryDetailsSerializer(dto).data, "Category details retrieved"
        )


@extend_schema(tags=["Categories"])
class CategorySearchView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_search",
        summary="Search categories by name or description",
        parameters=[OpenApiParameter("term", str, required=False)],
        responses={200: envelope(CategorySerializer(many=True), "CategoryList")},
    )
    def get(self, request):
        term = _query(SearchQuerySerializer, request)["term"]
        data = self.service.search_categories(term)
        return envelope_response(
            CategorySerializer(data, many=True).data, "Categories search result"
        )


@extend_schema(tags=["Categories"])
class CategoryPagedView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_paged",
        summary="Page through categories",
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("pageSize", int, required=False),
        ],
        responses={200: envelope(CategoryPageSerializer(), "CategoryPage"), 400: PROBLEM},
    )
    def get(self, request):
        query = _query(PagedQuerySerializer, request)
        result = self.service.get_categories_paged(query["page"], query["pageSize"])
        return envelope_response(
            CategoryPageSerializer(result).data, "Categories page retrieved"
        )


@extend_schema(tags=["Categories"])
class CategoriesWithProductsView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_with_products",
        summary="List categories that have at least one product",
        responses={200: envelope(CategorySerializer(many=True), "CategoryList")},
    )
    def get(self, request):
        data = self.service.list_categories_with_products()
        return envelope_response(
            CategorySerializer(data, many=True).data,
            "Categories with products retrieved",
        )


@extend_schema(tags=["Categories"])
class CategoriesWithProductCountView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_with_product_count",
        summary="List categories with their product counts",
        responses={200: envelope(CategorySummarySerializer(many=True), "CategorySummaryList")},
    )
    def get(self, request):
        data = self.service.list_categories_with_product_count()
        return envelope_response(
            CategorySummarySerializer(data, many=True).data,
            "Category counts retrieved",
        )


@extend_schema(tags=["Categories"])
class TopCategoriesView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_top",
        summary="Categories with the most products",
        parameters=[OpenApiParameter("count", int, required=False)],
        responses={200: envelope(CategorySerializer(many=True), "CategoryList"), 400: PROBLEM},
    )
    def get(self, request):
        count = _query(TopQuerySerializer, request)["count"]
        data = self.service.top_categories(count)
        return envelope_response(
            CategorySerializer(data, many=True).data, "Top categories retrieved"
        )


@extend_schema(tags=["Categories"])
class CategoryCanDeleteView(CategoryViewBase):
    @extend_schema(
        operation_id="categories_can_delete",
        summary="Check whether a category can be deleted",
        responses={200: envelope(CanDeleteSerializer(), "CanDelete")},
    )
    def get(self, request, category_id: UUID):
        can_delete = self.service.can_delete_category(category_id)
        return envelope_response(
            {"canDelete": can_delete}, "Category delete status evaluated"
        )
