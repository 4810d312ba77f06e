from django.urls import path

from .views import (
    CategoriesWithProductCountView,
    CategoriesWithProductsView,
    CategoryCanDeleteView,
    CategoryCountView,
    CategoryDetailsView,
    CategoryDetailView,
    CategoryListView,
    CategoryPagedView,
    CategorySearchView,
    ProductCountByCategoryView,
    ProductCountView,
    ProductDetailsView,
    ProductDetailView,
    ProductListView,
    ProductPagedView,
    ProductPriceRangeView,
    ProductsByCategoryView,
    ProductSearchView,
    TopCategoriesView,
)

urlpatterns = [
    path("products", ProductListView.as_view(), name="api-products-list"),
    path("products/count", ProductCountView.as_view(), name="api-products-count"),
    path("products/search", ProductSearchView.as_view(), name="api-products-search"),
    path("products/paged", ProductPagedView.as_view(), name="api-products-paged"),
    path(
        "products/price-range",
        ProductPriceRangeView.as_view(),
        name="api-products-price-range",
    ),
    path(
        "products/category/<uuid:category_id>",
        ProductsByCategoryView.as_view(),
        name="api-products-by-category",
    ),
    path(
        "products/category/<uuid:category_id>/count",
        ProductCountByCategoryView.as_view(),
        name="api-products-count-by-category",
    ),
    path(
        "products/<uuid:product_id>",
        ProductDetailView.as_view(),
        name="api-products-detail",
    ),
    path(
        "products/<uuid:product_id>/details",
        ProductDetailsView.as_view(),
        name="api-products-details",
    ),
    path("categories", CategoryListView.as_view(), name="api-categories-list"),
    path("categories/count", CategoryCountView.as_view(), name="api-categories-count"),
    path(
        "categories/search", CategorySearchView.as_view(), name="api-categories-search"
    ),
    path("categories/paged", CategoryPagedView.as_view(), name="api-categories-paged"),
    path(
        "categories/with-products",
        CategoriesWithProductsView.as_view(),
        name="api-categories-with-products",
    ),
    path(
        "categories/with-product-count",
        CategoriesWithProductCountView.as_view(),
        name="api-categories-with-product-count",
    ),
    path("categories/top", TopCategoriesView.as_view(), name="api-categories-top"),
    path(
        "categories/<uuid:category_id>",
        CategoryDetailView.as_view(),
        name="api-categories-detail",
    ),
    path(
        "categories/<uuid:category_id>/details",
        CategoryDetailsView.as_view(),
        name="api-categories-details",
    ),
    path(
        "categories/<uuid:category_id>/can-delete",
        CategoryCanDeleteView.as_view(),
        name="api-categories-can-delete",
    ),
]
