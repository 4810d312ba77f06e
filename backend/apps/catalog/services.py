from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from apps.common import get_logger
from apps.common.errors import (
    CategoryDeleteNotAllowedError,
    CategoryNotFoundError,
    DuplicateCategoryNameError,
    FieldError,
    PaginationOutOfRangeError,
    ProductNotFoundError,
    ValidationFailedError,
)
from .commands import (
    CreateCategoryCommand,
    CreateProductCommand,
    UpdateCategoryCommand,
    UpdateProductCommand,
)
from .dtos import (
    CategoryDetailsDTO,
    CategoryDTO,
    CategorySummaryDTO,
    PagedResult,
    ProductDetailsDTO,
    ProductDTO,
    ValidationResult,
)
from .mappers import CategoryMapper, ProductMapper
from .protocols import CategoryRepositoryProtocol, ProductRepositoryProtocol
from .specifications import (
    CategoryNameEquals,
    CategoryTextContains,
    ProductInCategory,
    ProductPriceBetween,
    ProductTextContains,
)

logger = get_logger(__name__).bind(component="catalog", layer="service")

CATEGORY_NAME_MAX_LENGTH = 100
CATEGORY_DESCRIPTION_MAX_LENGTH = 500
PRODUCT_NAME_MAX_LENGTH = 100
PRODUCT_DESCRIPTION_MAX_LENGTH = 1000
# decimal(18, 2) column
PRODUCT_PRICE_QUANTUM = Decimal("0.01")
PRODUCT_PRICE_LIMIT = Decimal("1e16")

# Relation eager-loaded whenever a product DTO needs its category name.
WITH_CATEGORY = "category"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_paging(page: int, page_size: int) -> None:
    errors = []
    if page <= 0:
        errors.append(FieldError("page", "Page must be greater than 0"))
    if page_size <= 0:
        errors.append(FieldError("pageSize", "Page size must be greater than 0"))
    if errors:
        raise ValidationFailedError(errors)


def _check_page_in_range(page: int, page_size: int, total: int) -> None:
    if total <= 0:
        return
    total_pages = math.ceil(total / page_size)
    if page > total_pages:
        raise PaginationOutOfRangeError(page, total_pages)


class CategoryService:
    def __init__(
        self,
        categories: CategoryRepositoryProtocol,
        products: ProductRepositoryProtocol,
    ):
        self.categories = categories
        self.products = products
        self.logger = logger.bind(service="CategoryService")

    # --- basic CRUD ---
    def get_category(self, category_id: UUID) -> CategoryDTO:
        self.logger.debug("Fetching category", category_id=category_id)
        category = self.categories.get_by_id(category_id)
        if category is None:
            self.logger.info("Category not found", category_id=category_id)
            raise CategoryNotFoundError(category_id)
        return CategoryMapper.to_dto(category)

    def get_category_details(self, category_id: UUID) -> CategoryDetailsDTO:
        self.logger.debug("Fetching category details", category_id=category_id)
        category = self.categories.get_by_id(category_id)
        if category is None:
            self.logger.info("Category not found", category_id=category_id)
            raise CategoryNotFoundError(category_id)
        products = self.products.find(ProductInCategory(category.id), WITH_CATEGORY)
        return CategoryMapper.to_details_dto(category, products)

    def list_categories(self) -> List[CategoryDTO]:
        self.logger.debug("Listing categories")
        return CategoryMapper.many_to_dto(self.categories.get_all())

    def create_category(
        self, data: Union[Dict[str, Any], CreateCategoryCommand]
    ) -> CategoryDTO:
        cmd = (
            data
            if isinstance(data, CreateCategoryCommand)
            else CreateCategoryCommand.from_raw(data)
        )
        self.logger.info("Creating category", name=cmd.name)
        field_errors, duplicate = self._collect_errors(cmd.name, cmd.description)
        if field_errors:
            self.logger.info("Category create rejected", errors=len(field_errors))
            raise ValidationFailedError(field_errors)
        if duplicate:
            self.logger.info("Category create rejected: duplicate name", name=cmd.name)
            raise DuplicateCategoryNameError(cmd.name)
        category = self.categories.create(CategoryMapper.from_create(cmd))
        self.logger.info("Category created", category_id=category.id)
        return CategoryMapper.to_dto(category)

    def update_category(
        self, data: Union[Dict[str, Any], UpdateCategoryCommand]
    ) -> CategoryDTO:
        cmd = (
            data
            if isinstance(data, UpdateCategoryCommand)
            else UpdateCategoryCommand.from_raw(data)
        )
        self.logger.info("Updating category", category_id=cmd.id)
        category = self.categories.get_by_id(cmd.id) if cmd.id is not None else None
        if category is None:
            self.logger.warning("Category update failed: not found", category_id=cmd.id)
            raise CategoryNotFoundError(cmd.id)
        field_errors, duplicate = self._collect_errors(
            cmd.name, cmd.description, exclude_id=cmd.id
        )
        if field_errors:
            raise ValidationFailedError(field_errors)
        if duplicate:
            self.logger.info("Category update rejected: duplicate name", name=cmd.name)
            raise DuplicateCategoryNameError(cmd.name)
        CategoryMapper.apply_update(category, cmd)
        self.categories.update(category)
        self.logger.info("Category updated", category_id=category.id)
        return CategoryMapper.to_dto(category)

    def delete_category(self, category_id: UUID) -> bool:
        self.logger.info("Deleting category", category_id=category_id)
        if not self.categories.exists(category_id):
            self.logger.warning("Category delete failed: not found", category_id=category_id)
            raise CategoryNotFoundError(category_id)
        product_count = self.products.count(ProductInCategory(category_id))
        if product_count > 0:
            self.logger.info(
                "Category delete blocked by products",
                category_id=category_id,
                product_count=product_count,
            )
            raise CategoryDeleteNotAllowedError(category_id, product_count)
        deleted = self.categories.delete(category_id)
        self.logger.info("Category deleted", category_id=category_id)
        return deleted

    # --- queries ---
    def category_exists(self, category_id: UUID) -> bool:
        return self.categories.exists(category_id)

    def get_category_by_name(self, name: Optional[str]) -> CategoryDTO:
        if _is_blank(name):
            raise ValidationFailedError.single("name", "Category name is required")
        category = self.categories.first_or_default(CategoryNameEquals(name))
        if category is None:
            raise CategoryNotFoundError(name)
        return CategoryMapper.to_dto(category)

    def search_categories(self, term: Optional[str]) -> List[CategoryDTO]:
        if _is_blank(term):
            return self.list_categories()
        self.logger.debug("Searching categories", term=term)
        return CategoryMapper.many_to_dto(self.categories.find(CategoryTextContains(term)))

    def list_categories_with_products(self) -> List[CategoryDTO]:
        result = []
        for category in self.categories.get_all():
            if self.products.count(ProductInCategory(category.id)) > 0:
                result.append(CategoryMapper.to_dto(category))
        return result

    def list_categories_with_product_count(self) -> List[CategorySummaryDTO]:
        return [
            CategoryMapper.to_summary_dto(category, count)
            for category, count in self._categories_with_counts()
        ]

    def top_categories(self, count: int) -> List[CategoryDTO]:
        if count <= 0:
            raise ValidationFailedError.single("count", "Count must be greater than 0")
        ranked = sorted(
            self._categories_with_counts(), key=lambda pair: pair[1], reverse=True
        )
        return [CategoryMapper.to_dto(category) for category, _ in ranked[:count]]

    def can_delete_category(self, category_id: UUID) -> bool:
        return self.products.count(ProductInCategory(category_id)) == 0

    def get_categories_paged(self, page: int, page_size: int) -> PagedResult[CategoryDTO]:
        _check_paging(page, page_size)
        total = self.categories.count()
        _check_page_in_range(page, page_size, total)
        self.logger.debug("Paging categories", page=page, page_size=page_size, total=total)
        items = self.categories.get_paged(page, page_size)
        return PagedResult.create(CategoryMapper.many_to_dto(items), page, page_size, total)

    def count_categories(self) -> int:
        return self.categories.count()

    # --- validation ---
    def validate_category(self, cmd: CreateCategoryCommand) -> ValidationResult:
        field_errors, duplicate = self._collect_errors(cmd.name, cmd.description)
        return ValidationResult.from_errors(
            field_errors + ([self._duplicate_error()] if duplicate else [])
        )

    def validate_category_update(self, cmd: UpdateCategoryCommand) -> ValidationResult:
        errors = []
        if cmd.id is None or not self.categories.exists(cmd.id):
            errors.append(FieldError("id", "Category does not exist"))
        field_errors, duplicate = self._collect_errors(
            cmd.name, cmd.description, exclude_id=cmd.id
        )
        errors.extend(field_errors)
        if duplicate:
            errors.append(self._duplicate_error())
        return ValidationResult.from_errors(errors)

    def _collect_errors(
        self,
        name: Optional[str],
        description: Optional[str],
        exclude_id: Optional[UUID] = None,
    ) -> Tuple[List[FieldError], bool]:
        errors = []
        if _is_blank(name):
            errors.append(FieldError("name", "Category name is required"))
        elif len(name) > CATEGORY_NAME_MAX_LENGTH:
            errors.append(
                FieldError("name", "Category name cannot exceed 100 characters")
            )
        if description is not None and len(description) > CATEGORY_DESCRIPTION_MAX_LENGTH:
            errors.append(
                FieldError("description", "Category description cannot exceed 500 characters")
            )
        duplicate = False
        if not _is_blank(name):
            duplicate = (
                self.categories.first_or_default(CategoryNameEquals(name, exclude_id))
                is not None
            )
        return errors, duplicate

    @staticmethod
    def _duplicate_error() -> FieldError:
        return FieldError("name", "Category name already exists")

    def _categories_with_counts(self):
        # one count query per category
        for category in self.categories.get_all():
            yield category, self.products.count(ProductInCategory(category.id))


class ProductService:
    def __init__(
        self,
        products: ProductRepositoryProtocol,
        categories: CategoryRepositoryProtocol,
    ):
        self.products = products
        self.categories = categories
        self.logger = logger.bind(service="ProductService")

    # --- basic CRUD ---
    def get_product(self, product_id: UUID) -> ProductDTO:
        self.logger.debug("Fetching product", product_id=product_id)
        return ProductMapper.to_dto(self._load(product_id))

    def get_product_details(self, product_id: UUID) -> ProductDetailsDTO:
        self.logger.debug("Fetching product details", product_id=product_id)
        return ProductMapper.to_details_dto(self._load(product_id))

    def list_products(self) -> List[ProductDTO]:
        self.logger.debug("Listing products")
        return ProductMapper.many_to_dto(self.products.get_all(WITH_CATEGORY))

    def create_product(
        self, data: Union[Dict[str, Any], CreateProductCommand]
    ) -> ProductDTO:
        cmd = (
            data
            if isinstance(data, CreateProductCommand)
            else CreateProductCommand.from_raw(data)
        )
        self.logger.info("Creating product", name=cmd.name, category_id=cmd.category_id)
        result = self.validate_product(cmd)
        if not result.is_valid:
            self.logger.info("Product create rejected", errors=len(result.errors))
            raise ValidationFailedError(result.errors)
        product = self.products.create(ProductMapper.from_create(cmd))
        self.logger.info("Product created", product_id=product.id)
        return ProductMapper.to_dto(self._load(product.id))

    def update_product(
        self, data: Union[Dict[str, Any], UpdateProductCommand]
    ) -> ProductDTO:
        cmd = (
            data
            if isinstance(data, UpdateProductCommand)
            else UpdateProductCommand.from_raw(data)
        )
        self.logger.info("Updating product", product_id=cmd.id)
        product = self.products.get_by_id(cmd.id) if cmd.id is not None else None
        if product is None:
            self.logger.warning("Product update failed: not found", product_id=cmd.id)
            raise ProductNotFoundError(cmd.id)
        errors = self._field_errors(cmd.name, cmd.price, cmd.description, cmd.category_id)
        if errors:
            raise ValidationFailedError(errors)
        ProductMapper.apply_update(product, cmd)
        self.products.update(product)
        self.logger.info("Product updated", product_id=product.id)
        return ProductMapper.to_dto(self._load(product.id))

    def delete_product(self, product_id: UUID) -> bool:
        self.logger.info("Deleting product", product_id=product_id)
        if not self.products.delete(product_id):
            self.logger.warning("Product delete failed: not found", product_id=product_id)
            raise ProductNotFoundError(product_id)
        self.logger.info("Product deleted", product_id=product_id)
        return True

    # --- queries ---
    def product_exists(self, product_id: UUID) -> bool:
        return self.products.exists(product_id)

    def list_products_by_category(self, category_id: UUID) -> List[ProductDTO]:
        self.logger.debug("Listing products by category", category_id=category_id)
        return ProductMapper.many_to_dto(
            self.products.find(ProductInCategory(category_id), WITH_CATEGORY)
        )

    def count_products_by_category(self, category_id: UUID) -> int:
        return self.products.count(ProductInCategory(category_id))

    def list_products_by_price_range(
        self, min_price: Decimal, max_price: Decimal
    ) -> List[ProductDTO]:
        if min_price > max_price:
            raise ValidationFailedError.single(
                "minPrice", "Minimum price cannot exceed maximum price"
            )
        self.logger.debug("Listing products by price", min_price=min_price, max_price=max_price)
        return ProductMapper.many_to_dto(
            self.products.find(ProductPriceBetween(min_price, max_price), WITH_CATEGORY)
        )

    def search_products(self, term: Optional[str]) -> List[ProductDTO]:
        if _is_blank(term):
            return self.list_products()
        self.logger.debug("Searching products", term=term)
        return ProductMapper.many_to_dto(
            self.products.find(ProductTextContains(term), WITH_CATEGORY)
        )

    def get_products_paged(self, page: int, page_size: int) -> PagedResult[ProductDTO]:
        _check_paging(page, page_size)
        total = self.products.count()
        _check_page_in_range(page, page_size, total)
        self.logger.debug("Paging products", page=page, page_size=page_size, total=total)
        items = self.products.get_paged(page, page_size, None, WITH_CATEGORY)
        return PagedResult.create(ProductMapper.many_to_dto(items), page, page_size, total)

    def count_products(self) -> int:
        return self.products.count()

    # --- validation ---
    def validate_product(self, cmd: CreateProductCommand) -> ValidationResult:
        return ValidationResult.from_errors(
            self._field_errors(cmd.name, cmd.price, cmd.description, cmd.category_id)
        )

    def validate_product_update(self, cmd: UpdateProductCommand) -> ValidationResult:
        errors = []
        if cmd.id is None or not self.products.exists(cmd.id):
            errors.append(FieldError("id", "Product does not exist"))
        errors.extend(
            self._field_errors(cmd.name, cmd.price, cmd.description, cmd.category_id)
        )
        return ValidationResult.from_errors(errors)

    def _field_errors(
        self,
        name: Optional[str],
        price: Optional[Decimal],
        description: Optional[str],
        category_id: Optional[UUID],
    ) -> List[FieldError]:
        errors = []
        if _is_blank(name):
            errors.append(FieldError("name", "Product name is required"))
        elif len(name) > PRODUCT_NAME_MAX_LENGTH:
            errors.append(FieldError("name", "Product name cannot exceed 100 characters"))
        if price is None or not price.is_finite() or price <= 0:
            errors.append(FieldError("price", "Product price must be greater than 0"))
        elif price >= PRODUCT_PRICE_LIMIT:
            errors.append(FieldError("price", "Product price must be less than 10000000000000000"))
        elif price != price.quantize(PRODUCT_PRICE_QUANTUM):
            errors.append(
                FieldError("price", "Product price cannot have more than 2 decimal places")
            )
        if description is not None and len(description) > PRODUCT_DESCRIPTION_MAX_LENGTH:
            errors.append(
                FieldError("description", "Product description cannot exceed 1000 characters")
            )
        if category_id is None or not self.categories.exists(category_id):
            errors.append(FieldError("categoryId", "Category does not exist"))
        return errors

    def _load(self, product_id: UUID):
        product = self.products.get_by_id(product_id, WITH_CATEGORY)
        if product is None:
            self.logger.info("Product not found", product_id=product_id)
            raise ProductNotFoundError(product_id)
        return product
