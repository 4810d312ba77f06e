from datetime import datetime, timedelta
from typing import Any, Iterable, List, Optional

from django.utils import timezone

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
    ProductDetailsDTO,
    ProductDTO,
    ProductSummaryDTO,
)
from .models import Category, Product

_TICK = timedelta(microseconds=1)


def touch(entity: Any, now: Optional[datetime] = None) -> datetime:
    """Refresh ``updated_at`` so that it always moves forward."""
    now = now or timezone.now()
    previous = getattr(entity, "updated_at", None)
    if previous is not None and now <= previous:
        now = previous + _TICK
    entity.updated_at = now
    return now


def loaded_category(product: Any) -> Optional[Any]:
    """Return the product's category only when it was eager-loaded."""
    if not Product._meta.get_field("category").is_cached(product):
        return None
    return product.category


class CategoryMapper:
    @staticmethod
    def to_dto(category: Category) -> CategoryDTO:
        return CategoryDTO(
            id=category.id,
            name=category.name,
            description=category.description or "",
            created_at=category.created_at,
            updated_at=category.updated_at,
        )

    @staticmethod
    def to_details_dto(
        category: Category, products: Iterable[Product] = ()
    ) -> CategoryDetailsDTO:
        return CategoryDetailsDTO(
            id=category.id,
            name=category.name,
            description=category.description or "",
            created_at=category.created_at,
            updated_at=category.updated_at,
            products=ProductMapper.many_to_summary_dto(products),
        )

    @staticmethod
    def to_summary_dto(category: Category, product_count: int) -> CategorySummaryDTO:
        return CategorySummaryDTO(
            id=category.id, name=category.name, product_count=product_count
        )

    @staticmethod
    def many_to_dto(categories: Iterable[Category]) -> List[CategoryDTO]:
        return [CategoryMapper.to_dto(c) for c in categories]

    @staticmethod
    def from_create(cmd: CreateCategoryCommand) -> Category:
        now = timezone.now()
        return Category(
            name=cmd.name,
            description=cmd.description or "",
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def apply_update(category: Category, cmd: UpdateCategoryCommand) -> Category:
        category.name = cmd.name
        category.description = cmd.description or ""
        touch(category)
        return category


class ProductMapper:
    @staticmethod
    def to_dto(product: Product) -> ProductDTO:
        category = loaded_category(product)
        return ProductDTO(
            id=product.id,
            name=product.name,
            price=product.price,
            description=product.description or "",
            category_id=product.category_id,
            category_name=category.name if category is not None else "",
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    @staticmethod
    def to_details_dto(product: Product) -> ProductDetailsDTO:
        category = loaded_category(product)
        return ProductDetailsDTO(
            id=product.id,
            name=product.name,
            price=product.price,
            description=product.description or "",
            category_id=product.category_id,
            category_name=category.name if category is not None else "",
            created_at=product.created_at,
            updated_at=product.updated_at,
            category=CategoryMapper.to_dto(category) if category is not None else None,
        )

    @staticmethod
    def to_summary_dto(product: Product) -> ProductSummaryDTO:
        category = loaded_category(product)
        return ProductSummaryDTO(
            id=product.id,
            name=product.name,
            price=product.price,
            category_name=category.name if category is not None else "",
        )

    @staticmethod
    def many_to_dto(products: Iterable[Product]) -> List[ProductDTO]:
        return [ProductMapper.to_dto(p) for p in products]

    @staticmethod
    def many_to_summary_dto(products: Iterable[Product]) -> List[ProductSummaryDTO]:
        return [ProductMapper.to_summary_dto(p) for p in products]

    @staticmethod
    def from_create(cmd: CreateProductCommand) -> Product:
        now = timezone.now()
        return Product(
            name=cmd.name,
            price=cmd.price,
            description=cmd.description or "",
            category_id=cmd.category_id,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def apply_update(product: Product, cmd: UpdateProductCommand) -> Product:
        product.name = cmd.name
        product.price = cmd.price
        product.description = cmd.description or ""
        product.category_id = cmd.category_id
        touch(product)
        return product
