"""DTO dataclasses only. Mapping logic lives in mappers.py."""
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, Sequence, TypeVar
from uuid import UUID

from apps.common.errors import FieldError

T = TypeVar("T")


@dataclass
class CategoryDTO:
    id: UUID
    name: str
    description: str
    created_at: datetime
    updated_at: datetime


@dataclass
class ProductSummaryDTO:
    id: UUID
    name: str
    price: Decimal
    category_name: str


@dataclass
class CategoryDetailsDTO:
    id: UUID
    name: str
    description: str
    created_at: datetime
    updated_at: datetime
    products: List[ProductSummaryDTO] = field(default_factory=list)


@dataclass
class CategorySummaryDTO:
    id: UUID
    name: str
    product_count: int


@dataclass
class ProductDTO:
    id: UUID
    name: str
    price: Decimal
    description: str
    category_id: UUID
    category_name: str
    created_at: datetime
    updated_at: datetime


@dataclass
class ProductDetailsDTO(ProductDTO):
    category: Optional[CategoryDTO] = None


@dataclass
class PagedResult(Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def create(
        cls, items: Sequence[T], page: int, page_size: int, total_count: int
    ) -> "PagedResult[T]":
        total_pages = math.ceil(total_count / page_size) if page_size > 0 else 0
        return cls(
            items=list(items),
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            has_previous_page=page > 1,
            has_next_page=page < total_pages,
        )


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[FieldError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: Sequence[FieldError]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=list(errors))
