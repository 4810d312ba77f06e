from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rest_framework import status


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ApplicationError(Exception):
    """
    Base class for domain errors raised from services and repositories.

    Args:
        code: Machine readable error code.
        message: Human readable explanation of the error.
        status_code: HTTP status the global handler answers with.
    """

    code = "APPLICATION_ERROR"
    title = "Request Error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    @property
    def errors(self) -> Optional[List[str]]:
        return None

    def extensions(self) -> Dict[str, Any]:
        """Kind-specific fields merged into the problem payload."""
        return {}


class ValidationFailedError(ApplicationError):
    code = "VALIDATION_ERROR"
    title = "Validation Failed"

    def __init__(self, errors: Iterable[FieldError]):
        self.field_errors: Tuple[FieldError, ...] = tuple(errors)
        super().__init__("Validation failed.")

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailedError":
        return cls([FieldError(field, message)])

    @property
    def errors(self) -> List[str]:
        return [str(e) for e in self.field_errors]


class EntityNotFoundError(ApplicationError):
    code = "NOT_FOUND"
    title = "Resource Not Found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, key: Any = None):
        self.entity = entity
        self.key = key
        if key is None:
            message = f"{entity} was not found."
        else:
            message = f"{entity} with id '{key}' was not found."
        super().__init__(message)

    def extensions(self) -> Dict[str, Any]:
        return {"entity": self.entity, "key": None if self.key is None else str(self.key)}


class ProductNotFoundError(EntityNotFoundError):
    def __init__(self, key: Any):
        super().__init__("Product", key)


class CategoryNotFoundError(EntityNotFoundError):
    def __init__(self, key: Any):
        super().__init__("Category", key)


class DuplicateNameError(ApplicationError):
    title = "Conflict"
    status_code = status.HTTP_409_CONFLICT
    entity = "Entity"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{self.entity} name '{name}' already exists.")

    def extensions(self) -> Dict[str, Any]:
        return {"name": self.name}


class DuplicateCategoryNameError(DuplicateNameError):
    code = "CATEGORY_DUPLICATE_NAME"
    entity = "Category"


# Product names may repeat, so no service raises this. It stays so the
# handler and clients share the full code table.
class DuplicateProductNameError(DuplicateNameError):
    code = "PRODUCT_DUPLICATE_NAME"
    entity = "Product"


class CategoryDeleteNotAllowedError(ApplicationError):
    code = "CATEGORY_DELETE_NOT_ALLOWED"
    title = "Delete Not Allowed"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, category_id: Any, product_count: int):
        self.category_id = category_id
        self.product_count = product_count
        super().__init__(
            f"Category '{category_id}' cannot be deleted because it still has "
            f"{product_count} product(s)."
        )

    @property
    def errors(self) -> List[str]:
        return [f"Category {self.category_id} still has {self.product_count} product(s)"]

    def extensions(self) -> Dict[str, Any]:
        return {"categoryId": str(self.category_id), "productCount": self.product_count}


class PaginationOutOfRangeError(ApplicationError):
    code = "PAGINATION_OUT_OF_RANGE"
    title = "Pagination Out Of Range"

    def __init__(self, requested_page: int, total_pages: int):
        self.requested_page = requested_page
        self.total_pages = total_pages
        super().__init__(
            f"Requested page '{requested_page}' is out of range. Total pages: {total_pages}."
        )

    @property
    def errors(self) -> List[str]:
        return [f"Requested={self.requested_page}; Total={self.total_pages}"]

    def extensions(self) -> Dict[str, Any]:
        return {"requestedPage": self.requested_page, "totalPages": self.total_pages}


class RepositoryOperationError(ApplicationError):
    """Wraps a storage failure so driver internals never reach the client."""

    code = "REPOSITORY_OPERATION_FAILED"
    title = "Repository Failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, operation: str, entity: str):
        self.operation = operation
        self.entity = entity
        super().__init__(
            f"Repository operation '{operation}' failed for entity '{entity}'."
        )


__all__ = [
    "FieldError",
    "ApplicationError",
    "ValidationFailedError",
    "EntityNotFoundError",
    "ProductNotFoundError",
    "CategoryNotFoundError",
    "DuplicateNameError",
    "DuplicateCategoryNameError",
    "DuplicateProductNameError",
    "CategoryDeleteNotAllowedError",
    "PaginationOutOfRangeError",
    "RepositoryOperationError",
]
