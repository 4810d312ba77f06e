from __future__ import annotations

from typing import Any, List, Optional, Protocol, TypeVar

from apps.common.specification import Specification

from .models import Category, Product

T = TypeVar("T")


class RepositoryProtocol(Protocol[T]):
    def get_all(self, *includes: str) -> List[T]:
        ...

    def get_by_id(self, pk: Any, *includes: str) -> Optional[T]:
        ...

    def create(self, entity: T) -> T:
        ...

    def update(self, entity: T) -> T:
        ...

    def delete(self, pk: Any) -> bool:
        ...

    def exists(self, pk: Any) -> bool:
        ...

    def find(self, spec: Specification, *includes: str) -> List[T]:
        ...

    def first_or_default(self, spec: Specification, *includes: str) -> Optional[T]:
        ...

    def count(self, spec: Optional[Specification] = None) -> int:
        ...

    def get_paged(
        self,
        page: int,
        page_size: int,
        spec: Optional[Specification] = None,
        *includes: str,
    ) -> List[T]:
        ...


CategoryRepositoryProtocol = RepositoryProtocol[Category]
ProductRepositoryProtocol = RepositoryProtocol[Product]
