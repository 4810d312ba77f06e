from contextlib import contextmanager
from typing import Any, Generic, Iterator, List, Optional, Type, TypeVar

from django.db import DatabaseError, models, transaction
from django.db.models import QuerySet

from .errors import RepositoryOperationError
from .logger import get_logger
from .specification import Specification

T = TypeVar("T", bound=models.Model)

logger = get_logger(__name__).bind(component="common", layer="repository")


class GenericRepository(Generic[T]):
    """Data access for one model class.

    Every mutating call commits on its own; there is no unit of work spanning
    several repository calls. Storage errors surface as
    ``RepositoryOperationError``.
    """

    def __init__(self, model: Type[T]):
        self.model = model
        self.entity_name = model.__name__
        self.log = logger.bind(entity=self.entity_name)

    # --- queries ---
    def get_all(self, *includes: str) -> List[T]:
        with self._guard("get_all"):
            return list(self._query(includes))

    def get_by_id(self, pk: Any, *includes: str) -> Optional[T]:
        with self._guard("get_by_id"):
            return self._query(includes).filter(pk=pk).first()

    def exists(self, pk: Any) -> bool:
        with self._guard("exists"):
            return self.model.objects.filter(pk=pk).exists()

    def find(self, spec: Specification, *includes: str) -> List[T]:
        if spec is None:
            raise ValueError("find requires a specification")
        with self._guard("find"):
            return list(self._query(includes).filter(spec.to_q()))

    def first_or_default(self, spec: Specification, *includes: str) -> Optional[T]:
        if spec is None:
            raise ValueError("first_or_default requires a specification")
        with self._guard("first_or_default"):
            return self._query(includes).filter(spec.to_q()).first()

    def count(self, spec: Optional[Specification] = None) -> int:
        with self._guard("count"):
            qs = self.model.objects.all()
            if spec is not None:
                qs = qs.filter(spec.to_q())
            return qs.count()

    def get_paged(
        self,
        page: int,
        page_size: int,
        spec: Optional[Specification] = None,
        *includes: str,
    ) -> List[T]:
        if page <= 0:
            raise ValueError("page must be greater than 0")
        if page_size <= 0:
            raise ValueError("page_size must be greater than 0")
        offset = (page - 1) * page_size
        with self._guard("get_paged"):
            qs = self._query(includes)
            if spec is not None:
                qs = qs.filter(spec.to_q())
            return list(qs[offset:offset + page_size])

    # --- mutations ---
    def create(self, entity: T) -> T:
        if entity is None:
            raise ValueError("create requires an entity")
        with self._guard("create"), transaction.atomic():
            entity.save(force_insert=True)
        self.log.debug("Entity created", pk=entity.pk)
        return entity

    def update(self, entity: T) -> T:
        if entity is None:
            raise ValueError("update requires an entity")
        with self._guard("update"), transaction.atomic():
            entity.save()
        self.log.debug("Entity updated", pk=entity.pk)
        return entity

    def delete(self, pk: Any) -> bool:
        with self._guard("delete"), transaction.atomic():
            entity = self.model.objects.filter(pk=pk).first()
            if entity is None:
                return False
            entity.delete()
        self.log.debug("Entity deleted", pk=pk)
        return True

    # --- helpers ---
    def _query(self, includes) -> QuerySet:
        qs = self.model.objects.all()
        joins, prefetches = [], []
        for name in includes:
            field = self.model._meta.get_field(name)
            if field.many_to_one or field.one_to_one:
                joins.append(name)
            else:
                prefetches.append(name)
        if joins:
            qs = qs.select_related(*joins)
        if prefetches:
            qs = qs.prefetch_related(*prefetches)
        return qs

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except DatabaseError as exc:
            self.log.error(
                "Repository operation failed",
                operation=operation,
                error=str(exc),
                exception=exc.__class__.__name__,
            )
            raise RepositoryOperationError(operation, self.entity_name) from exc
