"""Filter clauses supported by the catalog repositories."""
import operator
from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from typing import Any, Optional
from uuid import UUID

from django.db.models import F, Q, Value
from django.db.models.functions import StrIndex
from django.db.models.lookups import GreaterThan

from apps.common.specification import Specification


def _contains(value: Optional[str], term: str) -> bool:
    return term in (value or "")


def _text_contains_q(term: str, *fields: str) -> Q:
    # LIKE folds case on SQLite; INSTR/STRPOS never do.
    clauses = [Q(GreaterThan(StrIndex(F(field), Value(term)), 0)) for field in fields]
    return reduce(operator.or_, clauses)


# Category clauses
@dataclass(frozen=True)
class CategoryNameEquals(Specification):
    name: str
    exclude_id: Optional[UUID] = None

    def to_q(self) -> Q:
        q = Q(name=self.name)
        if self.exclude_id is not None:
            q &= ~Q(pk=self.exclude_id)
        return q

    def is_satisfied_by(self, candidate: Any) -> bool:
        if self.exclude_id is not None and candidate.id == self.exclude_id:
            return False
        return candidate.name == self.name


@dataclass(frozen=True)
class CategoryTextContains(Specification):
    term: str

    def to_q(self) -> Q:
        return _text_contains_q(self.term, "name", "description")

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _contains(candidate.name, self.term) or _contains(
            candidate.description, self.term
        )


# Product clauses
@dataclass(frozen=True)
class ProductInCategory(Specification):
    category_id: UUID

    def to_q(self) -> Q:
        return Q(category_id=self.category_id)

    def is_satisfied_by(self, candidate: Any) -> bool:
        return candidate.category_id == self.category_id


@dataclass(frozen=True)
class ProductPriceBetween(Specification):
    min_price: Decimal
    max_price: Decimal

    def to_q(self) -> Q:
        return Q(price__gte=self.min_price, price__lte=self.max_price)

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.min_price <= Decimal(candidate.price) <= self.max_price


@dataclass(frozen=True)
class ProductTextContains(Specification):
    term: str

    def to_q(self) -> Q:
        return _text_contains_q(self.term, "name", "description")

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _contains(candidate.name, self.term) or _contains(
            candidate.description, self.term
        )
