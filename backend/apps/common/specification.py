from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.db.models import Q


class Specification:
    """A named filter clause that the repository turns into an ORM lookup.

    Entities declare their supported clauses as small dataclasses. The
    repository only ever sees ``to_q()``; ``is_satisfied_by`` evaluates the
    same clause against an object already in memory.
    """

    def to_q(self) -> Q:
        raise NotImplementedError

    def is_satisfied_by(self, candidate: Any) -> bool:
        raise NotImplementedError

    def __and__(self, other: "Specification") -> "Specification":
        return AllOf(self, other)

    def __or__(self, other: "Specification") -> "Specification":
        return AnyOf(self, other)


@dataclass(frozen=True)
class AllOf(Specification):
    left: Specification
    right: Specification

    def to_q(self) -> Q:
        return self.left.to_q() & self.right.to_q()

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)


@dataclass(frozen=True)
class AnyOf(Specification):
    left: Specification
    right: Specification

    def to_q(self) -> Q:
        return self.left.to_q() | self.right.to_q()

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)
