from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from uuid import UUID


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            parsed = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
    return parsed if parsed.is_finite() else None


def _uuid(value: Any) -> Optional[UUID]:
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


# Category Commands
@dataclass
class CreateCategoryCommand:
    name: Optional[str]
    description: Optional[str] = None

    @staticmethod
    def from_raw(payload: Dict[str, Any]) -> "CreateCategoryCommand":
        data = dict(payload or {})
        return CreateCategoryCommand(
            name=_text(data.get("name")),
            description=_text(data.get("description")),
        )


@dataclass
class UpdateCategoryCommand:
    id: Optional[UUID]
    name: Optional[str]
    description: Optional[str] = None

    @staticmethod
    def from_raw(payload: Dict[str, Any]) -> "UpdateCategoryCommand":
        data = dict(payload or {})
        return UpdateCategoryCommand(
            id=_uuid(data.get("id")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
        )


# Product Commands
@dataclass
class CreateProductCommand:
    name: Optional[str]
    price: Optional[Decimal]
    category_id: Optional[UUID]
    description: Optional[str] = None

    @staticmethod
    def from_raw(payload: Dict[str, Any]) -> "CreateProductCommand":
        data = dict(payload or {})
        # server assigns identity
        data.pop("id", None)
        return CreateProductCommand(
            name=_text(data.get("name")),
            price=_decimal(data.get("price")),
            category_id=_uuid(_pick(data, "category_id", "categoryId")),
            description=_text(data.get("description")),
        )


@dataclass
class UpdateProductCommand:
    id: Optional[UUID]
    name: Optional[str]
    price: Optional[Decimal]
    category_id: Optional[UUID]
    description: Optional[str] = None

    @staticmethod
    def from_raw(payload: Dict[str, Any]) -> "UpdateProductCommand":
        data = dict(payload or {})
        return UpdateProductCommand(
            id=_uuid(data.get("id")),
            name=_text(data.get("name")),
            price=_decimal(data.get("price")),
            category_id=_uuid(_pick(data, "category_id", "categoryId")),
            description=_text(data.get("description")),
        )
