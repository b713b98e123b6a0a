from datetime import datetime, timezone
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .models import Category

# Request bodies accepted by the HTTP layer.

EMAIL_PATTERN = r"^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$"


class SweetIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=100)
    category: Category
    price: float = Field(gt=0)
    quantity: int = Field(ge=0)
    description: Optional[str] = Field(default=None, max_length=500)


class SweetUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    category: Optional[Category] = None
    price: Optional[float] = Field(default=None, gt=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, max_length=500)

    def changes(self) -> Dict[str, Any]:
        # Only the fields the caller actually sent; null means "leave as is".
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PurchaseIn(BaseModel):
    # Missing or null means one unit; range is checked by the purchase service.
    # Strict: true, "3" and 2.0 are not quantities.
    quantity: Optional[StrictInt] = None


class RegisterIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


class LoginIn(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _make_sweet_dict(sweet_id: str, s: SweetIn) -> Dict[str, Any]:
    now = utcnow()
    return {
        "id": sweet_id,
        "name": s.name,
        "category": s.category,
        "price": s.price,
        "quantity": s.quantity,
        "inStock": s.quantity > 0,
        "description": s.description,
        "createdAt": now,
        "updatedAt": now,
    }
