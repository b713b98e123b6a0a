# sweetshop/models.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Category(str, Enum):
    CHOCOLATE = "Chocolate"
    CANDY = "Candy"
    GUMMY = "Gummy"
    LOLLIPOP = "Lollipop"
    HARD_CANDY = "Hard Candy"
    SOFT_CANDY = "Soft Candy"
    OTHER = "Other"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Sweet(BaseModel):
    """An inventory item. `inStock` is always `quantity > 0`."""

    id: str
    name: str
    category: Category
    price: float
    quantity: int
    inStock: bool
    description: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime


class User(BaseModel):
    id: str
    name: str
    email: str
    role: Role = Role.USER
    createdAt: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class UserInDB(User):
    hashed_password: str

    def public(self) -> User:
        return User(**self.model_dump(exclude={"hashed_password"}))
