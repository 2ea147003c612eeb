# storefront/db/schemas.py
from typing import Annotated, List, Optional

from fastapi import Path
from pydantic import BaseModel, Field

from storefront.db.models import RoleEnum, INT32_MAX

# id из пути: только то, что помещается в int4
PathId = Annotated[int, Path(ge=1, le=INT32_MAX)]


# Схема для категории (Category)
class CategoryBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class Category(CategoryBase):
    id: int

    class Config:
        from_attributes = True


# Схема для товара (Product)
class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    color: Optional[str] = None
    stock: int = Field(default=0, ge=0, le=INT32_MAX)
    image: Optional[str] = None
    active: bool = True
    featured: bool = False
    category_id: Optional[int] = Field(default=None, ge=1, le=INT32_MAX)  # None значит "без категории"


class Product(ProductBase):
    id: int

    class Config:
        from_attributes = True


# Корзина
class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1, le=INT32_MAX)


class CartItemResponse(BaseModel):
    product_id: int
    quantity: int
    product: Product

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    user_id: int
    items: List[CartItemResponse] = []
    total_price: float = 0.0


# Пользователи и токены
class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)


class User(BaseModel):
    id: int
    username: str
    role: RoleEnum
    is_active: bool = True

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
