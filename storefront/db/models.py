# storefront/db/models.py
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.db.database import Base


# Верхняя граница Integer-колонок (int4 в PostgreSQL)
INT32_MAX = 2 ** 31 - 1


# Enum для ролей пользователя
class RoleEnum(str, PyEnum):
    user = "user"  # Обычный пользователь
    admin = "admin"  # Администратор


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
    role = Column(Enum(RoleEnum), default=RoleEnum.user, nullable=False)

    cart_items = relationship("ShoppingCartItem", back_populates="user", cascade="all, delete-orphan")


class Category(Base):
    __tablename__ = "category"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)

    # Связь с товарами, удаление категории не трогает товары
    products = relationship("Product", back_populates="category", passive_deletes=True)


class Product(Base):
    __tablename__ = "product"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    price = Column(Float, nullable=False, index=True)
    color = Column(String, nullable=True, index=True)
    stock = Column(Integer, default=0)  # Количество в наличии
    image = Column(String, nullable=True)  # Путь к изображению
    active = Column(Boolean, default=True)  # Признак активного товара
    featured = Column(Boolean, default=False)
    category_id = Column(Integer, ForeignKey("category.id", ondelete="SET NULL"), nullable=True, index=True)

    category = relationship("Category", back_populates="products")
    cart_items = relationship("ShoppingCartItem", back_populates="product", passive_deletes=True)


class ShoppingCartItem(Base):
    __tablename__ = "shopping_cart"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_shopping_cart_quantity_positive"),
    )

    # (user_id, product_id) уникальна, на ней держится upsert
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(Integer, ForeignKey("product.id", ondelete="CASCADE"), primary_key=True)
    quantity = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="cart_items")
    product = relationship("Product", back_populates="cart_items")
