# storefront/db/functions.py
import logging

from fastapi import HTTPException
from sqlalchemy import delete, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import contains_eager

from storefront.db.models import User, RoleEnum, Category, Product, ShoppingCartItem
from storefront.db.schemas import ProductBase, CategoryBase, CartResponse, CartItemResponse

logger = logging.getLogger(__name__)


# ---------- Пользователи ----------

async def get_user_by_id(db: AsyncSession, user_id: int):
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str):
    result = await db.execute(select(User).filter(User.username == username))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, username: str, hashed_password: str, role: RoleEnum = RoleEnum.user):
    if await get_user_by_username(db, username):
        raise HTTPException(status_code=409, detail=f"User {username} already exists")

    db_user = User(username=username, hashed_password=hashed_password, role=role, is_active=True)
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        # Параллельная регистрация с тем же именем
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"User {username} already exists")
    await db.refresh(db_user)
    logger.info("Created user %s with role %s", username, role.value)
    return db_user


# ---------- Категории ----------

async def get_all_categories(db: AsyncSession):
    result = await db.execute(select(Category).order_by(Category.id))
    return result.scalars().all()


async def get_category_by_id(db: AsyncSession, category_id: int):
    result = await db.execute(select(Category).filter(Category.id == category_id))
    return result.scalar_one_or_none()


async def create_category(db: AsyncSession, data: CategoryBase):
    category = Category(name=data.name, description=data.description)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.name)
    return category


async def update_category(db: AsyncSession, category_id: int, data: CategoryBase):
    category = await get_category_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    category.name = data.name
    category.description = data.description
    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: int):
    """Удаляет категорию, товары остаются без категории."""
    category = await get_category_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    await db.execute(
        update(Product).where(Product.category_id == category_id).values(category_id=None)
    )
    await db.delete(category)
    await db.commit()
    logger.info("Deleted category %s", category_id)
    return category


# ---------- Товары ----------

async def get_all_products(
    db: AsyncSession,
    category: int = None,
    min_price: float = None,
    max_price: float = None,
    color: str = None,
    search: str = '',
    skip: int = 0,
    limit: int = 100,
):
    """
    Список товаров с фильтрами. Все фильтры объединяются через AND,
    границы цены включительные.
    """
    if min_price is not None and max_price is not None and min_price > max_price:
        raise HTTPException(status_code=400, detail="minPrice must not exceed maxPrice")

    query = select(Product)
    if category is not None:
        query = query.filter(Product.category_id == category)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if color:
        query = query.filter(Product.color == color)
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    result = await db.execute(query.order_by(Product.id).offset(skip).limit(limit))
    return result.scalars().all()


async def get_product_by_id(db: AsyncSession, product_id: int):
    result = await db.execute(select(Product).filter(Product.id == product_id))
    return result.scalar_one_or_none()


async def _check_category(db: AsyncSession, category_id):
    if category_id is not None and not await get_category_by_id(db, category_id):
        raise HTTPException(status_code=400, detail=f"Category {category_id} does not exist")


# Создание нового товара
async def create_product(db: AsyncSession, data: ProductBase):
    await _check_category(db, data.category_id)
    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


# Обновление продукта: меняем существующую строку, новую не создаём
async def update_product(db: AsyncSession, product_id: int, data: ProductBase):
    product = await get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    await _check_category(db, data.category_id)

    for field, value in data.model_dump().items():
        setattr(product, field, value)
    await db.commit()
    await db.refresh(product)
    return product


# Удаление товара вместе со строками корзин
async def delete_product(db: AsyncSession, product_id: int):
    product = await get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    await db.execute(delete(ShoppingCartItem).where(ShoppingCartItem.product_id == product_id))
    await db.delete(product)
    await db.commit()
    logger.info("Deleted product %s", product_id)
    return product


# ---------- Корзина ----------

async def get_cart(db: AsyncSession, user_id: int) -> CartResponse:
    """
    Корзина пользователя вместе с данными товаров.
    Пустая корзина это не ошибка.
    """
    result = await db.execute(
        select(ShoppingCartItem)
        .join(ShoppingCartItem.product)
        .options(contains_eager(ShoppingCartItem.product))
        .filter(ShoppingCartItem.user_id == user_id)
        .order_by(ShoppingCartItem.product_id)
        .execution_options(populate_existing=True)
    )
    rows = result.scalars().all()

    items = [CartItemResponse.model_validate(row) for row in rows]
    total_price = sum(item.product.price * item.quantity for item in items)
    return CartResponse(user_id=user_id, items=items, total_price=round(total_price, 2))


def _upsert_insert(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Cart upsert is not supported for dialect {dialect}")


async def add_item(db: AsyncSession, user_id: int, product_id: int) -> CartResponse:
    """
    Добавляет одну единицу товара в корзину.

    Insert-or-increment одним запросом по ключу (user_id, product_id),
    поэтому параллельные вызовы не теряют инкременты и не дублируют строки.
    """
    if not await get_product_by_id(db, product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    insert = _upsert_insert(db)
    stmt = insert(ShoppingCartItem).values(user_id=user_id, product_id=product_id, quantity=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "product_id"],
        set_={"quantity": ShoppingCartItem.quantity + 1},
    )
    try:
        await db.execute(stmt)
        await db.commit()
    except IntegrityError:
        # товар удалили между проверкой и вставкой
        await db.rollback()
        raise HTTPException(status_code=404, detail="Product not found")
    logger.debug("User %s added product %s to cart", user_id, product_id)
    return await get_cart(db, user_id)


async def _get_cart_item(db: AsyncSession, user_id: int, product_id: int):
    result = await db.execute(
        select(ShoppingCartItem).filter(
            ShoppingCartItem.user_id == user_id,
            ShoppingCartItem.product_id == product_id,
        )
    )
    return result.scalar_one_or_none()


# Обновление количества товара в корзине (абсолютное значение)
async def update_item(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> CartResponse:
    if quantity < 1:
        raise HTTPException(status_code=400, detail="Quantity must be greater than zero.")

    cart_item = await _get_cart_item(db, user_id, product_id)
    if not cart_item:
        raise HTTPException(status_code=404, detail="Product not found in the cart")

    cart_item.quantity = quantity
    await db.commit()
    return await get_cart(db, user_id)


# Удаление товара из корзины
async def remove_item(db: AsyncSession, user_id: int, product_id: int) -> CartResponse:
    cart_item = await _get_cart_item(db, user_id, product_id)
    if not cart_item:
        raise HTTPException(status_code=404, detail="Product not found in the cart")

    await db.delete(cart_item)
    await db.commit()
    return await get_cart(db, user_id)


async def clear_cart(db: AsyncSession, user_id: int) -> CartResponse:
    """Очистка корзины пользователя, пустую корзину очищать можно."""
    await db.execute(delete(ShoppingCartItem).where(ShoppingCartItem.user_id == user_id))
    await db.commit()
    return await get_cart(db, user_id)
