# storefront/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth_utils import Principal, get_current_principal
from storefront.db.database import get_db
from storefront.db.functions import get_cart, add_item, update_item, remove_item, clear_cart
from storefront.db.schemas import CartItemUpdate, CartResponse, PathId

router = APIRouter(prefix="/cart", tags=["cart"])


# Корзина всегда принадлежит пользователю из токена
@router.get("", response_model=CartResponse)
async def read_cart(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    return await get_cart(db, principal.user_id)


@router.post("/products/{product_id}", response_model=CartResponse)
async def add_to_cart(
    product_id: PathId,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await add_item(db, principal.user_id, product_id)


@router.put("/products/{product_id}", response_model=CartResponse)
async def update_cart_item_quantity(
    product_id: PathId,
    item: CartItemUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await update_item(db, principal.user_id, product_id, item.quantity)


@router.delete("/products/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: PathId,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await remove_item(db, principal.user_id, product_id)


@router.delete("", response_model=CartResponse)
async def delete_cart(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    return await clear_cart(db, principal.user_id)
