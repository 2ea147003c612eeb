# storefront/catalog.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth_utils import Principal, get_current_principal, require_role
from storefront.db.database import get_db
from storefront.db.functions import (
    get_all_categories,
    get_category_by_id,
    create_category,
    update_category,
    delete_category,
    get_all_products,
    get_product_by_id,
    create_product,
    update_product,
    delete_product,
)
from storefront.db.models import RoleEnum, INT32_MAX
from storefront.db.schemas import CategoryBase, Category as CategorySchema, ProductBase, Product as ProductSchema, PathId

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


# ---------- Категории ----------

@router.get("/categories", response_model=List[CategorySchema])
async def read_categories(db: AsyncSession = Depends(get_db)):
    return await get_all_categories(db)


@router.get("/categories/{category_id}", response_model=CategorySchema)
async def read_category(category_id: PathId, db: AsyncSession = Depends(get_db)):
    category = await get_category_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("/categories", response_model=CategorySchema, status_code=201)
async def create_new_category(
    category: CategoryBase,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    require_role(principal, RoleEnum.admin)
    return await create_category(db, category)


@router.put("/categories/{category_id}", response_model=CategorySchema)
async def update_existing_category(
    category_id: PathId,
    category: CategoryBase,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    require_role(principal, RoleEnum.admin)
    return await update_category(db, category_id, category)


@router.delete("/categories/{category_id}", response_model=CategorySchema)
async def delete_existing_category(
    category_id: PathId,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    require_role(principal, RoleEnum.admin)
    return await delete_category(db, category_id)


# ---------- Товары ----------

@router.get("/products", response_model=List[ProductSchema])
async def read_products(
    category: Optional[int] = Query(default=None, alias="cat", ge=1, le=INT32_MAX),
    min_price: Optional[float] = Query(default=None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(default=None, alias="maxPrice", ge=0),
    color: Optional[str] = None,
    search: str = '',
    skip: int = Query(default=0, ge=0, le=INT32_MAX),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    logger.debug(
        "read_products: cat=%s minPrice=%s maxPrice=%s color=%s search=%r",
        category, min_price, max_price, color, search,
    )
    return await get_all_products(db, category, min_price, max_price, color, search, skip, limit)


@router.get("/products/{product_id}", response_model=ProductSchema)
async def read_product(product_id: PathId, db: AsyncSession = Depends(get_db)):
    product = await get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/products", response_model=ProductSchema, status_code=201)
async def create_new_product(
    product: ProductBase,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    require_role(principal, RoleEnum.admin)
    return await create_product(db, product)


@router.put("/products/{product_id}", response_model=ProductSchema)
async def update_existing_product(
    product_id: PathId,
    product: ProductBase,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    require_role(principal, RoleEnum.admin)
    return await update_product(db, product_id, product)


@router.delete("/products/{product_id}", response_model=ProductSchema)
async def delete_existing_product(
    product_id: PathId,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    require_role(principal, RoleEnum.admin)
    return await delete_product(db, product_id)
