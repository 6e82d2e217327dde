"""
Product routes.

Reads are public. Writes are guarded by the product permissions.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.constants import Permission
from app.features.permissions.dependencies import require_permissions
from app.features.permissions.schemas import GrantContext
from app.features.products.models import Product
from app.features.products.schemas import ProductCreate, ProductResponse, ProductUpdate
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def get_product_or_404(db: AsyncSession, product_id: str) -> Product:
    product = await db.scalar(select(Product).where(Product.id == product_id))
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("", response_model=list[ProductResponse])
async def list_products(
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = 100
):
    result = await db.execute(select(Product).order_by(Product.name).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    return await get_product_or_404(db, product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    grant: Annotated[GrantContext, Depends(require_permissions(Permission.CREATE_PRODUCTS, resource="products"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a product (requires create:products)."""
    product = Product(**product_data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    log.info("User %s created product %s", grant.user.id, product.id)
    return product


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    update_data: ProductUpdate,
    grant: Annotated[GrantContext, Depends(require_permissions(Permission.UPDATE_PRODUCTS, resource="products"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a product (requires update:products)."""
    product = await get_product_or_404(db, product_id)
    for key, value in update_data.model_dump(exclude_unset=True).items():
        setattr(product, key, value)

    await db.commit()
    await db.refresh(product)
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    grant: Annotated[GrantContext, Depends(require_permissions(Permission.DELETE_PRODUCTS, resource="products"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a product (requires delete:products)."""
    product = await get_product_or_404(db, product_id)
    await db.delete(product)
    await db.commit()
    log.info("User %s deleted product %s", grant.user.id, product_id)
