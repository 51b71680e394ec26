"""
Catalog Module - Admin Routes
===============================
Menu maintenance: create categories, create/update/retire food items.
Image files are uploaded to the storage service; only their URL is kept here.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_admin
from modules.catalog.routes import category_to_dict, item_to_dict
from modules.catalog.service import catalog_service

router = APIRouter(prefix="/api/admin/menu", tags=["menu-admin"])


# ==========================================
# Schemas
# ==========================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    sort_order: int = 0


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    category_id: int
    description: str = ""
    image: Optional[str] = None


class ItemUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[int] = None
    description: Optional[str] = None
    is_available: Optional[bool] = None


# ==========================================
# Categories
# ==========================================

@router.get("/categories")
async def admin_list_categories(
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    categories = catalog_service.list_categories(db, include_hidden=True)
    return {"categories": [category_to_dict(c) for c in categories]}


@router.post("/categories")
async def admin_create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    category = catalog_service.create_category(db, body.name, sort_order=body.sort_order)
    db.commit()
    return JSONResponse({"category": category_to_dict(category)}, status_code=201)


# ==========================================
# Food Items
# ==========================================

@router.post("/items")
async def admin_create_item(
    body: ItemCreate,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    item = catalog_service.create_item(
        db,
        name=body.name,
        price=body.price,
        category_id=body.category_id,
        description=body.description,
        image=body.image,
    )
    db.commit()
    return JSONResponse({"item": item_to_dict(item)}, status_code=201)


@router.patch("/items/{item_id}")
async def admin_update_item(
    item_id: int,
    body: ItemUpdate,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    item = catalog_service.update_item(db, item_id, **body.model_dump(exclude_unset=True))
    db.commit()
    return {"item": item_to_dict(item)}


@router.delete("/items/{item_id}")
async def admin_retire_item(
    item_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    item = catalog_service.deactivate_item(db, item_id)
    db.commit()
    return {"item": item_to_dict(item)}
