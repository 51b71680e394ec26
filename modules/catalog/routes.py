"""
Catalog Module - Public Routes
================================
Menu browsing: categories, items (optionally by category name), item detail.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import NotFoundError
from modules.catalog.models import MenuCategory, FoodItem
from modules.catalog.service import catalog_service

router = APIRouter(prefix="/api/menu", tags=["menu"])


def category_to_dict(category: MenuCategory) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "sort_order": category.sort_order,
        "is_available": category.is_available,
    }


def item_to_dict(item: FoodItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": str(item.price),
        "category_id": item.category_id,
        "category": item.category_name,
        "image": item.image,
        "is_available": item.is_available,
    }


@router.get("/categories")
async def list_categories(db: Session = Depends(get_db)):
    return {"categories": [category_to_dict(c) for c in catalog_service.list_categories(db)]}


@router.get("/items")
async def list_items(
    category: str = Query(None),
    db: Session = Depends(get_db),
):
    items = catalog_service.list_items(db, category_name=category)
    return {"items": [item_to_dict(i) for i in items]}


@router.get("/items/{item_id}")
async def item_detail(item_id: int, db: Session = Depends(get_db)):
    item = catalog_service.get_item(db, item_id)
    if not item or not item.is_available:
        raise NotFoundError(f"Food item {item_id} not found")
    return {"item": item_to_dict(item)}
