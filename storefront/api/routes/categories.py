"""Product category management routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.api.deps import get_catalog
from storefront.catalog.store import (
    AddCategory,
    CatalogStore,
    CategoryInUseError,
    CategoryNotFoundError,
    DeleteCategory,
    InvalidCategoryError,
    RenameCategory,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryCreate(BaseModel):
    """Request model for adding a category."""
    name: str


class CategoryRename(BaseModel):
    """Request model for renaming a category."""
    new_name: str


class CategoryResponse(BaseModel):
    name: str
    product_count: int


def _category_response(catalog: CatalogStore, name: str) -> CategoryResponse:
    count = sum(1 for p in catalog.products if p.category == name)
    return CategoryResponse(name=name, product_count=count)


@router.get("", response_model=List[CategoryResponse])
async def list_categories(catalog: CatalogStore = Depends(get_catalog)):
    """List categories with how many products use each."""
    return [_category_response(catalog, name) for name in catalog.categories]


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(data: CategoryCreate, catalog: CatalogStore = Depends(get_catalog)):
    """Add a category. Adding an existing name is a no-op."""
    try:
        catalog.dispatch(AddCategory(data.name))
    except InvalidCategoryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _category_response(catalog, data.name.strip())


@router.put("/{name}", response_model=CategoryResponse)
async def rename_category(name: str, data: CategoryRename, catalog: CatalogStore = Depends(get_catalog)):
    """Rename a category and move every product in it to the new name."""
    try:
        catalog.dispatch(RenameCategory(old_name=name, new_name=data.new_name))
    except CategoryNotFoundError:
        raise HTTPException(status_code=404, detail="Category not found")
    except InvalidCategoryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _category_response(catalog, data.new_name.strip())


@router.delete("/{name}", status_code=204)
async def delete_category(name: str, catalog: CatalogStore = Depends(get_catalog)):
    """Delete a category. Refused while any product still uses it."""
    try:
        catalog.dispatch(DeleteCategory(name))
    except CategoryNotFoundError:
        raise HTTPException(status_code=404, detail="Category not found")
    except CategoryInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))
