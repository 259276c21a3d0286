"""Product catalog routes: CRUD, search, serial lookup, inbound and CSV import."""

import logging
import time
from dataclasses import replace
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from storefront.api.deps import get_catalog, get_import_registry
from storefront.catalog.csv_import import CsvImportError, ImportRegistry, PreviewNotFoundError
from storefront.catalog.inbound import InboundError, InboundSession
from storefront.catalog.models import Product
from storefront.catalog.store import (
    AddCategory,
    AddProducts,
    CatalogStore,
    DeleteProduct,
    ProductNotFoundError,
    UpdateProduct,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

# Fields an update may clear by sending null
NULLABLE_FIELDS = {"cost", "barcode"}


class ProductCreate(BaseModel):
    """Manual product entry; name, brand, category, price and stock are mandatory."""
    name: str
    brand: str
    category: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    cost: Optional[float] = None
    barcode: Optional[str] = None
    description: str = ""
    compatible_models: List[str] = []

    @field_validator("name", "brand", "category")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please fill in all mandatory fields.")
        return v

    @field_validator("barcode")
    @classmethod
    def blank_barcode_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    cost: Optional[float] = None
    barcode: Optional[str] = None
    description: Optional[str] = None
    compatible_models: Optional[List[str]] = None


class ProductResponse(BaseModel):
    id: str
    name: str
    category: str
    brand: str
    price: float
    cost: Optional[float]
    stock: int
    description: str
    serial_numbers: List[str]
    barcode: Optional[str]
    compatible_models: List[str]
    status: Optional[str]
    client: Optional[str]
    notes: Optional[str]
    last_added: Optional[str]

    class Config:
        from_attributes = True


class InboundRequest(BaseModel):
    """Serials from live scans (one per Enter) plus newline-separated bulk text."""
    product_id: Optional[str] = None
    scanned: List[str] = []
    bulk_text: str = ""


class InboundResponse(BaseModel):
    product: ProductResponse
    received: int


class CsvImportRequest(BaseModel):
    csv_text: str


class TransactionResponse(BaseModel):
    name: str
    category: str
    status: str
    identifier: str
    quantity: int
    cost: float
    price: float
    date: str
    client: str
    notes: str

    class Config:
        from_attributes = True


class ImportPreviewResponse(BaseModel):
    preview_id: str
    transactions: List[TransactionResponse]
    products: List[ProductResponse]


@router.get("/products", response_model=List[ProductResponse])
async def list_products(
    q: Optional[str] = Query(None, description="Match name, brand, barcode or serial number"),
    catalog: CatalogStore = Depends(get_catalog),
):
    """List products, optionally filtered by a search query."""
    return catalog.search(q or "")


@router.get("/products/lookup", response_model=ProductResponse)
async def lookup_serial(
    serial: str = Query(..., description="Exact IMEI / serial number"),
    catalog: CatalogStore = Depends(get_catalog),
):
    """Find which product holds a serial number."""
    product = catalog.lookup_serial(serial)
    if product is None:
        raise HTTPException(status_code=404, detail="No product holds this serial number")
    return product


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, catalog: CatalogStore = Depends(get_catalog)):
    try:
        return catalog.get(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")


@router.post("/products", response_model=ProductResponse, status_code=201)
async def create_product(product_data: ProductCreate, catalog: CatalogStore = Depends(get_catalog)):
    """
    Add a product by hand.

    A category that is not in the category list yet is added to it.
    """
    product = Product(
        id=f"p-{int(time.time() * 1000)}",
        serial_numbers=[],
        **product_data.model_dump(),
    )
    catalog.dispatch(AddCategory(product.category))
    catalog.dispatch(AddProducts((product,)))
    logger.info(f"Product {product.id} created: {product.name}")
    return product


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    catalog: CatalogStore = Depends(get_catalog),
):
    """Edit a product. Only the fields sent are changed."""
    try:
        current = catalog.get(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")

    changes = {
        key: value
        for key, value in product_data.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    for key in ("name", "brand", "category"):
        if key in changes:
            changes[key] = (changes[key] or "").strip()
            if not changes[key]:
                raise HTTPException(status_code=400, detail=f"{key} cannot be empty")
    if "barcode" in changes:
        changes["barcode"] = (changes["barcode"] or "").strip() or None

    updated = replace(current, **changes)
    if "category" in changes:
        catalog.dispatch(AddCategory(updated.category))
    catalog.dispatch(UpdateProduct(updated))
    return updated


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: str, catalog: CatalogStore = Depends(get_catalog)):
    try:
        catalog.dispatch(DeleteProduct(product_id))
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Product {product_id} deleted")


@router.post("/inbound", response_model=InboundResponse)
async def receive_inbound(request: InboundRequest, catalog: CatalogStore = Depends(get_catalog)):
    """Add scanned and bulk-entered serials to a product's stock."""
    with InboundSession(catalog, product_id=request.product_id) as session:
        for value in request.scanned:
            session.scan(value)
        session.bulk_text = request.bulk_text
        received = len(session.serials())
        try:
            product = session.commit()
        except InboundError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ProductNotFoundError:
            raise HTTPException(status_code=404, detail="Product not found")

    return InboundResponse(product=ProductResponse.model_validate(product), received=received)


@router.post("/import/preview", response_model=ImportPreviewResponse, status_code=201)
async def preview_import(
    request: CsvImportRequest,
    registry: ImportRegistry = Depends(get_import_registry),
):
    """Parse and group a CSV export; nothing is added until the preview is confirmed."""
    try:
        preview = registry.preview(request.csv_text)
    except CsvImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return preview


@router.post("/import/{preview_id}/confirm", response_model=List[ProductResponse])
async def confirm_import(
    preview_id: str,
    registry: ImportRegistry = Depends(get_import_registry),
    catalog: CatalogStore = Depends(get_catalog),
):
    try:
        return registry.confirm(preview_id, catalog)
    except PreviewNotFoundError:
        raise HTTPException(status_code=404, detail="Import preview not found")


@router.delete("/import/{preview_id}", status_code=204)
async def discard_import(preview_id: str, registry: ImportRegistry = Depends(get_import_registry)):
    try:
        registry.discard(preview_id)
    except PreviewNotFoundError:
        raise HTTPException(status_code=404, detail="Import preview not found")
