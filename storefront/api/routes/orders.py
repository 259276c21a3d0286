"""Order ledger and invoice routes."""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_database
from storefront.sales.invoice import LineItem, calculate_invoice
from storefront.sales.orders import OrderNotFoundError, invoice_for, order_ledger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])
invoice_router = APIRouter(prefix="/api/invoices", tags=["invoices"])


class LineItemModel(BaseModel):
    name: str
    price: float
    quantity: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    customer_name: str
    items: List[LineItemModel]
    total: float
    date: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class InvoiceTotalsResponse(BaseModel):
    """Display values, rounded to cents. ``total`` equals ``subtotal``."""
    subtotal: float
    vat_amount: float
    net_amount: float
    total: float
    vat_rate: float

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    order_id: str
    customer_name: str
    date: str
    items: List[LineItemModel]
    totals: InvoiceTotalsResponse


class InvoiceCalculateRequest(BaseModel):
    items: List[LineItemModel]


@router.get("", response_model=List[OrderResponse])
async def list_orders(db: AsyncSession = Depends(get_database)):
    """List confirmed orders, newest first."""
    return await order_ledger.list_orders(db)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, db: AsyncSession = Depends(get_database)):
    try:
        return await order_ledger.get(db, order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")


@router.get("/{order_id}/invoice", response_model=InvoiceResponse)
async def get_order_invoice(order_id: str, db: AsyncSession = Depends(get_database)):
    """Invoice view of a stored order with its net / VAT breakdown."""
    try:
        order = await order_ledger.get(db, order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")

    invoice = invoice_for(order)
    totals = calculate_invoice(invoice.items).rounded()
    return InvoiceResponse(
        order_id=order.id,
        customer_name=invoice.customer_name,
        date=invoice.date,
        items=[LineItemModel(name=i.name, price=i.price, quantity=i.quantity) for i in invoice.items],
        totals=InvoiceTotalsResponse.model_validate(totals),
    )


@invoice_router.post("/calculate", response_model=InvoiceTotalsResponse)
async def calculate(request: InvoiceCalculateRequest):
    """Net / VAT / total for VAT-inclusive line items."""
    items = [LineItem(name=i.name, price=i.price, quantity=i.quantity) for i in request.items]
    return calculate_invoice(items).rounded()
