"""Order ledger: append-only record of sales confirmed through the assistant."""

import logging
import time
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront import metrics
from storefront.db.models import Order
from storefront.sales.invoice import InvoiceData, LineItem

logger = logging.getLogger(__name__)

ORDER_STATUS_CONFIRMED = "confirmed"


class OrderNotFoundError(LookupError):
    """No order with the requested id."""


def new_order_id(now_ms: Optional[int] = None) -> str:
    """Order ids are the creation time in epoch milliseconds."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"ORD-{now_ms}"


def invoice_for(order: Order) -> InvoiceData:
    """Rebuild the invoice payload of a stored order."""
    return InvoiceData(
        customer_name=order.customer_name,
        items=[LineItem(name=i["name"], price=i["price"], quantity=i["quantity"]) for i in order.items],
        total=order.total,
        date=order.date,
    )


class OrderLedger:
    """Creates and reads orders. Orders are never updated or deleted."""

    async def record(
        self,
        db: AsyncSession,
        invoice: InvoiceData,
        session_id: Optional[str] = None,
    ) -> Order:
        """
        Create a confirmed order from assistant invoice data.

        Stock is not decremented; order lines are snapshots, not product links.
        """
        order = Order(
            id=new_order_id(),
            customer_name=invoice.customer_name,
            items=[
                {"name": i.name, "price": i.price, "quantity": i.quantity}
                for i in invoice.items
            ],
            total=invoice.total,
            date=invoice.date,
            status=ORDER_STATUS_CONFIRMED,
            session_id=session_id,
        )
        db.add(order)
        await db.commit()
        await db.refresh(order)

        metrics.record_order(order.total)
        logger.info(
            f"Order {order.id} confirmed for {order.customer_name}: "
            f"{len(order.items)} line(s), total {order.total:.2f}"
        )
        return order

    async def list_orders(self, db: AsyncSession) -> List[Order]:
        """All orders, newest first."""
        result = await db.execute(select(Order).order_by(Order.created_at.desc(), Order.pk.desc()))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, order_id: str) -> Order:
        """Latest order with this display id."""
        result = await db.execute(
            select(Order).where(Order.id == order_id).order_by(Order.pk.desc()).limit(1)
        )
        order = result.scalars().first()
        if order is None:
            raise OrderNotFoundError(order_id)
        return order


# Global ledger instance
order_ledger = OrderLedger()
