"""Invoice data and VAT breakdown for VAT-inclusive prices."""

from dataclasses import asdict, dataclass, field
from datetime import date as calendar_date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from storefront.config import settings

DEFAULT_CUSTOMER = "Valued Customer"
_CENT = Decimal("0.01")


def to_display(value: float) -> float:
    """Round a money value to cents for display, half-up on its exact binary value."""
    return float(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


@dataclass
class LineItem:
    """One invoice line; price is per unit and VAT inclusive."""

    name: str
    price: float
    quantity: int


@dataclass
class InvoiceData:
    """The ``invoice_data`` payload the sales assistant embeds in a reply."""

    customer_name: str
    items: List[LineItem] = field(default_factory=list)
    total: float = 0.0
    date: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "InvoiceData":
        """
        Build invoice data from the model's JSON.

        A missing total falls back to the sum of the lines, a missing date
        to today.

        Raises:
            ValueError: If the payload or its items have the wrong shape
        """
        if not isinstance(payload, dict):
            raise ValueError("invoice_data must be an object")

        raw_items = payload.get("items") or []
        if not isinstance(raw_items, list):
            raise ValueError("invoice_data.items must be a list")

        try:
            items = [
                LineItem(
                    name=str(item.get("name", "")),
                    price=float(item.get("price", 0) or 0),
                    quantity=int(item.get("quantity", 1) or 1),
                )
                for item in raw_items
            ]
        except (AttributeError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid invoice item: {e}") from e

        total = payload.get("total")
        try:
            total = float(total) if total is not None else None
        except (TypeError, ValueError):
            total = None
        if total is None:
            total = sum(i.price * i.quantity for i in items)

        return cls(
            customer_name=str(payload.get("customer_name") or DEFAULT_CUSTOMER),
            items=items,
            total=total,
            date=str(payload.get("date") or calendar_date.today().isoformat()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class InvoiceTotals:
    """Net / VAT / total breakdown. ``total`` always equals ``subtotal``."""

    subtotal: float
    vat_amount: float
    net_amount: float
    total: float
    vat_rate: float

    def rounded(self) -> "InvoiceTotals":
        return InvoiceTotals(
            subtotal=to_display(self.subtotal),
            vat_amount=to_display(self.vat_amount),
            net_amount=to_display(self.net_amount),
            total=to_display(self.total),
            vat_rate=self.vat_rate,
        )


def calculate_invoice(items: List[LineItem], vat_rate: Optional[float] = None) -> InvoiceTotals:
    """
    Split a VAT-inclusive sum into net and VAT.

    Args:
        items: Invoice lines with VAT-inclusive unit prices
        vat_rate: VAT rate (defaults to settings.vat_rate)

    Returns:
        Unrounded totals; call ``rounded()`` for display values
    """
    rate = settings.vat_rate if vat_rate is None else vat_rate

    subtotal = sum(item.price * item.quantity for item in items)
    vat_amount = subtotal * (rate / (1 + rate))
    net_amount = subtotal - vat_amount

    return InvoiceTotals(
        subtotal=subtotal,
        vat_amount=vat_amount,
        net_amount=net_amount,
        total=subtotal,
        vat_rate=rate,
    )
