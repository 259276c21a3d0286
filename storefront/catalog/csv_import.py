"""CSV inventory import: parse transaction rows and group them into products.

The file format is a fixed 10-column positional export with a header row:

    name, category, status, identifier, quantity, cost, price, date, client, notes

Fields are split on commas with no quoting support. Numeric fields that do
not parse fall back to defaults instead of rejecting the row.
"""

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from storefront import metrics
from storefront.catalog.models import Product, Transaction
from storefront.catalog.store import AddCategory, AddProducts, CatalogStore

logger = logging.getLogger(__name__)

COLUMNS = (
    "name",
    "category",
    "status",
    "identifier",
    "quantity",
    "cost",
    "price",
    "date",
    "client",
    "notes",
)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class CsvImportError(ValueError):
    """The CSV text has no data rows."""


class PreviewNotFoundError(KeyError):
    """No pending import with the given preview id."""


def parse_int_prefix(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a string ("12 pcs" -> 12), None if there is none."""
    match = _INT_PREFIX.match(value or "")
    return int(match.group(1)) if match else None


def parse_float_prefix(value: Optional[str]) -> Optional[float]:
    """Parse the leading decimal number of a string ("9.5EUR" -> 9.5), None if there is none."""
    match = _FLOAT_PREFIX.match(value or "")
    return float(match.group(1)) if match else None


def parse_transactions(text: str) -> List[Transaction]:
    """
    Parse CSV text into transaction records, dropping the header row.

    Quantity defaults to 1 when missing, unparseable or zero; cost and
    price default to 0.

    Raises:
        CsvImportError: If there is no header plus at least one data row
    """
    rows = [r for r in (text or "").split("\n") if r.strip()]
    if len(rows) < 2:
        raise CsvImportError("Empty or invalid CSV.")

    transactions = []
    for row in rows[1:]:
        cols = [c.strip() for c in row.split(",")]
        cols += [""] * (len(COLUMNS) - len(cols))

        transactions.append(
            Transaction(
                name=cols[0],
                category=cols[1],
                status=cols[2],
                identifier=cols[3],
                quantity=parse_int_prefix(cols[4]) or 1,
                cost=parse_float_prefix(cols[5]) or 0.0,
                price=parse_float_prefix(cols[6]) or 0.0,
                date=cols[7],
                client=cols[8],
                notes=cols[9],
            )
        )

    metrics.csv_import_rows_total.inc(len(transactions))
    return transactions


def group_transactions(transactions: List[Transaction], id_prefix: Optional[str] = None) -> List[Product]:
    """
    Group transactions by (name, category) into product aggregates.

    Descriptive fields come from the first row of each group. Stock is the
    sum of quantities, serials are the non-empty identifiers in row order,
    and price/cost keep the last non-zero value seen in the group.
    """
    if id_prefix is None:
        id_prefix = f"imp-{int(time.time() * 1000)}"

    grouped: Dict[str, Product] = {}
    for idx, item in enumerate(transactions):
        key = f"{item.name}-{item.category}"
        if key not in grouped:
            grouped[key] = Product(
                id=f"{id_prefix}-{idx}",
                name=item.name,
                category=item.category,
                price=item.price,
                cost=item.cost,
                brand=item.name.split(" ")[0],
                description=item.notes or "",
                stock=0,
                serial_numbers=[],
                status=item.status,
                client=item.client,
                notes=item.notes,
                last_added=item.date,
            )

        product = grouped[key]
        product.stock += item.quantity
        if item.identifier:
            product.serial_numbers.append(item.identifier)
        if item.price > 0:
            product.price = item.price
        if item.cost > 0:
            product.cost = item.cost

    return list(grouped.values())


@dataclass
class ImportPreview:
    """Parsed and grouped CSV content awaiting confirmation."""

    preview_id: str
    transactions: List[Transaction]
    products: List[Product]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ImportRegistry:
    """Holds CSV previews until they are confirmed into the catalog or discarded."""

    def __init__(self):
        self._pending: Dict[str, ImportPreview] = {}

    def preview(self, text: str) -> ImportPreview:
        transactions = parse_transactions(text)
        products = group_transactions(transactions)
        preview = ImportPreview(
            preview_id=uuid.uuid4().hex,
            transactions=transactions,
            products=products,
        )
        self._pending[preview.preview_id] = preview
        logger.info(
            f"CSV preview {preview.preview_id}: {len(transactions)} rows grouped into {len(products)} products"
        )
        return preview

    def get(self, preview_id: str) -> ImportPreview:
        try:
            return self._pending[preview_id]
        except KeyError:
            raise PreviewNotFoundError(preview_id) from None

    def confirm(self, preview_id: str, store: CatalogStore) -> List[Product]:
        """Merge a preview into the catalog and forget it."""
        preview = self.get(preview_id)

        for category in dict.fromkeys(p.category for p in preview.products):
            if category.strip():
                store.dispatch(AddCategory(category))
        store.dispatch(AddProducts(tuple(preview.products)))

        del self._pending[preview_id]
        logger.info(f"CSV import {preview_id} confirmed: {len(preview.products)} products added")
        return preview.products

    def discard(self, preview_id: str):
        self.get(preview_id)
        del self._pending[preview_id]

    def clear(self):
        self._pending.clear()


# Global import registry
import_registry = ImportRegistry()
