"""Catalog domain objects."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Product:
    """A sellable product and its serialized stock."""

    id: str
    name: str
    category: str
    brand: str
    price: float
    stock: int
    description: str = ""
    cost: Optional[float] = None
    serial_numbers: list[str] = field(default_factory=list)
    barcode: Optional[str] = None
    compatible_models: list[str] = field(default_factory=list)
    # Leftovers from CSV import rows
    status: Optional[str] = None
    client: Optional[str] = None
    notes: Optional[str] = None
    last_added: Optional[str] = None


@dataclass
class Transaction:
    """One parsed row of an inventory CSV export."""

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
