"""In-memory catalog state with a single reducer.

All catalog mutations go through :meth:`CatalogStore.dispatch` with one of
the action types below. The reducer never mutates the previous state, so a
rejected action (an exception from :func:`reduce`) leaves the store exactly
as it was.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from storefront import metrics
from storefront.catalog.models import Product

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for rejected catalog actions."""


class ProductNotFoundError(CatalogError):
    """No product with the requested id."""


class CategoryNotFoundError(CatalogError):
    """No category with the requested name."""


class InvalidCategoryError(CatalogError):
    """Category name is empty after trimming."""


class CategoryInUseError(CatalogError):
    """Category is still referenced by at least one product."""

    def __init__(self, name: str, product_count: int):
        self.name = name
        self.product_count = product_count
        super().__init__(
            f"Category '{name}' is used by {product_count} product(s) and cannot be deleted"
        )


@dataclass(frozen=True)
class CatalogState:
    """Snapshot of the catalog."""

    products: tuple[Product, ...] = ()
    categories: tuple[str, ...] = ()


# Actions

@dataclass(frozen=True)
class AddProducts:
    products: tuple[Product, ...]


@dataclass(frozen=True)
class UpdateProduct:
    product: Product


@dataclass(frozen=True)
class DeleteProduct:
    product_id: str


@dataclass(frozen=True)
class ReceiveStock:
    product_id: str
    serials: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AddCategory:
    name: str


@dataclass(frozen=True)
class RenameCategory:
    old_name: str
    new_name: str


@dataclass(frozen=True)
class DeleteCategory:
    name: str


CatalogAction = Union[
    AddProducts,
    UpdateProduct,
    DeleteProduct,
    ReceiveStock,
    AddCategory,
    RenameCategory,
    DeleteCategory,
]


def _index_of(state: CatalogState, product_id: str) -> int:
    for i, product in enumerate(state.products):
        if product.id == product_id:
            return i
    raise ProductNotFoundError(f"Product '{product_id}' not found")


def _replace_at(products: tuple[Product, ...], index: int, product: Product) -> tuple[Product, ...]:
    return products[:index] + (product,) + products[index + 1:]


def _clean_category(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidCategoryError("Category name is required")
    return cleaned


def reduce(state: CatalogState, action: CatalogAction) -> CatalogState:
    """
    Apply an action to a catalog state and return the next state.

    Raises:
        CatalogError: If the action is rejected. The input state is untouched.
    """
    if isinstance(action, AddProducts):
        return replace(state, products=state.products + tuple(action.products))

    if isinstance(action, UpdateProduct):
        index = _index_of(state, action.product.id)
        return replace(state, products=_replace_at(state.products, index, action.product))

    if isinstance(action, DeleteProduct):
        _index_of(state, action.product_id)
        return replace(
            state,
            products=tuple(p for p in state.products if p.id != action.product_id),
        )

    if isinstance(action, ReceiveStock):
        # Serials are appended as given: no de-duplication, no format checks
        index = _index_of(state, action.product_id)
        product = state.products[index]
        received = replace(
            product,
            stock=product.stock + len(action.serials),
            serial_numbers=[*product.serial_numbers, *action.serials],
        )
        return replace(state, products=_replace_at(state.products, index, received))

    if isinstance(action, AddCategory):
        name = _clean_category(action.name)
        if name in state.categories:
            return state
        return replace(state, categories=state.categories + (name,))

    if isinstance(action, RenameCategory):
        new_name = _clean_category(action.new_name)
        if action.old_name not in state.categories:
            raise CategoryNotFoundError(f"Category '{action.old_name}' not found")
        categories: list[str] = []
        for category in state.categories:
            renamed = new_name if category == action.old_name else category
            if renamed not in categories:
                categories.append(renamed)
        products = tuple(
            replace(p, category=new_name) if p.category == action.old_name else p
            for p in state.products
        )
        return CatalogState(products=products, categories=tuple(categories))

    if isinstance(action, DeleteCategory):
        if action.name not in state.categories:
            raise CategoryNotFoundError(f"Category '{action.name}' not found")
        in_use = sum(1 for p in state.products if p.category == action.name)
        if in_use:
            raise CategoryInUseError(action.name, in_use)
        return replace(
            state,
            categories=tuple(c for c in state.categories if c != action.name),
        )

    raise TypeError(f"Unknown catalog action: {action!r}")


class CatalogStore:
    """Single source of truth for products and categories."""

    def __init__(self, state: Optional[CatalogState] = None):
        self._state = state or CatalogState()

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def products(self) -> list[Product]:
        return list(self._state.products)

    @property
    def categories(self) -> list[str]:
        return list(self._state.categories)

    def dispatch(self, action: CatalogAction) -> CatalogState:
        """Reduce an action into the store; rejected actions raise and leave state as is."""
        try:
            self._state = reduce(self._state, action)
        except CatalogError as e:
            logger.warning(f"Catalog action {type(action).__name__} rejected: {e}")
            raise
        metrics.catalog_products.set(len(self._state.products))
        return self._state

    def load(self, products: list[Product], categories: list[str]):
        """Replace the whole catalog (startup seeding and tests)."""
        self._state = CatalogState(products=tuple(products), categories=tuple(categories))
        metrics.catalog_products.set(len(products))

    def get(self, product_id: str) -> Product:
        return self._state.products[_index_of(self._state, product_id)]

    def search(self, query: str) -> list[Product]:
        """
        Filter products by name, brand, barcode or serial number.

        Name, brand and serials match case-insensitively; barcode is a plain
        substring match. An empty query returns every product.
        """
        q = (query or "").lower().strip()
        if not q:
            return self.products

        return [
            p for p in self._state.products
            if q in p.name.lower()
            or q in p.brand.lower()
            or (p.barcode and q in p.barcode)
            or any(q in sn.lower() for sn in p.serial_numbers)
        ]

    def lookup_serial(self, serial: str) -> Optional[Product]:
        """Find the product holding an exact serial number."""
        wanted = (serial or "").strip()
        for product in self._state.products:
            if any(sn.strip() == wanted for sn in product.serial_numbers):
                return product
        return None


# Global catalog instance
catalog_store = CatalogStore()
