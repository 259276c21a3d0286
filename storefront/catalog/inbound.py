"""Inbound stock intake: merge scanned and bulk-entered serials into a product."""

import logging
from typing import Iterable, Optional, Protocol

from storefront import metrics
from storefront.catalog.models import Product
from storefront.catalog.store import CatalogStore, ReceiveStock

logger = logging.getLogger(__name__)

NO_PRODUCT_MESSAGE = "Choose a product before saving the inbound."
NO_SERIALS_MESSAGE = "No IMEI/SN detected."


class InboundError(Exception):
    """Inbound intake rejected before touching the catalog."""


class ScanDevice(Protocol):
    """A scanner or camera stream held open for the duration of a session."""

    def release(self) -> None:
        ...


def split_bulk_text(bulk_text: str) -> list[str]:
    """One serial per line; lines are trimmed and blank lines dropped."""
    lines = (line.strip() for line in (bulk_text or "").split("\n"))
    return [line for line in lines if line]


def collect_serials(scans: Iterable[str], bulk_text: str = "") -> list[str]:
    """Scanned serials first, then the bulk lines, in entry order."""
    return [*scans, *split_bulk_text(bulk_text)]


def receive_stock(store: CatalogStore, product_id: Optional[str], serials: list[str]) -> Product:
    """
    Append serials to a product and raise its stock by the same count.

    Args:
        store: Catalog to update
        product_id: Target product
        serials: Serial numbers / IMEIs, appended as given

    Returns:
        The updated product

    Raises:
        InboundError: If no product was chosen or there is nothing to add
        ProductNotFoundError: If the product does not exist
    """
    if not product_id:
        raise InboundError(NO_PRODUCT_MESSAGE)
    if not serials:
        raise InboundError(NO_SERIALS_MESSAGE)

    store.dispatch(ReceiveStock(product_id=product_id, serials=tuple(serials)))
    metrics.inbound_units_total.inc(len(serials))

    product = store.get(product_id)
    logger.info(
        f"Received {len(serials)} unit(s) into {product_id} ({product.name}), stock now {product.stock}"
    )
    return product


class InboundSession:
    """
    One stock intake session.

    Scans accumulate one per Enter press, bulk text is kept as typed, and
    :meth:`commit` merges both into the selected product. A scan device, if
    given, is released when the session closes, whether or not it committed.
    """

    def __init__(
        self,
        store: CatalogStore,
        product_id: Optional[str] = None,
        device: Optional[ScanDevice] = None,
    ):
        self.store = store
        self.product_id = product_id
        self.bulk_text = ""
        self._scans: list[str] = []
        self._device = device

    def __enter__(self) -> "InboundSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def scans(self) -> list[str]:
        return list(self._scans)

    def select(self, product_id: str):
        self.product_id = product_id

    def scan(self, value: str) -> bool:
        """Record one scan; empty input is ignored. Returns True if kept."""
        value = (value or "").strip()
        if not value:
            return False
        self._scans.append(value)
        return True

    def serials(self) -> list[str]:
        return collect_serials(self._scans, self.bulk_text)

    def commit(self) -> Product:
        product = receive_stock(self.store, self.product_id, self.serials())
        self.reset()
        return product

    def reset(self):
        self.product_id = None
        self.bulk_text = ""
        self._scans.clear()

    def close(self):
        if self._device is not None:
            self._device.release()
            self._device = None
