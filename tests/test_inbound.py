"""Tests for inbound stock intake."""

from unittest.mock import MagicMock

import pytest

from storefront.catalog.inbound import (
    NO_PRODUCT_MESSAGE,
    NO_SERIALS_MESSAGE,
    InboundError,
    InboundSession,
    collect_serials,
    receive_stock,
    split_bulk_text,
)
from storefront.catalog.store import ProductNotFoundError


def test_split_bulk_text_drops_blank_lines():
    assert split_bulk_text("  A1 \n\n   \nB2\nC3  \n") == ["A1", "B2", "C3"]
    assert split_bulk_text("") == []


def test_collect_serials_puts_scans_first():
    assert collect_serials(["S1", "S2"], "B1\nB2") == ["S1", "S2", "B1", "B2"]


def test_receive_stock_raises_stock_by_serial_count(catalog):
    before = catalog.get("p1")
    serials = ["IMEI-1", "IMEI-2", "IMEI-3"]

    product = receive_stock(catalog, "p1", serials)

    assert product.stock == before.stock + 3
    assert product.serial_numbers == before.serial_numbers + serials


def test_receive_stock_keeps_duplicates(catalog):
    product = receive_stock(catalog, "a3", ["SN-1", "SN-1"])

    assert product.serial_numbers[-2:] == ["SN-1", "SN-1"]


def test_receive_stock_requires_product(catalog):
    with pytest.raises(InboundError, match=NO_PRODUCT_MESSAGE):
        receive_stock(catalog, None, ["SN-1"])


def test_receive_stock_requires_serials(catalog):
    before = catalog.state
    with pytest.raises(InboundError, match=NO_SERIALS_MESSAGE):
        receive_stock(catalog, "p1", [])
    assert catalog.state is before


def test_receive_stock_unknown_product(catalog):
    with pytest.raises(ProductNotFoundError):
        receive_stock(catalog, "nope", ["SN-1"])


class TestInboundSession:
    """Tests for the scan-and-commit session."""

    def test_scan_ignores_empty_input(self, catalog):
        session = InboundSession(catalog)
        assert session.scan("  ") is False
        assert session.scan(" 3567 ") is True
        assert session.scans == ["3567"]

    def test_commit_merges_scans_and_bulk_text(self, catalog):
        stock = catalog.get("p3").stock
        session = InboundSession(catalog, product_id="p3")
        session.scan("S1")
        session.scan("S2")
        session.bulk_text = "B1\n\nB2\n"

        product = session.commit()

        assert product.stock == stock + 4
        assert product.serial_numbers[-4:] == ["S1", "S2", "B1", "B2"]

    def test_commit_resets_session(self, catalog):
        session = InboundSession(catalog, product_id="p3")
        session.scan("S1")
        session.commit()

        assert session.product_id is None
        assert session.scans == []
        assert session.bulk_text == ""

    def test_failed_commit_keeps_entries(self, catalog):
        session = InboundSession(catalog)
        session.scan("S1")

        with pytest.raises(InboundError):
            session.commit()

        assert session.scans == ["S1"]

    def test_device_released_on_exit(self, catalog):
        device = MagicMock()

        with InboundSession(catalog, device=device) as session:
            session.scan("S1")

        device.release.assert_called_once()

    def test_device_released_when_commit_fails(self, catalog):
        device = MagicMock()

        with pytest.raises(InboundError):
            with InboundSession(catalog, device=device) as session:
                session.commit()

        device.release.assert_called_once()

    def test_close_is_idempotent(self, catalog):
        device = MagicMock()
        session = InboundSession(catalog, device=device)
        session.close()
        session.close()

        device.release.assert_called_once()
