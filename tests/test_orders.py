"""Tests for the order ledger."""

import pytest

from storefront.sales.invoice import InvoiceData, LineItem
from storefront.sales.orders import OrderLedger, OrderNotFoundError, invoice_for, new_order_id


def _invoice(name: str = "Jane") -> InvoiceData:
    return InvoiceData(customer_name=name, items=[LineItem("Case", 20.0, 2)], total=40.0, date="2025-01-15")


def test_new_order_id():
    assert new_order_id(1700000000123) == "ORD-1700000000123"


class TestOrderLedger:
    """Recording and reading orders."""

    def setup_method(self):
        self.ledger = OrderLedger()

    @pytest.mark.asyncio
    async def test_record_and_get(self, db_session):
        order = await self.ledger.record(db_session, _invoice(), session_id="s1")

        fetched = await self.ledger.get(db_session, order.id)

        assert fetched.customer_name == "Jane"
        assert fetched.session_id == "s1"
        assert invoice_for(fetched).items == [LineItem("Case", 20.0, 2)]

    @pytest.mark.asyncio
    async def test_same_millisecond_orders_are_both_kept(self, db_session, monkeypatch):
        monkeypatch.setattr("storefront.sales.orders.time.time", lambda: 1700000000.123)

        first = await self.ledger.record(db_session, _invoice("Jane"))
        second = await self.ledger.record(db_session, _invoice("Rui"))

        assert first.id == second.id == "ORD-1700000000123"
        orders = await self.ledger.list_orders(db_session)
        assert sorted(o.customer_name for o in orders) == ["Jane", "Rui"]
        assert (await self.ledger.get(db_session, first.id)).customer_name == "Rui"

    @pytest.mark.asyncio
    async def test_get_missing(self, db_session):
        with pytest.raises(OrderNotFoundError):
            await self.ledger.get(db_session, "ORD-1")
