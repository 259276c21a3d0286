"""Prometheus metrics for the storefront service."""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
app_info = Info("storefront", "Gadget Wall storefront application info")
app_info.info({"version": "0.1.0", "name": "gadgetwall-storefront"})

# Assistant metrics
chat_messages_total = Counter(
    "chat_messages_total",
    "Total number of chat messages sent to the sales assistant",
    ["status"],
)

llm_errors_total = Counter(
    "llm_errors_total",
    "Total number of failed LLM calls, by error kind",
    ["operation", "kind"],
)

llm_call_duration_seconds = Histogram(
    "llm_call_duration_seconds",
    "Time spent waiting on the LLM host",
    ["operation"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

conversation_restarts_total = Counter(
    "conversation_restarts_total",
    "Conversation handles restarted after a failed send",
)

# Order metrics
orders_created_total = Counter(
    "orders_created_total",
    "Total number of orders created from assistant invoices",
)

order_revenue_euros_total = Counter(
    "order_revenue_euros_total",
    "Sum of order totals (VAT inclusive) created from assistant invoices",
)

# Lead discovery metrics
lead_searches_total = Counter(
    "lead_searches_total",
    "Total number of lead discovery searches",
    ["status"],
)

leads_found = Histogram(
    "leads_found",
    "Number of leads returned per discovery search",
    buckets=[0, 1, 2, 5, 10, 20, 50],
)

# Inventory metrics
inbound_units_total = Counter(
    "inbound_units_total",
    "Total number of serialized units received into stock",
)

csv_import_rows_total = Counter(
    "csv_import_rows_total",
    "Total number of CSV transaction rows parsed",
)

catalog_products = Gauge(
    "catalog_products",
    "Number of products currently in the catalog",
)


def record_llm_error(operation: str, kind: str):
    """Record a failed LLM call."""
    llm_errors_total.labels(operation=operation, kind=kind).inc()


def record_order(total: float):
    """Record a confirmed order."""
    orders_created_total.inc()
    if total > 0:
        order_revenue_euros_total.inc(total)


def record_lead_search(status: str, count: int = 0):
    """Record a finished lead discovery search."""
    lead_searches_total.labels(status=status).inc()
    if status == "success":
        leads_found.observe(count)
