"""Initial Gadget Wall catalog loaded at startup."""

from storefront.catalog.models import Product


def initial_products() -> list[Product]:
    """Build a fresh copy of the seed catalog."""
    return [
        Product(id="p1", name="iPhone 15 128GB", category="Phone", price=829.00, brand="Apple",
                description="The latest iPhone with Dynamic Island.", stock=12, barcode="194253702444"),
        Product(id="p2", name="Samsung Galaxy S24", category="Phone", price=799.00, brand="Samsung",
                description="Galaxy AI integrated for perfect photos.", stock=8, barcode="8806095307524"),
        Product(id="p3", name="Xiaomi Redmi Note 13 Pro", category="Phone", price=349.00, brand="Xiaomi",
                description="Excellent value-for-money proposition.", stock=25, barcode="6941812753331"),
        Product(id="p4", name="iPhone 17 Pro Max 256GB", category="Phone", price=1499.00, brand="Apple",
                description="The ultimate flagship with titanium build and pro camera system.",
                stock=5, barcode="194253800001"),
        Product(id="a1", name="Silicone Case MagSafe (iPhone 15/17)", category="Case", price=59.00,
                brand="Apple", description="Premium protection with integrated magnets.", stock=40,
                compatible_models=["iPhone 15", "iPhone 17 Pro Max"], barcode="194253696552"),
        Product(id="a2", name="25W USB-C Fast Charger", category="Charger", price=24.90, brand="Samsung",
                description="Safe ultra-fast charging.", stock=100, barcode="8806090973311"),
        Product(id="a3", name="USB-C to Lightning Cable 1m", category="Cable", price=19.90, brand="Generic",
                description="High durability braided cable.", stock=200, barcode="1234567890123"),
        Product(id="a4", name="Sony WF-1000XM5 Earbuds", category="Earbuds", price=299.00, brand="Sony",
                description="Best noise cancellation on the market.", stock=5, barcode="4548736144002"),
        Product(id="a5", name="Power Bank 20000mAh", category="PowerBank", price=45.00, brand="Anker",
                description="Capacity for 4 full charges.", stock=15, barcode="0848061021485"),
        Product(id="a6", name="Tempered Glass Screen Protector", category="ScreenProtector", price=14.99,
                brand="Spigen", description="9H hardness against scratches.", stock=50,
                compatible_models=["iPhone 15", "Samsung S24", "iPhone 17 Pro Max"],
                barcode="8809896752008"),
    ]


def initial_categories(products: list[Product]) -> list[str]:
    """Categories referenced by the seed products, in first-seen order."""
    categories: list[str] = []
    for product in products:
        if product.category not in categories:
            categories.append(product.category)
    return categories
