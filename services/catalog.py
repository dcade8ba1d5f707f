"""
Catalog queries and low stock alerts — read-only, no gate.

Usage:
    catalog = Catalog(store, ledger, operators, low_stock_threshold=3)
    for product, available in await catalog.listing():
        ...
"""

import logging

from tillman.exceptions import StockError
from tillman.protocols.notify import OperatorNotifier
from tillman.protocols.rowstore import RowStore
from tillman.records import PRODUCTS, Product
from tillman.services.ledger import StockLedger

logger = logging.getLogger('tillman')


class Catalog:
    """Products with their current availability."""

    def __init__(self, store: RowStore, ledger: StockLedger,
                 operators: OperatorNotifier, low_stock_threshold: int = 0):
        self.store = store
        self.ledger = ledger
        self.operators = operators
        self.low_stock_threshold = low_stock_threshold

    async def products(self) -> list[Product]:
        rows = await self.store.list_rows(PRODUCTS)
        return [Product.from_row(row) for row in rows if row.get('code')]

    async def get(self, product_id: str) -> Product:
        """
        Raises:
            StockError('UNKNOWN_PRODUCT')
        """
        rows = await self.store.list_rows(PRODUCTS, lambda r: str(r.get('code')) == product_id)
        if not rows:
            raise StockError('UNKNOWN_PRODUCT', product_id=product_id)
        return Product.from_row(rows[0])

    async def listing(self) -> list[tuple[Product, int]]:
        """Every product with its available count (0 when sold out)."""
        products = await self.products()
        counts = await self.ledger.count_available()
        return [(product, counts.get(product.id, 0)) for product in products]

    async def check_low_stock(self, product: Product) -> int | None:
        """
        Warn operators when availability is below the threshold.

        Returns:
            The available count if an alert was sent, else None
        """
        if self.low_stock_threshold <= 0:
            return None
        available = (await self.ledger.count_available(product.id)).get(product.id, 0)
        if available >= self.low_stock_threshold:
            return None

        logger.warning(
            "stock.alert.triggered",
            extra={"product": product.id, "available": available,
                   "min_quantity": self.low_stock_threshold},
        )
        try:
            await self.operators.notify_operators(
                f"Low stock: {product.name} has {available} left."
            )
        except Exception as e:
            logger.error("notify.operators.failed", extra={"product": product.id, "error": str(e)})
        return available
