# bazarika/services/inventory_service.py
import logging
from typing import Optional

from sqlmodel import Session, select

from bazarika.models.inventory_log import InventoryLog
from bazarika.models.order_item import OrderItem
from bazarika.models.product import Product

logger = logging.getLogger(__name__)


class StockError(ValueError):
    """Requested quantity is not available."""


def adjust_stock(
    session: Session,
    product: Product,
    change: int,
    reason: str,
    reference_id: Optional[str] = None,
    reference_type: Optional[str] = None,
    created_by: Optional[str] = None,
) -> InventoryLog:
    """
    Apply a stock change and append it to the inventory log.
    Caller commits.
    """
    previous = product.stock_quantity
    new_quantity = previous + change

    if new_quantity < 0:
        raise StockError(
            f"Insufficient stock for {product.name}. Available: {previous}, Requested: {-change}"
        )

    product.stock_quantity = new_quantity
    session.add(product)

    entry = InventoryLog(
        product_id=product.id,
        quantity_change=change,
        previous_quantity=previous,
        new_quantity=new_quantity,
        reason=reason,
        reference_id=reference_id,
        reference_type=reference_type,
        created_by=created_by,
    )
    session.add(entry)

    logger.info(f"Stock for product {product.id}: {previous} -> {new_quantity} ({reason})")
    return entry


def restock_order_items(session: Session, order_id: int, order_number: str, created_by: Optional[str] = None) -> int:
    """Put cancelled order quantities back on the shelf."""
    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id)
    ).all()

    restocked = 0
    for item in items:
        if item.product_id is None:
            continue
        product = session.get(Product, item.product_id)
        if not product:
            continue

        adjust_stock(
            session,
            product,
            item.quantity,
            reason="cancellation",
            reference_id=order_number,
            reference_type="order",
            created_by=created_by,
        )
        restocked += 1

    return restocked
