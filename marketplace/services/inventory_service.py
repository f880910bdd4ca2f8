import logging

from sqlalchemy import case, update
from sqlmodel import Session

from marketplace.errors import NotFoundError, ValidationError
from marketplace.models import Product

logger = logging.getLogger(__name__)


def reduce_product_stock(session: Session, product_id: int, quantity: int) -> None:
    """
    Decrement a product's stock in one UPDATE statement so concurrent
    deliveries cannot lose each other's decrement. Stock never goes below
    zero: the goods have already left the seller when this runs.
    """
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1", field="quantity")

    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(
            stock_quantity=case(
                (Product.stock_quantity >= quantity, Product.stock_quantity - quantity),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        raise NotFoundError("Product")

    logger.info(f"Reduced stock of product {product_id} by {quantity}")
