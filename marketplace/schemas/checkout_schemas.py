# marketplace/schemas/checkout_schemas.py
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    product_id: int
    seller_id: Optional[int] = None
    quantity: int
    unit_price: Decimal
    product_name: str
    product_image: Optional[str] = None


class ShippingAddress(BaseModel):
    street: str
    city: str
    state: str
    zipcode: str
    country: str


class CartSummaryRequest(BaseModel):
    items: List[CartLine]


class CartSummary(BaseModel):
    subtotal: Decimal     # sum of unit_price * quantity
    shipping: Decimal     # flat fee, 0 for an empty cart
    tax: Decimal          # flat rate on the subtotal
    total: Decimal        # subtotal + shipping + tax


class PlaceOrderRequest(BaseModel):
    customer_name: str
    customer_email: str
    shipping_address: ShippingAddress
    items: List[CartLine]
    total_amount: Decimal
    payment_method: str = "receipt_upload"
    request_id: Optional[str] = Field(default=None, max_length=64)


class ReceiptUpload(BaseModel):
    receipt_image: str  # data URL / base64 of the transfer receipt


class RatingCreate(BaseModel):
    seller_order_id: int
    rating: int
    comment: Optional[str] = None
