from typing import Optional

from pydantic import BaseModel


class SellerRegister(BaseModel):
    shop_name: str
    shop_description: Optional[str] = None


class SellerProfileUpdate(BaseModel):
    shop_name: Optional[str] = None
    shop_description: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder_name: Optional[str] = None


class SellerStatusUpdate(BaseModel):
    status: str  # active | suspended | pending


class SellerOrderStatusUpdate(BaseModel):
    status: str
    tracking_number: Optional[str] = None
