from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Seller(SQLModel, table=True):
    __tablename__ = "sellers"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, unique=True)

    shop_name: str
    shop_description: Optional[str] = None
    email: Optional[str] = Field(default=None, index=True)

    status: str = Field(default="pending")  # pending | active | suspended

    # derived, refreshed by the rating / sales procedures
    rating: float = 0.0
    total_sales: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)

    # payout destination, required before a payout can be recorded
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder_name: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def has_bank_details(self) -> bool:
        return all(
            (value or "").strip()
            for value in (self.bank_name, self.account_number, self.account_holder_name)
        )
