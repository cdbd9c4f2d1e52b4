from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from debt_manager.schemas.money import Money, StoredAmount


class CustomerCreate(BaseModel):
    # id and name are checked by the store so a missing value maps to 400
    id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    totalDebt: Money = Decimal("0.00")


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    totalDebt: Money = Decimal("0.00")


class CustomerOut(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None

    total_debt: StoredAmount = Field(
        default=Decimal("0.00"),
        validation_alias=AliasChoices("total_debt", "totalDebt"),
        serialization_alias="totalDebt",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    class Config:
        from_attributes = True
        populate_by_name = True


class MutationAck(BaseModel):
    success: bool = True
    message: str


class StrategyOut(BaseModel):
    customerId: str
    strategy: str
