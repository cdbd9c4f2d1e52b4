import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TransactionType(str, Enum):
    DEBT = "DEBT"
    PAYMENT = "PAYMENT"


class TransactionIn(BaseModel):
    """Debt/payment history entry handed to the advisor as context.

    Never persisted; there is no ledger behind it.
    """

    id: Optional[str] = None
    customerId: Optional[str] = None
    amount: Decimal
    type: TransactionType
    description: Optional[str] = None
    date: Optional[datetime.date] = None
