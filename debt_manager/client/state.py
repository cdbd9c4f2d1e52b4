from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr

from debt_manager.schemas.customer import CustomerOut
from debt_manager.schemas.money import Money


HIGH_DEBT_THRESHOLD = Decimal("5000")


@dataclass(frozen=True)
class SummaryStats:
    total_receivable: Decimal
    active_customers: int
    high_debt_count: int


@dataclass
class DashboardState:
    customers: list[CustomerOut] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    search_term: str = ""

    selected: Optional[CustomerOut] = None
    is_adding: bool = False
    form: Optional["CustomerForm"] = None

    strategy: Optional[str] = None
    loading_strategy: bool = False


class CustomerForm(BaseModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    debt: Money = Decimal("0.00")

    @classmethod
    def from_customer(cls, customer: CustomerOut) -> "CustomerForm":
        return cls.model_construct(
            name=customer.name,
            email=customer.email or "",
            phone=customer.phone,
            debt=customer.total_debt,
        )


def compute_stats(customers, threshold: Decimal = HIGH_DEBT_THRESHOLD) -> SummaryStats:
    total = sum((c.total_debt or Decimal("0") for c in customers), Decimal("0.00"))
    return SummaryStats(
        total_receivable=total,
        active_customers=len(customers),
        high_debt_count=sum(1 for c in customers if (c.total_debt or 0) > threshold),
    )


def filter_customers(customers, term: str, *, include_email: bool = False):
    needle = (term or "").strip().casefold()
    if not needle:
        return list(customers)

    def matches(c) -> bool:
        if needle in (c.name or "").casefold():
            return True
        return include_email and needle in (c.email or "").casefold()

    return [c for c in customers if matches(c)]
