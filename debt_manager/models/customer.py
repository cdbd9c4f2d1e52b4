from datetime import datetime, timezone

from sqlalchemy import Column, Numeric, String, TIMESTAMP
from sqlalchemy.sql import func

from debt_manager.db import Base


def _utcnow() -> datetime:
    # Naive UTC, matching the TIMESTAMP column.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Customer(Base):
    __tablename__ = "customers"

    # uuid4 string generated by the client at creation time
    id = Column(String(64), primary_key=True)

    name = Column(String(255), nullable=False)
    phone = Column(String(50))
    email = Column(String(255))

    total_debt = Column("totalDebt", Numeric(12, 2), nullable=False, default=0)

    created_at = Column("createdAt", TIMESTAMP, default=_utcnow, server_default=func.now())
