import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from debt_manager.exceptions import ConflictError, NotFoundError, ValidationError
from debt_manager.models.customer import Customer


logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def list_customers(db: Session):
    return (
        db.query(Customer)
        .order_by(Customer.created_at.desc(), Customer.id.asc())
        .all()
    )


def get_customer(db: Session, customer_id: str):
    return db.query(Customer).filter(Customer.id == customer_id).first()


def create_customer(
    db: Session,
    *,
    id: str | None,
    name: str | None,
    phone: str | None = None,
    email: str | None = None,
    total_debt: Decimal | None = None,
):
    customer_id = _clean(id)
    name = _clean(name)
    if not name or not customer_id:
        raise ValidationError("Name and id are required")

    existing = db.query(Customer.id).filter(Customer.id == customer_id).first()
    if existing:
        raise ConflictError(f"Customer {customer_id} already exists")

    customer = Customer(
        id=customer_id,
        name=name,
        phone=_clean(phone),
        email=_clean(email),
        total_debt=total_debt if total_debt is not None else Decimal("0.00"),
    )
    db.add(customer)
    try:
        db.commit()
    except IntegrityError as e:
        # A concurrent insert won the primary key race.
        db.rollback()
        raise ConflictError(f"Customer {customer_id} already exists") from e

    db.refresh(customer)
    logger.info("customer created", extra={"customer_id": customer_id, "total_debt": str(customer.total_debt)})
    return customer


def update_customer(
    db: Session,
    customer_id: str,
    *,
    name: str | None,
    phone: str | None = None,
    email: str | None = None,
    total_debt: Decimal | None = None,
):
    customer = get_customer(db, customer_id)
    if not customer:
        raise NotFoundError(f"Customer {customer_id} not found")

    name = _clean(name)
    if not name:
        raise ValidationError("Name is required")

    # Full replace: id and createdAt are never touched.
    customer.name = name
    customer.phone = _clean(phone)
    customer.email = _clean(email)
    customer.total_debt = total_debt if total_debt is not None else Decimal("0.00")

    db.commit()
    db.refresh(customer)
    logger.info("customer updated", extra={"customer_id": customer_id, "total_debt": str(customer.total_debt)})
    return customer
