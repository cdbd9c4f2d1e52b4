from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from debt_manager.db import get_db
from debt_manager.deps.advisor import get_advisor
from debt_manager.exceptions import ConflictError, NotFoundError, ValidationError
from debt_manager.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate, MutationAck, StrategyOut
from debt_manager.services import customer_service
from debt_manager.services.advisory_service import DebtAdvisor


router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=list[CustomerOut])
def list_customers(db: Session = Depends(get_db)):
    return customer_service.list_customers(db)


@router.post("", response_model=MutationAck, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    try:
        customer_service.create_customer(
            db,
            id=payload.id,
            name=payload.name,
            phone=payload.phone,
            email=payload.email,
            total_debt=payload.totalDebt,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return MutationAck(message="Customer created")


@router.put("/{customer_id}", response_model=MutationAck)
def update_customer(customer_id: str, payload: CustomerUpdate, db: Session = Depends(get_db)):
    try:
        customer_service.update_customer(
            db,
            customer_id,
            name=payload.name,
            phone=payload.phone,
            email=payload.email,
            total_debt=payload.totalDebt,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return MutationAck(message="Customer updated")


@router.get("/{customer_id}/strategy", response_model=StrategyOut)
async def get_customer_strategy(
    customer_id: str,
    db: Session = Depends(get_db),
    advisor: DebtAdvisor = Depends(get_advisor),
):
    customer = customer_service.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    strategy = await advisor.get_debt_strategy(customer)
    return StrategyOut(customerId=customer.id, strategy=strategy)
