# app/api/routers/payments.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_lock_service, get_message_bus
from app.data.database import get_db
from app.domain.errors import ShopError
from app.domain.schemas import PaymentIn, PaymentOut
from app.services.lock_service import LockService
from app.services.messaging import MessageBus
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    bus: MessageBus = Depends(get_message_bus),
):
    return PaymentService(db, lock_service, bus)


@router.post("/pay", response_model=PaymentOut)
def make_payment(
    payload: PaymentIn,
    user_id: int = Query(...),
    svc: PaymentService = Depends(get_service),
):
    """
    Rozlicza płatność zamówienia. Ponowne wywołanie dla opłaconego zamówienia nic nie zmienia.
    """
    try:
        svc.make_payment(user_id, payload.order_id)
        return svc.get_payment(user_id, payload.order_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{order_id}", response_model=PaymentOut)
def get_payment(
    order_id: int,
    user_id: int = Query(...),
    svc: PaymentService = Depends(get_service),
):
    try:
        return svc.get_payment(user_id, order_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
