# app/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ShopError
from app.domain.schemas import CheckoutIn, CheckoutOut
from app.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Zamienia koszyk na zamówienie i oczekującą płatność (10 minut na zapłatę).
    """
    svc = CheckoutService(db)
    try:
        return svc.checkout(user_id, payload.payment_method)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
