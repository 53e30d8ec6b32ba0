# app/api/routers/balance.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_lock_service
from app.data.database import get_db
from app.domain.errors import ShopError
from app.domain.schemas import AmountIn, TransferIn, BalanceOut, TransferOut, TransferSide
from app.services.balance_service import BalanceService
from app.services.lock_service import LockService

router = APIRouter(prefix="/balance", tags=["balance"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    return BalanceService(db, lock_service)


@router.get("/", response_model=BalanceOut)
def check_balance(
    user_id: int = Query(...),
    svc: BalanceService = Depends(get_service),
):
    try:
        return BalanceOut(balance=svc.check_balance(user_id))
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/deposit", response_model=BalanceOut)
def deposit(
    payload: AmountIn,
    user_id: int = Query(...),
    svc: BalanceService = Depends(get_service),
):
    try:
        return BalanceOut(balance=svc.deposit(user_id, payload.amount))
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/withdraw", response_model=BalanceOut)
def withdraw(
    payload: AmountIn,
    user_id: int = Query(...),
    svc: BalanceService = Depends(get_service),
):
    try:
        svc.withdraw(user_id, payload.amount)
        return BalanceOut(balance=svc.check_balance(user_id))
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/transfer", response_model=TransferOut)
def transfer(
    payload: TransferIn,
    user_id: int = Query(...),
    svc: BalanceService = Depends(get_service),
):
    try:
        sender, receiver = svc.transfer(user_id, payload.recipient_id, payload.amount)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return TransferOut(
        from_=TransferSide(user_id=sender.user_id, balance=sender.amount),
        to=TransferSide(user_id=receiver.user_id, balance=receiver.amount),
    )
