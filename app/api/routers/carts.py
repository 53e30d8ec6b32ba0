# app/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ShopError
from app.domain.schemas import (
    ItemIn,
    UpdateCartIn,
    CartOut,
)
from app.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db=db)


@router.get("/", response_model=CartOut)
def get_cart(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_cart(user_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.add_to_cart(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
        return svc.get_cart(user_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/items", response_model=CartOut)
def update_item(
    payload: UpdateCartIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.update_cart(user_id, payload)
        return svc.get_cart(user_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.remove_from_cart(user_id, product_id)
        return svc.get_cart(user_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
