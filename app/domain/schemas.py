# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for registering a user."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class UserRead(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(..., ge=0)
    category_id: int | None = Field(None, gt=0)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    stock: int
    category_id: int | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    """Adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class UpdateCartIn(BaseModel):
    """Setting the absolute quantity of a cart line."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class CartItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal


class CartOut(BaseModel):
    total_items: int = 0
    total_products: int = 0
    total_price: Decimal = Decimal("0.00")
    items: List[CartItemOut] = []


class CheckoutIn(BaseModel):
    payment_method: Literal["balance", "transfer"]


class CheckoutOut(BaseModel):
    order_id: int
    payment_method: str
    total: Decimal


class PaymentIn(BaseModel):
    order_id: int = Field(..., gt=0)


class PaymentOut(BaseModel):
    id: int
    order_id: int
    payment_method: str
    payment_status: str
    created_at: datetime
    updated_at: datetime
    expired_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    total_price: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(OrderOut):
    items: List[OrderItemOut] = []
    payment: PaymentOut | None = None


class OrderStatusEvent(BaseModel):
    """Body of the order status message."""

    order_id: int = Field(..., gt=0)
    status: str = Field(..., min_length=1)


class AmountIn(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class TransferIn(BaseModel):
    recipient_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class BalanceOut(BaseModel):
    balance: Decimal


class TransferSide(BaseModel):
    user_id: int
    balance: Decimal


class TransferOut(BaseModel):
    from_: TransferSide = Field(..., alias="from")
    to: TransferSide

    model_config = ConfigDict(populate_by_name=True)
