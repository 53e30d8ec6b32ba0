# app/api/__init__.py
from fastapi import APIRouter
from app.api.routers import balance, carts, categories, checkout, orders, payments, products, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(users.router)
api_router.include_router(categories.router)
api_router.include_router(products.router)
api_router.include_router(carts.router)
api_router.include_router(checkout.router)
api_router.include_router(payments.router)
api_router.include_router(orders.router)
api_router.include_router(balance.router)
