from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.api.deps import get_cache_service
from app.data.database import get_db
from app.domain.errors import ShopError
from app.services.cache_service import CacheService
from app.services.user_service import UserService
from app.domain.schemas import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


def get_service(db: Session, cache: CacheService):
    return UserService(db, cache)


@router.post("/", response_model=UserRead, status_code=201)
def register_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
):
    service = get_service(db, cache)
    try:
        return service.register(payload)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/", response_model=list[UserRead])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
):
    return get_service(db, cache).list_users(page, limit)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
):
    service = get_service(db, cache)
    try:
        return service.get_user(user_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
):
    service = get_service(db, cache)
    try:
        return service.update_user(user_id, payload)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
