from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from storefront.auth_local import create_access_token
from storefront.infrastructure.db import get_db
from storefront.application.orders import OrderService
from storefront.application.users import UserService
from storefront.application.schemas import OrderRead, TokenRequest, TokenResponse
from .deps import require_user

router = APIRouter(tags=["account"])

@router.post("/auth/token", response_model=TokenResponse)
def issue_token(payload: TokenRequest, db: Session = Depends(get_db)):
    user = UserService(db).authenticate(payload.email, payload.password)
    return TokenResponse(access_token=create_access_token(user.email, user.role))

@router.get("/orders", response_model=list[OrderRead])
def my_orders(token_data: dict = Depends(require_user), db: Session = Depends(get_db)):
    """Orders placed with the signed-in user's email, newest first."""
    return OrderService(db).list_for_customer(token_data["sub"])
