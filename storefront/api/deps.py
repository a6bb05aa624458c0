from fastapi import Depends, Request
from shared.core.logging_config import user_id_var
from storefront.auth_local import decode_access_token
from storefront.core_settings import Settings, get_settings
from storefront.domain.exceptions import AuthException
from storefront.domain.models import UserRole
from storefront.infrastructure.razorpay import RazorpayClient
from storefront.infrastructure.shiprocket import ShiprocketClient

BEARER_PREFIX = "Bearer "

def get_razorpay_client(settings: Settings = Depends(get_settings)) -> RazorpayClient:
    return RazorpayClient(settings)

def get_shiprocket_client(settings: Settings = Depends(get_settings)) -> ShiprocketClient:
    return ShiprocketClient(settings)

def require_user(request: Request) -> dict:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise AuthException()
    token_data = decode_access_token(auth_header[len(BEARER_PREFIX):])
    if not token_data or not token_data.get("sub"):
        raise AuthException()
    user_id_var.set(token_data["sub"])
    return token_data

def require_admin(token_data: dict = Depends(require_user)) -> dict:
    # Wrong role answers like a missing token
    if token_data.get("role") != UserRole.ADMIN.value:
        raise AuthException()
    return token_data
