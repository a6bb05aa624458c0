from fastapi import APIRouter, Depends, Query
from storefront.domain.exceptions import ProviderException
from storefront.infrastructure.shiprocket import ShiprocketClient, ShiprocketError
from storefront.application.schemas import ServiceabilityRead
from .deps import get_shiprocket_client

router = APIRouter(prefix="/shipping", tags=["shipping"])

@router.get("/check-serviceability", response_model=ServiceabilityRead)
def check_serviceability(
    pincode: str = Query(..., min_length=1),
    weight: float = Query(0.5, gt=0),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    try:
        result = shiprocket.check_serviceability(pincode, weight)
    except ShiprocketError as e:
        raise ProviderException("Failed to check serviceability", details=e.message) from e
    couriers = (result.get("data") or {}).get("available_courier_companies") or []
    return ServiceabilityRead(success=True, serviceable=bool(couriers), couriers=couriers)
