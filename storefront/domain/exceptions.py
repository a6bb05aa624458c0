"""
Exception hierarchy for the storefront service.

StorefrontException (base)
├── NotFoundException
│   ├── ProductNotFoundException
│   ├── CollectionNotFoundException
│   └── OrderNotFoundException
├── CatalogException
│   ├── DuplicateSlugException
│   └── CollectionInUseException
├── OrderException
│   ├── InsufficientStockException
│   └── InvalidOrderStateException
├── PaymentException
│   ├── InvalidSignatureException
│   └── MissingSignatureException
├── ShipmentException
│   ├── ShipmentAlreadyExistsException
│   ├── ShipmentNotCreatedException
│   ├── AWBAlreadyAssignedException
│   └── PickupAddressNotConfiguredException
├── AuthException
└── ProviderException

Services raise these; the API layer renders them as ``{"error", "details"}``
with ``status_code``.
"""

from typing import Any, Optional


class StorefrontException(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error message
        details: Optional extra context (dict, list or vendor message)
        status_code: HTTP status used when the error reaches the API layer
    """

    status_code: int = 400

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            return f"{self.__class__.__name__}('{self.message}', {self.details!r})"
        return f"{self.__class__.__name__}('{self.message}')"


class NotFoundException(StorefrontException):
    status_code = 404


class ProductNotFoundException(NotFoundException):
    def __init__(self, product_id):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class CollectionNotFoundException(NotFoundException):
    def __init__(self, identifier=None):
        super().__init__("Collection not found", details={"collection": identifier} if identifier else None)


class OrderNotFoundException(NotFoundException):
    def __init__(self, order_id=None):
        super().__init__("Order not found", details={"order_id": order_id} if order_id else None)
        self.order_id = order_id


class CatalogException(StorefrontException):
    """Base exception for catalog validation errors."""


class DuplicateSlugException(CatalogException):
    def __init__(self, entity: str, slug: str):
        super().__init__(f"{entity} with this slug already exists", details={"slug": slug})


class CollectionInUseException(CatalogException):
    def __init__(self, product_count: int):
        super().__init__(
            f"Cannot delete collection. {product_count} product(s) are using this collection."
        )
        self.product_count = product_count


class OrderException(StorefrontException):
    """Base exception for order errors."""


class InsufficientStockException(OrderException):
    def __init__(self, title: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {title}",
            details={"requested": requested, "available": available},
        )
        self.requested = requested
        self.available = available


class InvalidOrderStateException(OrderException):
    def __init__(self, message: str, current_status: str):
        super().__init__(message, details={"current_status": current_status})
        self.current_status = current_status


class PaymentException(StorefrontException):
    """Base exception for payment errors."""


class InvalidSignatureException(PaymentException):
    pass


class MissingSignatureException(PaymentException):
    def __init__(self):
        super().__init__("Missing signature")


class ShipmentException(StorefrontException):
    """Base exception for shipment precondition errors."""


class ShipmentAlreadyExistsException(ShipmentException):
    def __init__(self, shipment_id: str):
        super().__init__("Shipment already created for this order", details={"shipment_id": shipment_id})


class ShipmentNotCreatedException(ShipmentException):
    def __init__(self, status_code: int = 400):
        super().__init__("No shipment created for this order", status_code=status_code)


class AWBAlreadyAssignedException(ShipmentException):
    def __init__(self, awb_code: str):
        super().__init__("AWB already assigned to this shipment", details={"awb_code": awb_code})


class PickupAddressNotConfiguredException(ShipmentException):
    status_code = 500

    def __init__(self):
        super().__init__(
            "Pickup address not configured. Please set SHIPROCKET_PICKUP_* environment variables."
        )


class AuthException(StorefrontException):
    """Any authentication or authorization failure; always rendered as 401."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ProviderException(StorefrontException):
    """An outbound call to Razorpay or Shiprocket failed."""

    status_code = 502
