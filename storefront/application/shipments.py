import logging
from datetime import datetime
from typing import Any, Optional
from sqlalchemy.orm import Session
from storefront.domain.models import Order, OrderStatus, Product, SHIPPABLE_STATUSES
from storefront.domain.exceptions import (
    AWBAlreadyAssignedException,
    InvalidOrderStateException,
    NotFoundException,
    OrderNotFoundException,
    PickupAddressNotConfiguredException,
    ProviderException,
    ShipmentAlreadyExistsException,
    ShipmentException,
    ShipmentNotCreatedException,
)
from storefront.infrastructure.shiprocket import ShiprocketClient, ShiprocketError
from .schemas import ShipmentCreateRequest

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT_KG = 0.5
DEFAULT_DIMENSION_CM = 10

# Status codes compared after upper-casing and dropping spaces, underscores and hyphens
DELIVERED_CODES = frozenset({"DL", "DELIVERED"})
PICKED_UP_CODES = frozenset({"PP", "PICKEDUP"})
RETURN_TO_ORIGIN_CODES = frozenset({"RTO", "RETURNTOORIGIN"})

def normalize_status_code(code: Any) -> str:
    text = str(code).upper()
    for ch in (" ", "_", "-"):
        text = text.replace(ch, "")
    return text

def is_return_to_origin(code: str) -> bool:
    return code in RETURN_TO_ORIGIN_CODES or code.startswith("RTO")

def split_name(full_name: str) -> tuple[str, str]:
    """'Asha Rani Verma' -> ('Asha', 'Rani Verma')"""
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])

def paisa_to_rupees(amount: int) -> float:
    return round(amount / 100, 2)

class ShipmentService:
    def __init__(self, db: Session, shiprocket: ShiprocketClient):
        self.db = db
        self.shiprocket = shiprocket

    def _get_order(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id)
        if not order:
            raise OrderNotFoundException(order_id)
        return order

    def _require_shipment(self, order: Order, status_code: int = 400) -> int:
        if not order.shiprocket_shipment_id:
            raise ShipmentNotCreatedException(status_code=status_code)
        try:
            return int(order.shiprocket_shipment_id)
        except ValueError as e:
            raise ShipmentException(
                "Stored shipment id is not numeric",
                details={"shipment_id": order.shiprocket_shipment_id},
            ) from e

    def _build_payload(self, order: Order, data: ShipmentCreateRequest) -> dict:
        first_name, last_name = split_name(order.customer_name)
        address = {
            "customer_name": first_name,
            "last_name": last_name,
            "address": order.address_street,
            "city": order.address_city,
            "pincode": order.address_zip_code,
            "state": order.address_state,
            "country": order.address_country,
            "email": order.customer_email,
            "phone": order.customer_phone,
        }

        order_items = []
        for item in order.items:
            product = self.db.get(Product, item.product_id)
            sku = product.sku if product and product.sku else f"SKU-{item.product_id}"
            order_items.append({
                "name": item.title,
                "sku": sku,
                "units": item.qty,
                "selling_price": paisa_to_rupees(item.price),
            })

        payload = {
            "order_id": order.order_number,
            "order_date": (order.created_at or datetime.utcnow()).strftime("%Y-%m-%d %H:%M"),
            "pickup_location": self.shiprocket.pickup_location,
            "shipping_is_billing": True,
            "order_items": order_items,
            "payment_method": "Prepaid" if order.status == OrderStatus.PAID.value else "COD",
            "sub_total": paisa_to_rupees(order.amount),
            "length": data.length or DEFAULT_DIMENSION_CM,
            "breadth": data.breadth or DEFAULT_DIMENSION_CM,
            "height": data.height or DEFAULT_DIMENSION_CM,
            "weight": data.weight or DEFAULT_WEIGHT_KG,
        }
        for key, value in address.items():
            payload[f"billing_{key}"] = value
            payload[f"shipping_{key}"] = value
        return payload

    def create(self, order_id: int, data: Optional[ShipmentCreateRequest] = None) -> Order:
        data = data or ShipmentCreateRequest()
        order = self._get_order(order_id)
        if order.shiprocket_shipment_id:
            raise ShipmentAlreadyExistsException(order.shiprocket_shipment_id)
        if order.status not in SHIPPABLE_STATUSES:
            raise InvalidOrderStateException(
                "Order must be paid or confirmed before creating shipment",
                current_status=order.status,
            )
        pickup = self.shiprocket.get_pickup_address()
        if not pickup["pincode"]:
            raise PickupAddressNotConfiguredException()

        try:
            response = self.shiprocket.create_shipment(self._build_payload(order, data))
        except ShiprocketError as e:
            logger.error(
                f"Shipment creation failed for {order.order_number}",
                extra={"extra_fields": {"order_id": order.id, "reason": e.message}},
            )
            raise ProviderException("Failed to create shipment in Shiprocket", details=e.message) from e

        shipment_id = response.get("shipment_id")
        if not shipment_id:
            raise ProviderException(
                "Failed to create shipment in Shiprocket",
                details=response.get("message") or "shipment_id missing from Shiprocket response",
            )

        awb_code = response.get("awb_code") or None
        order.shiprocket_shipment_id = str(shipment_id)
        order.shiprocket_order_id = str(response["order_id"]) if response.get("order_id") else None
        order.courier_name = response.get("courier_name") or None
        order.shipping_status = str(response.get("status_code") or "pending")
        order.pickup_address = pickup
        if awb_code:
            order.awb_code = awb_code
            order.tracking_url = self.shiprocket.tracking_url(awb_code)
            order.status = OrderStatus.SHIPPED.value
        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Shipment {order.shiprocket_shipment_id} created for {order.order_number}",
            extra={"extra_fields": {"order_id": order.id, "awb_code": order.awb_code}},
        )
        return order

    def detail(self, order_id: int) -> tuple[Order, Optional[dict]]:
        order = self._get_order(order_id)
        self._require_shipment(order, status_code=404)
        tracking = None
        if order.awb_code:
            try:
                tracking = self.shiprocket.get_tracking(order.awb_code)
            except ShiprocketError as e:
                logger.warning(
                    f"Tracking lookup failed for AWB {order.awb_code}",
                    extra={"extra_fields": {"order_id": order.id, "reason": e.message}},
                )
        return order, tracking

    def assign_awb(self, order_id: int, courier_id: Optional[int] = None) -> Order:
        order = self._get_order(order_id)
        shipment_id = self._require_shipment(order)
        if order.awb_code:
            raise AWBAlreadyAssignedException(order.awb_code)

        try:
            response = self.shiprocket.assign_awb(shipment_id, courier_id)
        except ShiprocketError as e:
            raise ProviderException("Failed to assign AWB", details=e.message) from e

        # Shiprocket nests the assignment under response.data
        body = response.get("response") or {}
        body = body.get("data", body)
        awb_code = body.get("awb_code")
        if not awb_code:
            raise ProviderException(
                "Failed to assign AWB",
                details=response.get("message") or "awb_code missing from Shiprocket response",
            )

        order.awb_code = awb_code
        order.courier_name = body.get("courier_name") or order.courier_name
        order.tracking_url = self.shiprocket.tracking_url(awb_code)
        order.status = OrderStatus.SHIPPED.value
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"AWB {awb_code} assigned to {order.order_number}")
        return order

    def schedule_pickup(self, order_id: int) -> tuple[Order, str]:
        order = self._get_order(order_id)
        shipment_id = self._require_shipment(order)
        try:
            response = self.shiprocket.schedule_pickup(shipment_id)
        except ShiprocketError as e:
            raise ProviderException("Failed to schedule pickup", details=e.message) from e

        order.pickup_scheduled_date = datetime.utcnow()
        self.db.commit()
        self.db.refresh(order)
        message = (response.get("response") or {}).get("data") or response.get("message")
        return order, str(message or "Pickup scheduled successfully")

    def label_url(self, order_id: int) -> Optional[str]:
        order = self._get_order(order_id)
        shipment_id = self._require_shipment(order)
        try:
            return self.shiprocket.generate_label(shipment_id).get("label_url")
        except ShiprocketError as e:
            raise ProviderException("Failed to generate label", details=e.message) from e

    def invoice_url(self, order_id: int) -> Optional[str]:
        order = self._get_order(order_id)
        shipment_id = self._require_shipment(order)
        try:
            return self.shiprocket.generate_invoice(shipment_id).get("invoice_url")
        except ShiprocketError as e:
            raise ProviderException("Failed to generate invoice", details=e.message) from e

    def apply_status_update(self, payload: dict) -> Order:
        """Mirror a Shiprocket status push onto the matching order."""
        shipment_id = payload.get("shipment_id") or (payload.get("shipment") or {}).get("id")
        if not shipment_id:
            raise ShipmentException("Missing shipment_id in webhook payload")

        order = (
            self.db.query(Order)
            .filter(Order.shiprocket_shipment_id == str(shipment_id))
            .first()
        )
        if not order:
            raise NotFoundException("Order not found for shipment", details={"shipment_id": str(shipment_id)})

        raw_code = payload.get("status_code") or payload.get("shipment_status") or payload.get("current_status")
        awb_code = payload.get("awb_code") or payload.get("awb")
        courier_name = payload.get("courier_name")
        previous_status = order.status

        if courier_name:
            order.courier_name = courier_name
        if awb_code:
            had_awb = bool(order.awb_code)
            order.awb_code = str(awb_code)
            order.tracking_url = self.shiprocket.tracking_url(str(awb_code))
            if not had_awb:
                order.status = OrderStatus.SHIPPED.value

        if raw_code is not None and raw_code != "":
            order.shipping_status = str(raw_code)
            code = normalize_status_code(raw_code)
            if code in DELIVERED_CODES:
                order.status = OrderStatus.SHIPPED.value
            elif code in PICKED_UP_CODES:
                if order.pickup_scheduled_date is None:
                    order.pickup_scheduled_date = datetime.utcnow()
            elif is_return_to_origin(code):
                # Applied last so it overrides the AWB transition above
                order.status = OrderStatus.CANCELLED.value

        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Shipment {order.shiprocket_shipment_id} status update",
            extra={"extra_fields": {
                "order_id": order.id,
                "shipping_status": order.shipping_status,
                "from": previous_status,
                "to": order.status,
            }},
        )
        return order
