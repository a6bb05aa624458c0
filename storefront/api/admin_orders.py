from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session
from storefront.domain.models import OrderStatus
from storefront.infrastructure.db import get_db
from storefront.infrastructure.shiprocket import ShiprocketClient
from storefront.application.orders import OrderService
from storefront.application.shipments import ShipmentService
from storefront.application.schemas import (
    AssignAWBRequest,
    AWBAssigned,
    InvoiceGenerated,
    LabelGenerated,
    OrderPage,
    OrderRead,
    OrderStatusUpdate,
    OrderStatusUpdated,
    PickupScheduled,
    ShipmentCreated,
    ShipmentCreateRequest,
    ShipmentDetail,
)
from .deps import get_shiprocket_client, require_admin

router = APIRouter(prefix="/admin/orders", tags=["admin-orders"], dependencies=[Depends(require_admin)])

@router.get("", response_model=OrderPage)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    orders, pagination = OrderService(db).search(page, limit, status.value if status else None, search)
    return {"orders": orders, "pagination": pagination}

@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get(order_id)

@router.patch("/{order_id}", response_model=OrderStatusUpdated)
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    order = OrderService(db).update_status(order_id, payload.status)
    return OrderStatusUpdated(success=True, status=order.status)

# Shipment actions

@router.post("/{order_id}/shipment", response_model=ShipmentCreated)
def create_shipment(
    order_id: int,
    payload: Optional[ShipmentCreateRequest] = Body(None),
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    order = ShipmentService(db, shiprocket).create(order_id, payload)
    return {
        "success": True,
        "shipment": {
            "shipment_id": order.shiprocket_shipment_id,
            "order_id": order.shiprocket_order_id,
            "awb_code": order.awb_code,
            "courier_name": order.courier_name,
            "status": order.shipping_status,
        },
    }

@router.get("/{order_id}/shipment", response_model=ShipmentDetail)
def get_shipment(
    order_id: int,
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    order, tracking = ShipmentService(db, shiprocket).detail(order_id)
    return {
        "shipment": {
            "shipment_id": order.shiprocket_shipment_id,
            "order_id": order.shiprocket_order_id,
            "awb_code": order.awb_code,
            "courier_name": order.courier_name,
            "shipping_status": order.shipping_status,
            "tracking_url": order.tracking_url,
            "pickup_scheduled_date": order.pickup_scheduled_date,
        },
        "tracking": tracking,
    }

@router.post("/{order_id}/shipment/assign-awb", response_model=AWBAssigned)
def assign_awb(
    order_id: int,
    payload: Optional[AssignAWBRequest] = Body(None),
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    courier_id = payload.courier_id if payload else None
    order = ShipmentService(db, shiprocket).assign_awb(order_id, courier_id)
    return {"success": True, "awb": {"awb_code": order.awb_code, "courier_name": order.courier_name}}

@router.post("/{order_id}/shipment/schedule-pickup", response_model=PickupScheduled)
def schedule_pickup(
    order_id: int,
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    order, message = ShipmentService(db, shiprocket).schedule_pickup(order_id)
    return PickupScheduled(success=True, message=message, pickup_scheduled_date=order.pickup_scheduled_date)

@router.get("/{order_id}/shipment/label", response_model=LabelGenerated)
def get_label(
    order_id: int,
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    return LabelGenerated(success=True, label_url=ShipmentService(db, shiprocket).label_url(order_id))

@router.get("/{order_id}/shipment/invoice", response_model=InvoiceGenerated)
def get_invoice(
    order_id: int,
    db: Session = Depends(get_db),
    shiprocket: ShiprocketClient = Depends(get_shiprocket_client),
):
    return InvoiceGenerated(success=True, invoice_url=ShipmentService(db, shiprocket).invoice_url(order_id))
