# bakery/routers/admin_orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from bakery.core.auth import require_admin
from bakery.database import get_session
from bakery.repositories.cart_repo import CartRepository
from bakery.repositories.order_repo import OrderRepository
from bakery.repositories.product_repo import ProductRepository
from bakery.schemas.order import (
    OrderNotesUpdate,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
    PaymentProofLink,
)
from bakery.services.order_service import OrderService

router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin Orders"],
    dependencies=[Depends(require_admin)],
)

service = OrderService(OrderRepository(), CartRepository(), ProductRepository())


@router.get("", response_model=list[OrderRead])
def list_all_orders(
    session: Session = Depends(get_session),
    status_filter: OrderStatus | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders, newest first. Optional `status_filter`.
    """
    return service.list_all_orders(session, skip, limit, status_filter=status_filter)


@router.get("/{order_id}", response_model=OrderWithItemsRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order with items and its verification summary.
    """
    return service.get_order_admin(session, order_id)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Set the order status: pending, verified or completed.
    """
    return service.update_status(session, order_id, payload)


@router.post("/{order_id}/complete", response_model=OrderRead)
def complete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Mark an order as collected.
    """
    return service.mark_completed(session, order_id)


@router.patch("/{order_id}/notes", response_model=OrderRead)
def update_order_notes(
    order_id: uuid.UUID,
    payload: OrderNotesUpdate,
    session: Session = Depends(get_session),
):
    return service.update_notes(session, order_id, payload)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete an order, its items and its payment proof.
    """
    service.delete_order(session, order_id)
    return None


@router.get("/{order_id}/payment-proof", response_model=PaymentProofLink)
def get_payment_proof(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    expires_in: int = 3600,
):
    """
    Short-lived signed URL for the order's proof of payment.
    """
    return service.get_payment_proof_link(session, order_id, expires_in)
