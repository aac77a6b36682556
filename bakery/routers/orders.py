# bakery/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from bakery.core.auth import require_auth
from bakery.database import get_session
from bakery.models.user import User
from bakery.repositories.cart_repo import CartRepository
from bakery.repositories.order_repo import OrderRepository
from bakery.repositories.product_repo import ProductRepository
from bakery.schemas.order import OrderRead, OrderWithItemsRead
from bakery.services.order_service import OrderService
from bakery.services.payment_verification import PaymentVerifier, get_payment_verifier

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
service = OrderService(order_repo, cart_repo, product_repo)


@router.post(
    "/checkout",
    response_model=OrderWithItemsRead,
)
def checkout(
    pickup_location: str = Form(...),
    payment_proof: UploadFile = File(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    verifier: PaymentVerifier | None = Depends(get_payment_verifier),
):
    """
    Create an order from the current user's cart.

    Multipart form:
      - pickup_location: one of the configured pickup points
      - payment_proof: PDF or image of the EFT proof of payment (max 10MB)
    """
    file_bytes = payment_proof.file.read()
    return service.create_order_from_cart(
        session,
        current_user,
        pickup_location=pickup_location,
        proof_content_type=payment_proof.content_type or "",
        proof_bytes=file_bytes,
        verifier=verifier,
    )


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders (without items).
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return service.get_user_order(session, current_user.id, order_id)
