# bakery/services/order_service.py
import logging
import smtplib
import time
import uuid
from datetime import datetime, timezone

import httpx
from fastapi import HTTPException, status
from sqlmodel import Session
from storage3.utils import StorageException

from bakery.core.config import get_settings
from bakery.core.storage_utils import (
    build_proof_filename,
    create_signed_url,
    delete_from_storage,
    upload_to_storage,
)
from bakery.models.cart import CartItem
from bakery.models.order import Order, OrderItem
from bakery.models.product import Product
from bakery.models.user import User
from bakery.reporting.money import ZERO, add, line_amount
from bakery.repositories.cart_repo import CartRepository
from bakery.repositories.order_repo import OrderRepository
from bakery.repositories.product_repo import ProductRepository
from bakery.schemas.order import (
    OrderItemRead,
    OrderNotesUpdate,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
    PaymentProofLink,
)
from bakery.services import notification_service
from bakery.services.payment_verification import PaymentVerifier, verification_summary

logger = logging.getLogger(__name__)

MAX_PROOF_BYTES = 10 * 1024 * 1024  # 10MB

ALLOWED_PROOF_CONTENT_TYPES: dict[str, str] = {
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Checkout: validate cart, upload payment proof, create order + items
      - Verify the proof (when a verifier is configured) and notify the bakery
      - Customer order history
      - Admin fulfilment: status, notes, delete
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # -------- Checkout --------

    def create_order_from_cart(
        self,
        session: Session,
        user: User,
        pickup_location: str,
        proof_content_type: str,
        proof_bytes: bytes,
        verifier: PaymentVerifier | None = None,
    ) -> OrderWithItemsRead:
        """
        Convert the current user's cart into an Order.

        Steps:
          1. Validate pickup location and payment proof file.
          2. Load cart items; error if empty.
          3. Ensure every product still exists and is active.
          4. Compute total_amount from cart snapshot prices.
          5. Upload payment proof to storage.
          6. Create Order (status='pending') and OrderItem rows.
          7. Clear cart and commit.
          8. Run AI verification of the proof (optional).
          9. Email the bakery.
        """
        settings = get_settings()

        # 1) Input checks
        if pickup_location not in settings.PICKUP_LOCATIONS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown pickup location. Choose one of: {', '.join(settings.PICKUP_LOCATIONS)}",
            )
        ext = self._validate_proof(proof_content_type, proof_bytes)

        # 2) Load cart
        cart_items: list[CartItem] = self.cart_repo.list_for_user(session, user.id)
        if not cart_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        # 3) Validate each cart item vs product
        errors: list[dict[str, str]] = []
        product_map: dict[uuid.UUID, Product] = {}

        for ci in cart_items:
            product = self.product_repo.get_by_id(session, ci.product_id)
            if not product:
                errors.append({"product_id": str(ci.product_id), "reason": "Product not found"})
                continue
            if not product.is_active:
                errors.append({"product_id": str(ci.product_id), "reason": "Product is no longer available"})
                continue
            product_map[ci.product_id] = product

        if errors:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Cart validation failed", "items": errors},
            )

        # 4) Total from snapshot prices
        total_amount = ZERO
        for ci in cart_items:
            total_amount = add(total_amount, line_amount(ci.snapshot_price, ci.quantity))

        if total_amount <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Total order amount must be positive",
            )

        # 5) Upload proof first so an order never exists without one
        proof_path = upload_to_storage(
            build_proof_filename(str(user.id), int(time.time() * 1000), ext),
            proof_bytes,
            proof_content_type,
        )

        # 6) Order + items
        order = Order(
            user_id=user.id,
            pickup_location=pickup_location,
            total_amount=total_amount,
            status=OrderStatus.PENDING.value,
            payment_proof_path=proof_path,
        )
        order = self.order_repo.create_order(session, order)

        order_items = [
            OrderItem(
                order_id=order.id,
                product_id=ci.product_id,
                quantity=ci.quantity,
                price=ci.snapshot_price,
            )
            for ci in cart_items
        ]
        order_items = self.order_repo.create_items(session, order_items)

        # 7) Clear cart and commit
        for ci in cart_items:
            session.delete(ci)
        session.commit()
        session.refresh(order)
        logger.info("Order %s created for user %s (%s)", order.id, user.id, pickup_location)

        # 8) Verification
        if verifier is not None:
            reference = " ".join(p for p in (user.name, user.surname) if p)
            outcome = verifier.verify(proof_bytes, proof_content_type, total_amount, reference)
            order.verification_result = outcome.model_dump(mode="json")
            if verifier.passes(outcome):
                order.status = OrderStatus.VERIFIED.value
            self.order_repo.update_order(session, order)
            session.commit()
            session.refresh(order)

        # 9) Notification
        product_names = {pid: p.name for pid, p in product_map.items()}
        try:
            notification_service.send_order_notification(order, order_items, product_names, user)
        except (RuntimeError, smtplib.SMTPException, OSError):
            logger.exception("Order %s saved but notification email failed", order.id)

        return self._build_order_with_items_dto(session, order, order_items)

    # -------- User-facing operations --------

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user (without items).
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return orders  # type: ignore[return-value]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(session, order, items)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status_filter: OrderStatus | None = None,
    ) -> list[OrderRead]:
        """
        List all orders (admin only), newest first.
        """
        orders = self.order_repo.list_all(
            session,
            skip,
            limit,
            status=status_filter.value if status_filter else None,
        )
        return orders  # type: ignore[return-value]

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self._get_order_or_404(session, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(session, order, items)

    def mark_completed(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        """
        Bread was collected: status -> completed, completed_at -> now.
        """
        return self.update_status(
            session, order_id, OrderStatusUpdate(status=OrderStatus.COMPLETED)
        )

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin status change. Any of pending / verified / completed may be set;
        completed_at follows the completed state.
        """
        order = self._get_order_or_404(session, order_id)

        new = payload.status
        if order.status == new.value:
            return order  # type: ignore[return-value]

        order.status = new.value
        if new == OrderStatus.COMPLETED:
            order.completed_at = datetime.now(timezone.utc)
        else:
            order.completed_at = None

        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return order  # type: ignore[return-value]

    def update_notes(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderNotesUpdate,
    ) -> OrderRead:
        order = self._get_order_or_404(session, order_id)
        order.notes = payload.notes
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return order  # type: ignore[return-value]

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        """
        Delete an order and its items, then its payment proof (best-effort).
        """
        order = self._get_order_or_404(session, order_id)
        proof_path = order.payment_proof_path

        self.order_repo.delete_order(session, order)
        session.commit()

        if proof_path:
            try:
                delete_from_storage(proof_path)
            except (StorageException, httpx.HTTPError, RuntimeError):
                logger.exception("Order %s deleted but proof %s was not removed", order_id, proof_path)

    def get_payment_proof_link(
        self,
        session: Session,
        order_id: uuid.UUID,
        expires_in: int = 3600,
    ) -> PaymentProofLink:
        order = self._get_order_or_404(session, order_id)
        if not order.payment_proof_path:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order has no payment proof",
            )
        url = create_signed_url(order.payment_proof_path, expires_in)
        return PaymentProofLink(order_id=order.id, url=url, expires_in=expires_in)

    # -------- Helpers --------

    def _get_order_or_404(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    @staticmethod
    def _validate_proof(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_PROOF_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please upload a PDF or image file (JPEG, PNG, WEBP).",
            )

        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment proof file is empty",
            )

        if len(file_bytes) > MAX_PROOF_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Payment proof too large (max 10MB).",
            )

        return ALLOWED_PROOF_CONTENT_TYPES[content_type]

    def _build_order_with_items_dto(
        self,
        session: Session,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead from ORM models.
        """
        names: dict[uuid.UUID, str | None] = {}
        item_dtos: list[OrderItemRead] = []

        for it in items:
            if it.product_id not in names:
                product = self.product_repo.get_by_id(session, it.product_id)
                names[it.product_id] = product.name if product else None
            item_dtos.append(
                OrderItemRead(
                    id=it.id,
                    order_id=it.order_id,
                    product_id=it.product_id,
                    product_name=names[it.product_id],
                    quantity=it.quantity,
                    price=it.price,
                    line_total=line_amount(it.price, it.quantity),
                )
            )

        dto = OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            order_date=order.order_date,
            pickup_location=order.pickup_location,
            total_amount=order.total_amount,
            status=order.status,
            notes=order.notes,
            payment_proof_path=order.payment_proof_path,
            verification_result=order.verification_result,
            completed_at=order.completed_at,
            items=item_dtos,
        )
        dto.verification_summary = verification_summary(dto.verification_result)
        return dto
