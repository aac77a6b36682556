# bakery/services/cart_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from bakery.models.cart import CartItem
from bakery.models.product import Product
from bakery.reporting.money import ZERO, add, line_amount
from bakery.repositories.cart_repo import CartRepository
from bakery.repositories.product_repo import ProductRepository
from bakery.schemas.cart import (
    CartItemCreate,
    CartItemRead,
    CartItemUpdate,
    CartSummary,
)


def summarize_cart(items: list[CartItem]) -> CartSummary:
    """
    Cart lines with their line totals, the loaf count and the cart total.
    """
    summary = CartSummary()
    total = ZERO
    for it in items:
        line_total = line_amount(it.snapshot_price, it.quantity)
        total = add(total, line_total)
        summary.item_count += it.quantity
        summary.items.append(
            CartItemRead(
                id=it.id,
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                snapshot_price=it.snapshot_price,
                line_total=line_total,
                created_at=it.created_at,
            )
        )
    summary.total = total
    return summary


class CartService:
    """
    Server-side cart with the storefront's reducer rules:

      - adding a bread already in the cart adds to its quantity
      - setting a quantity of 0 removes the line
      - only active breads can be added; the price is frozen on first add

    Every operation returns the refreshed CartSummary.
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    def _orderable_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is not available",
            )
        return product

    def _line_or_404(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartItem:
        item = self.cart_repo.get_item(session, user_id, product_id)
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )
        return item

    def get_cart_summary(self, session: Session, user_id: uuid.UUID) -> CartSummary:
        return summarize_cart(self.cart_repo.list_for_user(session, user_id))

    def add_to_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartSummary:
        product = self._orderable_product(session, payload.product_id)

        item = self.cart_repo.get_item(session, user_id, product.id)
        if item is None:
            self.cart_repo.add_line(session, user_id, product, payload.quantity)
        else:
            item.quantity += payload.quantity
            self.cart_repo.save(session, item)

        return self.get_cart_summary(session, user_id)

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        item = self._line_or_404(session, user_id, product_id)

        if payload.quantity == 0:
            self.cart_repo.delete(session, item)
        else:
            item.quantity = payload.quantity
            self.cart_repo.save(session, item)

        return self.get_cart_summary(session, user_id)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartSummary:
        self.cart_repo.delete(session, self._line_or_404(session, user_id, product_id))
        return self.get_cart_summary(session, user_id)

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> CartSummary:
        self.cart_repo.clear_user_cart(session, user_id)
        return CartSummary()
