# bakery/repositories/cart_repo.py
import uuid

from sqlmodel import Session, select

from bakery.models.cart import CartItem
from bakery.models.product import Product


class CartRepository:
    """
    Data access for cart lines. Every write commits; checkout removes
    lines itself inside its own transaction.
    """

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        """Cart lines in the order they were added."""
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at)
        )
        return session.exec(stmt).all()

    def get_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id,
        )
        return session.exec(stmt).first()

    def add_line(
        self,
        session: Session,
        user_id: uuid.UUID,
        product: Product,
        quantity: int,
    ) -> CartItem:
        """New cart line priced and named from `product` as it is right now."""
        item = CartItem(
            user_id=user_id,
            product_id=product.id,
            quantity=quantity,
            snapshot_price=product.price,
            product_name=product.name,
        )
        return self.save(session, item)

    def save(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        for item in self.list_for_user(session, user_id):
            session.delete(item)
        session.commit()
