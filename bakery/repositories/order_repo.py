# bakery/repositories/order_repo.py
import uuid
from datetime import datetime

from sqlmodel import Session, select

from bakery.models.order import Order, OrderItem
from bakery.models.product import Product


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; checkout and delete are multi-step transactions.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.order_date.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.order_date.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def list_in_range(
        self,
        session: Session,
        start: datetime,
        end: datetime,
    ) -> list[Order]:
        """
        Orders with start <= order_date < end, newest first.
        """
        stmt = (
            select(Order)
            .where(Order.order_date >= start, Order.order_date < end)
            .order_by(Order.order_date.desc())
        )
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def delete_order(self, session: Session, order: Order) -> None:
        """
        Delete the order's items first, then the order itself.
        """
        for item in self.list_items_for_order(session, order.id):
            session.delete(item)
        session.flush()
        session.delete(order)
        session.flush()

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return session.exec(stmt).all()

    def list_items_with_products(
        self,
        session: Session,
        order_ids: list[uuid.UUID],
    ) -> list[tuple[OrderItem, Product | None]]:
        """
        Line items for several orders joined with their product.

        Outer join: the product is None when it no longer exists.
        """
        if not order_ids:
            return []
        stmt = (
            select(OrderItem, Product)
            .join(Product, Product.id == OrderItem.product_id, isouter=True)
            .where(OrderItem.order_id.in_(order_ids))
        )
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items
