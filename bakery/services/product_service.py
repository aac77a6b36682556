# bakery/services/product_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from bakery.models.product import Product
from bakery.repositories.product_repo import ProductRepository
from bakery.schemas.product import ProductCreate, ProductUpdate


class ProductService:
    """
    Business logic for the bread catalogue.

    Admin-only operations are enforced at the router via require_admin.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
    ) -> list[Product]:
        return self.repo.list(session, skip=skip, limit=limit, only_active=only_active)

    def get_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        only_active: bool = False,
    ) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product or (only_active and not product.is_active):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(**payload.model_dump())
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product. Past orders keep their own prices.
        """
        product = self.get_product(session, product_id)

        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field in {"name", "price", "cost_price", "is_active"}:
                continue
            setattr(product, field, value)

        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product that was never ordered.

        Ordered products are referenced by weekly reports, so they can
        only be deactivated.
        """
        product = self.get_product(session, product_id)
        if self.repo.has_order_items(session, product_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product has orders; deactivate it instead",
            )
        self.repo.delete(session, product)
