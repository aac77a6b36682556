# bakery/routers/products.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from bakery.core.auth import require_admin
from bakery.database import get_session
from bakery.repositories.product_repo import ProductRepository
from bakery.schemas.product import (
    ProductAdminRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from bakery.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Admin endpoints --------
# Declared before /{product_id} so "admin" is not parsed as an id.


@router.get(
    "/admin",
    response_model=list[ProductAdminRead],
    dependencies=[Depends(require_admin)],
)
def list_products_admin(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    List every product, inactive ones included, with cost prices (admin only).
    """
    return service.list_products(session, skip=skip, limit=limit, only_active=False)


@router.post(
    "",
    response_model=ProductAdminRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new bread (admin only).
    """
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductAdminRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product that has never been ordered (admin only).
    """
    service.delete_product(session, product_id)
    return None


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the breads currently on offer.

    - Public endpoint.
    """
    return service.list_products(session, skip=skip, limit=limit, only_active=True)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single active product by id.

    - Public endpoint.
    """
    return service.get_product(session, product_id, only_active=True)
