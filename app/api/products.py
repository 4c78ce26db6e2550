"""Product API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_cache
from app.api.deps import rate_limit
from app.api.deps import require_admin
from app.cache.manager import CacheManager
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.base import get_db_session
from app.db.models.user import User
from app.schemas.product import ProductCreate
from app.schemas.product import ProductUpdate
from app.services.products import create_product_service
from app.services.products import delete_product_service
from app.services.products import get_product_service
from app.services.products import get_top_rated_service
from app.services.products import list_products_service
from app.services.products import update_product_service
from app.validation.validators import object_id_schema

router = APIRouter(prefix="/api/v1/products", tags=["products"])

product_cache = get_cache("product")


@router.get("", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def list_products_endpoint(
    keyword: str = "",
    current_page: Annotated[int, Query(alias="currentPage", gt=0)] = 1,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
) -> JSONResponse:
    """List products, ten per page, optionally filtered by name keyword."""
    page = list_products_service(session, keyword=keyword.strip(), current_page=current_page)
    body = page.to_json()
    return send_success_response(
        ctx,
        status_code=200,
        data=body["products"],
        meta={"currentPage": body["currentPage"], "numberOfPages": body["numberOfPages"]},
    )


@router.get("/top-rated", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def get_top_rated_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
) -> JSONResponse:
    products = get_top_rated_service(session, cache)
    return send_success_response(ctx, status_code=200, data=products)


@router.get("/{product_id}", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def get_product_endpoint(
    product_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
) -> JSONResponse:
    """Get a single product by id."""
    product = get_product_service(session, cache, object_id_schema.parse(product_id))
    return send_success_response(ctx, status_code=200, data=product)


@router.post("", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def create_product_endpoint(
    payload: ProductCreate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Create a product."""
    product = create_product_service(session, cache, admin, payload)
    return send_success_response(ctx, status_code=201, data=product)


@router.put("/{product_id}", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def update_product_endpoint(
    product_id: str,
    payload: ProductUpdate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Update a product."""
    product = update_product_service(session, cache, object_id_schema.parse(product_id), payload)
    return send_success_response(ctx, status_code=200, data=product)


@router.delete("/{product_id}", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def delete_product_endpoint(
    product_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Delete a product and its reviews."""
    delete_product_service(session, cache, object_id_schema.parse(product_id))
    return send_success_response(ctx, status_code=200, data=None)
