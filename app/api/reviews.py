"""Review API routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_cache
from app.api.deps import get_current_user
from app.api.deps import rate_limit
from app.api.deps import require_admin
from app.cache.manager import CacheManager
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.base import get_db_session
from app.db.models.user import User
from app.schemas.review import ReviewCreate
from app.schemas.review import ReviewUpdate
from app.services.reviews import create_review_service
from app.services.reviews import delete_review_service
from app.services.reviews import list_product_reviews_service
from app.services.reviews import list_reviews_service
from app.services.reviews import update_review_service
from app.validation.validators import object_id_schema

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])

product_cache = get_cache("product")


@router.get("/product/{product_id}", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def list_product_reviews_endpoint(
    product_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
) -> JSONResponse:
    """List reviews for one product."""
    reviews = list_product_reviews_service(session, object_id_schema.parse(product_id))
    return send_success_response(ctx, status_code=200, data=reviews)


@router.get("", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def list_reviews_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    return send_success_response(ctx, status_code=200, data=list_reviews_service(session))


@router.post("", dependencies=[Depends(rate_limit("STRICT"))])
@async_handler
def create_review_endpoint(
    payload: ReviewCreate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Review a product; each user may review a product once."""
    review = create_review_service(session, cache, user, payload)
    return send_success_response(ctx, status_code=201, data=review)


@router.patch("/{review_id}", dependencies=[Depends(rate_limit("STRICT"))])
@async_handler
def update_review_endpoint(
    review_id: str,
    payload: ReviewUpdate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Edit a review owned by the caller."""
    review = update_review_service(session, cache, user, object_id_schema.parse(review_id), payload)
    return send_success_response(ctx, status_code=200, data=review)


@router.delete("/{review_id}", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def delete_review_endpoint(
    review_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    cache: CacheManager = Depends(product_cache),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Delete a review owned by the caller."""
    delete_review_service(session, cache, user, object_id_schema.parse(review_id))
    return send_success_response(ctx, status_code=200, data=None)
