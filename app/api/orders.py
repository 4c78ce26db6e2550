"""Order API routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.api.deps import rate_limit
from app.api.deps import require_admin
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.base import get_db_session
from app.db.models.user import User
from app.schemas.order import OrderCreate
from app.services.orders import create_order_service
from app.services.orders import get_order_service
from app.services.orders import list_orders_service
from app.services.orders import mark_order_delivered_service
from app.services.orders import mark_order_paid_service
from app.validation.validators import object_id_schema

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.post("", dependencies=[Depends(rate_limit("STRICT"))])
@async_handler
def create_order_endpoint(
    payload: OrderCreate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Place an order for the signed-in user."""
    order = create_order_service(session, user, payload)
    return send_success_response(ctx, status_code=201, data=order)


@router.get("/mine", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def list_my_orders_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    orders = list_orders_service(session, user_id=user.id)
    return send_success_response(ctx, status_code=200, data=orders)


@router.get("", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def list_orders_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """List every order."""
    return send_success_response(ctx, status_code=200, data=list_orders_service(session))


@router.get("/{order_id}", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def get_order_endpoint(
    order_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Get one order; customers only see their own."""
    order = get_order_service(session, user, object_id_schema.parse(order_id))
    return send_success_response(ctx, status_code=200, data=order)


@router.put("/{order_id}/pay", dependencies=[Depends(rate_limit("STRICT"))])
@async_handler
def mark_order_paid_endpoint(
    order_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    order = mark_order_paid_service(session, object_id_schema.parse(order_id))
    return send_success_response(ctx, status_code=200, data=order)


@router.put("/{order_id}/deliver", dependencies=[Depends(rate_limit("STRICT"))])
@async_handler
def mark_order_delivered_endpoint(
    order_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    order = mark_order_delivered_service(session, object_id_schema.parse(order_id))
    return send_success_response(ctx, status_code=200, data=order)
