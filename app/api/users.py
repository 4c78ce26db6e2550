"""Profile and user administration routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_app_settings
from app.api.deps import get_current_user
from app.api.deps import rate_limit
from app.api.deps import require_admin
from app.core.config import Settings
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.base import get_db_session
from app.db.models.user import User
from app.schemas.user import ProfileUpdate
from app.schemas.user import UserAdminUpdate
from app.services.users import delete_user_service
from app.services.users import get_user_service
from app.services.users import list_users_service
from app.services.users import update_user_service
from app.validation.validators import object_id_schema

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/profile", dependencies=[Depends(rate_limit("DEFAULT"))])
@async_handler
def get_profile_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Return the signed-in user's account."""
    return send_success_response(ctx, status_code=200, data=get_user_service(session, user.id))


@router.patch("/profile", dependencies=[Depends(rate_limit("STRICT"))])
@async_handler
def update_profile_endpoint(
    payload: ProfileUpdate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    """Update the signed-in user's name, email or password."""
    profile = update_user_service(session, user.id, payload, settings)
    return send_success_response(ctx, status_code=200, data=profile)


@router.get("/admin", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def list_users_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    return send_success_response(ctx, status_code=200, data=list_users_service(session))


@router.get("/admin/{user_id}", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def get_user_endpoint(
    user_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    user = get_user_service(session, object_id_schema.parse(user_id))
    return send_success_response(ctx, status_code=200, data=user)


@router.patch("/admin/{user_id}", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def update_user_endpoint(
    user_id: str,
    payload: UserAdminUpdate,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Update any account, including its admin flag."""
    user = update_user_service(session, object_id_schema.parse(user_id), payload, settings)
    return send_success_response(ctx, status_code=200, data=user)


@router.delete("/admin/{user_id}", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def delete_user_endpoint(
    user_id: str,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    delete_user_service(session, object_id_schema.parse(user_id))
    return send_success_response(ctx, status_code=200, data=None)
