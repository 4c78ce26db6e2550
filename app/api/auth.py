"""Authentication API routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_app_settings
from app.api.deps import rate_limit
from app.core.config import Settings
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.base import get_db_session
from app.schemas.user import SigninRequest
from app.schemas.user import SignupRequest
from app.services.auth import signin_service
from app.services.auth import signup_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup", dependencies=[Depends(rate_limit("AUTH"))])
@async_handler
def signup_endpoint(
    payload: SignupRequest,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Register an account."""
    user = signup_service(session, payload, settings)
    return send_success_response(ctx, status_code=201, data=user)


@router.post("/signin", dependencies=[Depends(rate_limit("AUTH"))])
@async_handler
async def signin_endpoint(
    payload: SigninRequest,
    ctx: ResponseContext = Depends(get_response_context),
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Exchange email and password for an access token."""
    user = await signin_service(session, payload, settings)
    return send_success_response(ctx, status_code=200, data=user)
