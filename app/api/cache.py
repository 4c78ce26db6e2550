"""Cache administration routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_caches
from app.api.deps import rate_limit
from app.api.deps import require_admin
from app.cache.manager import CacheManager
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.models.user import User
from app.services.cache import cache_stats_service
from app.services.cache import flush_cache_service

router = APIRouter(prefix="/api/v1/cache", tags=["cache"])


@router.get("/stats", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def cache_stats_endpoint(
    ctx: ResponseContext = Depends(get_response_context),
    caches: dict[str, CacheManager] = Depends(get_caches),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Report hit/miss/key counts per namespace."""
    stats = [entry.to_json() for entry in cache_stats_service(caches)]
    return send_success_response(ctx, status_code=200, data=stats)


@router.delete("/{namespace}", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
def flush_cache_endpoint(
    namespace: str,
    ctx: ResponseContext = Depends(get_response_context),
    caches: dict[str, CacheManager] = Depends(get_caches),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Drop every entry of one namespace."""
    flush_cache_service(caches, namespace)
    return send_success_response(ctx, status_code=200, data=None)
