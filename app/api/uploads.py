"""Image upload route."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi import File
from fastapi import Request
from fastapi import UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.deps import rate_limit
from app.api.deps import require_admin
from app.core.config import IMAGE_FIELD_NAME
from app.core.config import IMAGE_SIZE_LIMIT
from app.core.handlers import async_handler
from app.core.responses import ResponseContext
from app.core.responses import get_response_context
from app.core.responses import send_success_response
from app.db.models.user import User
from app.validation.validators import image_upload_schema

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])

DEFAULT_TRANSFER_ENCODING = "7bit"


@router.post("", dependencies=[Depends(rate_limit("ADMIN"))])
@async_handler
async def upload_image_endpoint(
    request: Request,
    image: UploadFile = File(...),
    ctx: ResponseContext = Depends(get_response_context),
    admin: User = Depends(require_admin),
) -> JSONResponse:
    """Validate an uploaded product image and store it.

    Reads at most one byte past the size limit.
    """
    buffer = await image.read(IMAGE_SIZE_LIMIT + 1)
    upload = image_upload_schema.parse(
        {
            "fieldname": IMAGE_FIELD_NAME,
            "originalname": image.filename or "",
            "encoding": DEFAULT_TRANSFER_ENCODING,
            "mimetype": image.content_type or "",
            "buffer": buffer,
            "size": len(buffer),
        }
    )
    url = await run_in_threadpool(request.app.state.image_storage.save, upload)
    return send_success_response(ctx, status_code=201, data={"image": url})
