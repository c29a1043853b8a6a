import asyncio
import logging
from uuid import uuid4

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Request

from upload_validator.core.config import settings
from upload_validator.core.security import verify_api_key
from upload_validator.models.upload_models import ValidationResponse
from upload_validator.services.request_files import build_upload_map
from upload_validator.services.request_files import cleanup_upload_map
from upload_validator.services.validator import FileUploadValidator

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post(
    "/uploads/{handle}/validate",
    dependencies=[Depends(verify_api_key)],
    response_model=ValidationResponse,
    summary="Validate an uploaded file field",
    tags=["Uploads"],
)
async def validate_upload_field(
    request: Request,
    handle: str,
    extensions: list[str] | None = Query(default=None),
    types: list[str] | None = Query(default=None),
    mime_types: list[str] | None = Query(default=None),
) -> ValidationResponse:
    """Validates the file(s) submitted under `handle` in a multipart body.

    Constraints given as query parameters replace the configured defaults for
    that dimension. The response is 200 whether or not the upload is valid;
    `valid`, `reason` and `code` describe the outcome and `files` lists one
    record per submitted file.

    Requires a valid API key via the 'X-API-Key' header.
    """
    request_id = str(uuid4())
    logger.info("[%s] Validation requested for field '%s'", request_id, handle)

    try:
        form = await request.form()
    except Exception as e:
        logger.error("[%s] Failed to parse multipart body: %s", request_id, e, exc_info=True)
        raise HTTPException(status_code=400, detail="Malformed multipart body.") from e

    upload_map: dict = {}
    try:
        upload_map = await build_upload_map(form, settings.upload_tmp_dir, request_id)
        validator = FileUploadValidator(handle, upload_map)
        validator.add_allowed_file_extension(*(extensions or settings.default_allowed_extensions))
        validator.add_allowed_file_type(*(types or settings.default_allowed_file_types))
        validator.add_allowed_mime_type(*(mime_types or settings.default_allowed_mime_types))

        outcome = await asyncio.to_thread(validator.is_valid)
        files = []
        if handle in upload_map:
            file_data = validator.get_file_data()
            files = file_data if isinstance(file_data, list) else [file_data]

        logger.info(
            "[%s] Field '%s' validated: valid=%s reason=%s",
            request_id,
            handle,
            outcome.valid,
            outcome.reason,
        )
        return ValidationResponse(
            handle=handle,
            valid=outcome.valid,
            reason=outcome.reason,
            code=outcome.code,
            multiple=validator.is_multiple(),
            files=files,
        )
    finally:
        await form.close()
        cleanup_upload_map(upload_map)
