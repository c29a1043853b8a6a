"""Builds the raw, attribute-major upload map from a parsed multipart form.

Each file part is spooled to a temporary file so that its content can be
sniffed later, and its transport status is recorded as a platform upload
error code. Parts sharing one form name, or named with a ``[]`` suffix, are
grouped into a multi-file entry.
"""

import asyncio
import logging
import os
import pathlib
import tempfile
from typing import Any

from starlette.datastructures import FormData
from starlette.datastructures import UploadFile

from upload_validator.core.validation import UPLOAD_ERR_CANT_WRITE
from upload_validator.core.validation import UPLOAD_ERR_NO_FILE
from upload_validator.core.validation import UPLOAD_ERR_NO_TMP_DIR
from upload_validator.core.validation import UPLOAD_ERR_OK
from upload_validator.core.validation import UPLOAD_ERR_PARTIAL
from upload_validator.services.upload_field import ATTRIBUTE_DEFAULTS
from upload_validator.services.upload_field import UploadField

__all__ = [
    "build_upload_map",
    "cleanup_upload_map",
]

logger = logging.getLogger(__name__)

MULTI_SUFFIX = "[]"


def _entry(error: int, name: str = "", tmp_name: str = "", size: int = 0, content_type: str = "") -> dict[str, Any]:
    return {"error": error, "name": name, "tmp_name": tmp_name, "size": size, "type": content_type}


def _write_tmp_file(contents: bytes, tmp_dir: pathlib.Path) -> str:
    fd, tmp_name = tempfile.mkstemp(prefix="upload_", dir=tmp_dir)
    with os.fdopen(fd, "wb") as fh:
        fh.write(contents)
    return tmp_name


async def _spool_upload(upload: UploadFile, tmp_dir: pathlib.Path, request_id: str) -> dict[str, Any]:
    filename = upload.filename or ""
    content_type = upload.content_type or ""
    if not filename:
        return _entry(UPLOAD_ERR_NO_FILE)

    try:
        await upload.seek(0)
        contents = await upload.read()
    except Exception as e:
        logger.error("[%s] Failed to read upload part %s: %s", request_id, filename, e, exc_info=True)
        return _entry(UPLOAD_ERR_PARTIAL, filename, content_type=content_type)

    if not tmp_dir.is_dir():
        logger.error("[%s] Temporary upload directory is missing: %s", request_id, tmp_dir)
        return _entry(UPLOAD_ERR_NO_TMP_DIR, filename, size=len(contents), content_type=content_type)

    try:
        tmp_name = await asyncio.to_thread(_write_tmp_file, contents, tmp_dir)
    except OSError as e:
        logger.error("[%s] Failed to write %s to %s: %s", request_id, filename, tmp_dir, e)
        return _entry(UPLOAD_ERR_CANT_WRITE, filename, size=len(contents), content_type=content_type)

    logger.debug("[%s] Spooled %s (%d bytes) to %s", request_id, filename, len(contents), tmp_name)
    return _entry(UPLOAD_ERR_OK, filename, tmp_name, len(contents), content_type)


async def build_upload_map(form: FormData, tmp_dir: pathlib.Path, request_id: str = "-") -> dict[str, dict[str, Any]]:
    """Spool every file part of ``form`` and describe them per field handle.

    Non-file form values are ignored.
    """
    grouped: dict[str, list[UploadFile]] = {}
    multiple: set[str] = set()
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        handle = key
        if key.endswith(MULTI_SUFFIX):
            handle = key[: -len(MULTI_SUFFIX)]
            multiple.add(handle)
        grouped.setdefault(handle, []).append(value)

    upload_map: dict[str, dict[str, Any]] = {}
    spooled: list[dict[str, Any]] = []
    try:
        for handle, uploads in grouped.items():
            entries = []
            for upload in uploads:
                entry = await _spool_upload(upload, tmp_dir, request_id)
                spooled.append(entry)
                entries.append(entry)
            if handle in multiple or len(entries) > 1:
                upload_map[handle] = {attribute: [entry[attribute] for entry in entries] for attribute in ATTRIBUTE_DEFAULTS}
            else:
                upload_map[handle] = entries[0]
            logger.info("[%s] Received %d file part(s) for field '%s'", request_id, len(entries), handle)
    except BaseException:
        logger.error("[%s] Spooling interrupted; removing %d spooled file(s)", request_id, len(spooled))
        cleanup_upload_map({str(index): entry for index, entry in enumerate(spooled)})
        raise
    return upload_map


def cleanup_upload_map(upload_map: dict[str, dict[str, Any]]) -> None:
    """Remove the temporary files spooled by `build_upload_map`."""
    for handle in upload_map:
        for tmp_name in UploadField(upload_map, handle).paths:
            if not tmp_name:
                continue
            try:
                pathlib.Path(tmp_name).unlink()
                logger.debug("Removed temporary upload file: %s", tmp_name)
            except FileNotFoundError:
                logger.warning("Temporary upload file not found during cleanup (possibly already deleted): %s", tmp_name)
            except OSError as e:
                logger.error("Error removing temporary upload file %s: %s", tmp_name, e)
