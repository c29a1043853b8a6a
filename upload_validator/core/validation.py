"""Defines platform upload error codes and the reasons reported for them."""

import logging
from enum import IntEnum

logger = logging.getLogger(__name__)


class UploadErrorCode(IntEnum):
    """Transport-level upload status codes reported per file."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


UPLOAD_ERR_OK: int = UploadErrorCode.OK
UPLOAD_ERR_INI_SIZE: int = UploadErrorCode.INI_SIZE
UPLOAD_ERR_FORM_SIZE: int = UploadErrorCode.FORM_SIZE
UPLOAD_ERR_PARTIAL: int = UploadErrorCode.PARTIAL
UPLOAD_ERR_NO_FILE: int = UploadErrorCode.NO_FILE
UPLOAD_ERR_NO_TMP_DIR: int = UploadErrorCode.NO_TMP_DIR
UPLOAD_ERR_CANT_WRITE: int = UploadErrorCode.CANT_WRITE
UPLOAD_ERR_EXTENSION: int = UploadErrorCode.EXTENSION

# Human-readable failure reasons
REASON_NO_UPLOAD = "please upload a file."
REASON_INVALID_TYPE = "invalid file type."
REASON_INVALID_EXTENSION = "invalid file extension."
REASON_SIZE_EXCEEDED = "uploaded file exceeds the maximum allowed file size."
REASON_UNKNOWN_ERROR = "an unknown upload error occurred. please try again. if the issue persists, contact a site administrator."

# UPLOAD_ERR_NO_FILE is listed for completeness; a no-file code already fails
# the presence check, so validation reports REASON_NO_UPLOAD for it instead.
UPLOAD_ERROR_REASONS: dict[int, str] = {
    UploadErrorCode.INI_SIZE: REASON_SIZE_EXCEEDED,
    UploadErrorCode.FORM_SIZE: REASON_SIZE_EXCEEDED,
    UploadErrorCode.PARTIAL: "uploaded file was only partially uploaded. please try again.",
    UploadErrorCode.NO_FILE: "no file was uploaded. please upload a file.",
    UploadErrorCode.NO_TMP_DIR: "unable to upload file. missing a temporary folder. please contact a site administrator.",
    UploadErrorCode.CANT_WRITE: "failed to write file to disk. please have a site administrator check permissions.",
    UploadErrorCode.EXTENSION: "file upload stopped by an extension. please contact a site administrator.",
}


def parse_upload_code(code: object) -> int | None:
    """Return ``code`` as an int when it denotes an integer exactly, else ``None``.

    Accepts ints, integral floats (``3.0``) and strings of either form.
    Fractional, non-finite and non-numeric values are rejected.
    """
    if isinstance(code, bool):
        return None
    if isinstance(code, int):
        return int(code)
    if isinstance(code, str):
        text = code.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            code = float(text)
        except ValueError:
            return None
    if isinstance(code, float):
        try:
            return int(code) if code.is_integer() else None
        except (OverflowError, ValueError):
            return None
    return None


def reason_for_code(code: object) -> str | None:
    """Map a raw upload error code to its failure reason.

    Returns ``None`` for ``UPLOAD_ERR_OK``. Codes that are not exact integers,
    or integers outside the known table, map to the generic unknown-error reason.
    """
    value = parse_upload_code(code)
    if value is None:
        logger.debug("Unparseable upload error code: %r", code)
        return REASON_UNKNOWN_ERROR
    if value == UploadErrorCode.OK:
        return None
    return UPLOAD_ERROR_REASONS.get(value, REASON_UNKNOWN_ERROR)
