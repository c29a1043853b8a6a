"""Validates one upload field against caller-declared allow-lists.

Typical use from a request handler::

    validator = FileUploadValidator("avatar", upload_map)
    validator.add_allowed_file_type("image")
    validator.add_allowed_file_extension("jpg", "jpeg", "png")
    outcome = validator.is_valid()
    if not outcome:
        raise HTTPException(status_code=400, detail=outcome.reason)

Checks run in a fixed order (presence, platform error codes, MIME type, type
category, extension) and stop at the first failure.
"""

import logging
from collections.abc import Callable
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any

from upload_validator.core.exceptions import InvalidExtensionError
from upload_validator.core.exceptions import InvalidTypeError
from upload_validator.core.exceptions import NoUploadError
from upload_validator.core.exceptions import PlatformUploadError
from upload_validator.core.exceptions import UnknownUploadError
from upload_validator.core.exceptions import UploadValidationError
from upload_validator.core.validation import REASON_INVALID_EXTENSION
from upload_validator.core.validation import REASON_INVALID_TYPE
from upload_validator.core.validation import REASON_NO_UPLOAD
from upload_validator.core.validation import REASON_UNKNOWN_ERROR
from upload_validator.core.validation import reason_for_code
from upload_validator.models.upload_models import FileRecord
from upload_validator.models.upload_models import ValidationOutcome
from upload_validator.services.mime import resolve_mime_type
from upload_validator.services.upload_field import UploadField

__all__ = [
    "FileUploadValidator",
    "file_extension",
]

logger = logging.getLogger(__name__)

MimeResolver = Callable[[str], str | None]


def file_extension(filename: str) -> str:
    """Return the lower-cased text after the last dot of the base name, or ``""``."""
    basename = PurePath(filename.replace("\\", "/")).name if filename else ""
    if "." not in basename:
        return ""
    return basename.rpartition(".")[2].lower()


class FileUploadValidator:
    """Holds allow-lists for one upload field and decides whether it is valid."""

    def __init__(
        self,
        handle: str,
        files: Mapping[str, Any] | None,
        mime_resolver: MimeResolver | None = None,
    ) -> None:
        self.handle = handle
        self.field = UploadField(files, handle)
        self._mime_resolver = mime_resolver
        self._allowed_file_extensions: list[str] = []
        self._allowed_file_types: list[str] = []
        self._allowed_mime_types: list[str] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_allowed_file_extension(self, *file_extensions: str) -> "FileUploadValidator":
        for file_ext in file_extensions:
            self._allowed_file_extensions.append(file_ext.lower().lstrip("."))
        return self

    def add_allowed_file_type(self, *file_types: str) -> "FileUploadValidator":
        """Allow type categories, i.e. the first part of a MIME type (audio, video, image, text)."""
        for file_type in file_types:
            self._allowed_file_types.append(file_type.lower())
        return self

    def add_allowed_mime_type(self, *mime_types: str) -> "FileUploadValidator":
        for mime_type in mime_types:
            self._allowed_mime_types.append(mime_type.lower())
        return self

    @property
    def allowed_file_extensions(self) -> tuple[str, ...]:
        return tuple(self._allowed_file_extensions)

    @property
    def allowed_file_types(self) -> tuple[str, ...]:
        return tuple(self._allowed_file_types)

    @property
    def allowed_mime_types(self) -> tuple[str, ...]:
        return tuple(self._allowed_mime_types)

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------

    def has_upload(self) -> bool:
        return self.field.has_upload()

    def is_multiple(self) -> bool:
        return self.field.is_multiple()

    def get_file_data(self) -> FileRecord | list[FileRecord]:
        return self.field.get_file_data()

    @property
    def error(self) -> Any:
        return self.field.error

    @property
    def name(self) -> Any:
        return self.field.name

    @property
    def path(self) -> Any:
        return self.field.path

    @property
    def size(self) -> Any:
        return self.field.size

    @property
    def type(self) -> Any:
        return self.field.type

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_valid(self) -> ValidationOutcome:
        """Run every check in order and report success or the first failure."""
        mime_cache: dict[str, str] = {}
        try:
            self._check_presence()
            self._check_upload_errors()
            if self._allowed_mime_types:
                self._check_mime_types(mime_cache)
            if self._allowed_file_types:
                self._check_file_types(mime_cache)
            if self._allowed_file_extensions:
                self._check_file_extensions()
        except UploadValidationError as e:
            logger.warning("Upload field '%s' rejected (%s): %s", self.handle, e.code, e.reason)
            return ValidationOutcome.fail(e.reason, e.code)

        logger.debug("Upload field '%s' passed validation", self.handle)
        return ValidationOutcome.ok()

    def _check_presence(self) -> None:
        if not self.field.has_upload():
            raise NoUploadError(REASON_NO_UPLOAD)

    def _check_upload_errors(self) -> None:
        for code in self.field.errors:
            reason = reason_for_code(code)
            if reason is None:
                continue
            if reason == REASON_UNKNOWN_ERROR:
                raise UnknownUploadError(reason)
            raise PlatformUploadError(reason)

    def _resolve_mime(self, path: str, cache: dict[str, str]) -> str:
        if path in cache:
            return cache[path]
        resolver = self._mime_resolver or resolve_mime_type
        try:
            mime = resolver(path)
        except Exception as e:
            logger.warning("MIME resolver raised for %s: %s", path, e)
            mime = None
        cache[path] = (mime or "").lower()
        return cache[path]

    def _check_mime_types(self, cache: dict[str, str]) -> None:
        for path in self.field.paths:
            mime = self._resolve_mime(path, cache)
            if mime not in self._allowed_mime_types:
                logger.debug("Upload field '%s': MIME type '%s' not allowed", self.handle, mime)
                raise InvalidTypeError(REASON_INVALID_TYPE)

    def _check_file_types(self, cache: dict[str, str]) -> None:
        for path in self.field.paths:
            file_type = self._resolve_mime(path, cache).partition("/")[0]
            if not file_type or file_type not in self._allowed_file_types:
                logger.debug("Upload field '%s': file type '%s' not allowed", self.handle, file_type)
                raise InvalidTypeError(REASON_INVALID_TYPE)

    def _check_file_extensions(self) -> None:
        for name in self.field.names:
            ext = file_extension(name)
            if ext not in self._allowed_file_extensions:
                logger.debug("Upload field '%s': extension '%s' of '%s' not allowed", self.handle, ext, name)
                raise InvalidExtensionError(REASON_INVALID_EXTENSION)
