"""Validation and normalization of multipart file-upload fields."""

from upload_validator.models.upload_models import FileRecord  # noqa: F401
from upload_validator.models.upload_models import ValidationOutcome  # noqa: F401
from upload_validator.services.upload_field import UploadField  # noqa: F401
from upload_validator.services.validator import FileUploadValidator  # noqa: F401
