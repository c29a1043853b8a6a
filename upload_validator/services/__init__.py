"""Upload validation services.

The accessor (`UploadField`) and the validator (`FileUploadValidator`) form
the in-process core; `request_files` adapts Starlette multipart forms into the
raw upload map they consume and `mime` sniffs content types with libmagic.
"""

from .mime import resolve_mime_type  # noqa: F401
from .request_files import build_upload_map  # noqa: F401
from .request_files import cleanup_upload_map  # noqa: F401
from .upload_field import UploadField  # noqa: F401
from .validator import FileUploadValidator  # noqa: F401
