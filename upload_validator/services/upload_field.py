"""Read-only access to one upload field of a raw, attribute-major upload map.

The raw map mirrors what a multipart parser hands over for each form field::

    {"avatar": {"error": 0, "name": "me.png", "tmp_name": "/tmp/up1", "size": 812, "type": "image/png"}}

For a multi-file field every attribute is instead a list aligned by index::

    {"photos": {"error": [0, 0], "name": ["a.jpg", "b.jpg"], "tmp_name": [...], "size": [...], "type": [...]}}

`UploadField` hides that difference: the public getters keep the submitted
shape, while the list views (`errors`, `names`, ...) always return one entry
per file so callers can loop without branching.
"""

import logging
import math
import re
from collections import Counter
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from upload_validator.core.validation import UPLOAD_ERR_NO_FILE
from upload_validator.core.validation import parse_upload_code
from upload_validator.models.upload_models import FileRecord

__all__ = [
    "UploadField",
    "absint",
]

logger = logging.getLogger(__name__)

# Raw attribute keys and their zero values
ATTRIBUTE_DEFAULTS: dict[str, Any] = {
    "error": 0,
    "name": "",
    "tmp_name": "",
    "size": 0,
    "type": "",
}

_MISSING = object()
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def absint(value: Any) -> int:
    """Coerce a raw size value to a non-negative integer; unparseable input becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return abs(value)
    if isinstance(value, float):
        return abs(int(value)) if math.isfinite(value) else 0
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return abs(int(match.group(1))) if match else 0
    return 0


def _to_code(value: Any) -> int | str:
    # Unparseable codes are kept as text so they surface as unknown errors later
    code = parse_upload_code(value)
    if code is not None:
        return code
    return value if isinstance(value, str) else str(value)


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "error": _to_code,
    "name": _to_str,
    "tmp_name": _to_str,
    "size": absint,
    "type": _to_str,
}


class UploadField:
    """Typed, shape-agnostic view over one field of a raw upload map."""

    def __init__(self, files: Mapping[str, Any] | None, handle: str) -> None:
        self.handle = handle
        self._files = files

    def get(self, key: str | Sequence[str], default: Any = None) -> Any:
        """Depth-first lookup along ``key``; any missing segment yields ``default``.

        ``None`` values count as missing, matching how form parsers report
        attributes that were never set.
        """
        if self._files is None:
            return default
        segments = [key] if isinstance(key, str) else list(key)
        value: Any = self._files
        for segment in segments:
            if isinstance(value, Mapping) and value.get(segment) is not None:
                value = value[segment]
            else:
                return default
        return value

    # ------------------------------------------------------------------
    # Shape detection
    # ------------------------------------------------------------------

    def has_upload(self) -> bool:
        """True when an error attribute was reported and none of its codes is "no file"."""
        raw = self.get([self.handle, "error"])
        if raw is None or raw == "" or (_is_sequence(raw) and len(raw) == 0):
            return False
        codes = Counter(_to_code(code) for code in (raw if _is_sequence(raw) else [raw]))
        return codes[UPLOAD_ERR_NO_FILE] == 0

    def is_multiple(self) -> bool:
        names = self.get([self.handle, "name"])
        return _is_sequence(names) and len(names) > 0

    # ------------------------------------------------------------------
    # Per-file list views
    # ------------------------------------------------------------------

    def _column(self, attribute: str) -> list[Any]:
        """Return one converted value per file for ``attribute``.

        Multi-file fields are aligned to the ``name`` list: shorter attributes
        are padded with the attribute's zero value and surplus entries dropped.
        """
        convert = _CONVERTERS[attribute]
        default = ATTRIBUTE_DEFAULTS[attribute]
        raw = self.get([self.handle, attribute], _MISSING)

        if self.is_multiple():
            count = len(self.get([self.handle, "name"]))
            values = list(raw) if _is_sequence(raw) else []
            if len(values) != count:
                logger.debug(
                    "Upload field '%s': attribute '%s' has %d entries for %d files",
                    self.handle,
                    attribute,
                    len(values),
                    count,
                )
            return [convert(values[i]) if i < len(values) and values[i] is not None else default for i in range(count)]

        if raw is _MISSING:
            if not isinstance(self.get([self.handle]), Mapping):
                return []
            return [default]
        if _is_sequence(raw):
            return [convert(value) for value in raw]
        return [convert(raw)]

    @property
    def errors(self) -> list[Any]:
        return self._column("error")

    @property
    def names(self) -> list[str]:
        return self._column("name")

    @property
    def paths(self) -> list[str]:
        return self._column("tmp_name")

    @property
    def sizes(self) -> list[int]:
        return self._column("size")

    @property
    def types(self) -> list[str]:
        return self._column("type")

    # ------------------------------------------------------------------
    # Shape-preserving getters
    # ------------------------------------------------------------------

    def _shaped(self, attribute: str) -> Any:
        if self.is_multiple():
            return self._column(attribute)
        raw = self.get([self.handle, attribute], _MISSING)
        if raw is _MISSING:
            return ATTRIBUTE_DEFAULTS[attribute]
        if _is_sequence(raw):
            return self._column(attribute)
        return _CONVERTERS[attribute](raw)

    @property
    def error(self) -> Any:
        return self._shaped("error")

    @property
    def name(self) -> Any:
        return self._shaped("name")

    @property
    def path(self) -> Any:
        return self._shaped("tmp_name")

    @property
    def size(self) -> Any:
        return self._shaped("size")

    @property
    def type(self) -> Any:
        return self._shaped("type")

    # ------------------------------------------------------------------
    # Transposition
    # ------------------------------------------------------------------

    def get_file_data(self) -> FileRecord | list[FileRecord]:
        """Return per-file records for the field.

        A multi-file field is transposed so that record ``i`` holds entry ``i``
        of every attribute. A single-file field is returned as one record built
        from its attribute map; attributes beyond the five known ones are kept.
        """
        field = self.get([self.handle])
        if not isinstance(field, Mapping):
            field = {}
        extras = {key: value for key, value in field.items() if isinstance(key, str) and key not in ATTRIBUTE_DEFAULTS}
        columns = {attribute: self._column(attribute) for attribute in ATTRIBUTE_DEFAULTS}

        if not self.is_multiple():
            record = dict(extras)
            for attribute, values in columns.items():
                record[attribute] = values[0] if values else ATTRIBUTE_DEFAULTS[attribute]
            return FileRecord.model_validate(record)

        records: list[FileRecord] = []
        for index in range(len(columns["name"])):
            record = {key: (value[index] if index < len(value) else None) if _is_sequence(value) else value for key, value in extras.items()}
            record.update({attribute: values[index] for attribute, values in columns.items()})
            records.append(FileRecord.model_validate(record))
        return records
