from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class FileRecord(BaseModel):
    """Represents a single uploaded file after transposing the raw field data."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    error: int | str = 0
    name: str = ""
    path: str = Field(default="", alias="tmp_name")
    size: int = 0
    type: str = ""


class ValidationOutcome(BaseModel):
    """Result of validating one upload field: success, or the first failure found."""

    valid: bool
    reason: str | None = None
    code: str | None = None

    @classmethod
    def ok(cls) -> "ValidationOutcome":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str, code: str | None = None) -> "ValidationOutcome":
        return cls(valid=False, reason=reason, code=code)

    def __bool__(self) -> bool:
        return self.valid


class ValidationResponse(BaseModel):
    """Defines the JSON body returned by the validation endpoint."""

    handle: str
    valid: bool
    reason: str | None = None
    code: str | None = None
    multiple: bool = False
    files: list[FileRecord] = Field(default_factory=list)
