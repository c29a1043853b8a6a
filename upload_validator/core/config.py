"""Application configuration settings.

This module defines the application-wide settings using Pydantic's BaseSettings.
It allows for loading configurations from environment variables and .env files,
providing type validation and default values.
"""

import tempfile
from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import NoDecode

# Default list of CORS allowed origins
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "https://localhost:3000",
    "https://localhost:8000",
]


class Settings(BaseSettings):
    """Manages application settings, loading them from environment variables or an .env file.

    Attributes:
        api_key: API key securing the validation endpoint.
        upload_tmp_dir: Directory where incoming upload parts are spooled before validation.
        default_allowed_extensions: Extensions allowed when a request declares none.
        default_allowed_file_types: Type categories (first MIME segment) allowed when a request declares none.
        default_allowed_mime_types: Full MIME types allowed when a request declares none.
        cors_allowed_origins: List of allowed origins for CORS.
    """

    api_key: str | None = Field(default=None)

    upload_tmp_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))

    default_allowed_extensions: Annotated[list[str], NoDecode] = Field(default_factory=list)
    default_allowed_file_types: Annotated[list[str], NoDecode] = Field(default_factory=list)
    default_allowed_mime_types: Annotated[list[str], NoDecode] = Field(default_factory=list)

    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
    )

    model_config = {
        "env_file": ".env",
        "env_prefix": "",  # No prefix for environment variables
        "extra": "ignore",  # Ignore extra fields
    }

    @field_validator(
        "default_allowed_extensions",
        "default_allowed_file_types",
        "default_allowed_mime_types",
        mode="before",
    )  # type: ignore
    @classmethod
    def split_constraint_list(cls, v: str | list[str] | None) -> list[str]:
        """Accepts either a comma-separated string or a list of constraint values."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        if isinstance(v, list):
            return v
        return []

    @field_validator("cors_allowed_origins", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """Assembles the list of CORS allowed origins.

        If 'v' is a string, it splits it by commas. If 'v' is already a list,
        it's used directly. Otherwise, returns the default list of origins.
        """
        if isinstance(v, str) and v:
            return [origin.strip() for origin in v.split(",")]
        elif isinstance(v, list):
            return v
        return list(DEFAULT_CORS_ORIGINS)


settings = Settings()
