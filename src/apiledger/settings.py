"""Runtime settings for document builds (``APILEDGER_*`` environment)."""

import logging
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from apiledger.kernel.components import ConflictPolicy

logger = logging.getLogger(__name__)

OpenApiVersion = Literal["3.0", "3.1", "3.2"]


class DocumentSettings(BaseSettings):
    """Settings shared by a document build and the CLI."""

    model_config = SettingsConfigDict(env_prefix="APILEDGER_", extra="forbid")

    openapi_version: OpenApiVersion = Field(
        default="3.1",
        description="Target document version; media type components need 3.2",
    )
    conflict_policy: ConflictPolicy = Field(
        default=ConflictPolicy.OVERWRITE,
        description="Default policy when a component name is registered twice",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level used by the CLI (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a stdlib logging level name."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"log_level must be a logging level name, got '{v}'")
        return level

    @property
    def supports_media_types(self) -> bool:
        return self.openapi_version == "3.2"


def load_settings(**overrides) -> DocumentSettings:
    """Build settings from the environment plus explicit overrides.

    Raises:
        ValueError: If the environment or overrides hold invalid values
    """
    try:
        return DocumentSettings(**overrides)
    except ValidationError as e:
        raise ValueError(f"Invalid apiledger settings: {e}") from e
