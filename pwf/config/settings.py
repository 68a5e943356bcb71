from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OUTPUT_FORMATS = ("pretty", "json", "compact")


class PwfSettings(BaseSettings):
    """Defaults for the ``pwf`` command line, read from ``PWF_*`` variables."""

    log_level: str = Field(default="WARNING", validation_alias="PWF_LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="PWF_LOG_FILE")
    output_format: str = Field(
        default="pretty",
        validation_alias="PWF_OUTPUT_FORMAT",
        description="Validation report style: pretty, json or compact",
    )
    summary_only: bool = Field(
        default=False,
        validation_alias="PWF_SUMMARY_ONLY",
        description="Skip GPS routes and time series when importing device files",
    )
    strict: bool = Field(
        default=False,
        validation_alias="PWF_STRICT",
        description="Treat validation warnings as failures",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid PWF_LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to WARNING.")
            return "WARNING"
        return upper_value

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, value: str) -> str:
        lower_value = value.lower()
        if lower_value not in OUTPUT_FORMATS:
            logger.warning(f"Invalid PWF_OUTPUT_FORMAT '{value}'. Defaulting to pretty.")
            return "pretty"
        return lower_value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> PwfSettings:
    return PwfSettings()
