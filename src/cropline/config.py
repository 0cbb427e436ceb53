"""cropline configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from cropline.core.types import OutputSpec

Preset = Literal["crop", "batch", "thumbnail"]


class ConfigError(Exception):
    """Raised when a configuration value is missing or invalid."""

    def __init__(self, message: str, env_var: str | None = None) -> None:
        """Initialize configuration error.

        Args:
            message: Human-readable description of the problem.
            env_var: Environment variable that controls the value, if any.
        """
        self.env_var = env_var
        if env_var:
            message = f"{message} Set the {env_var} environment variable."
        super().__init__(message)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Interactive crop output (hero banners, bio photos, track covers)
    CROP_MAX_WIDTH: int = 1920
    CROP_QUALITY: float = 0.92

    # Batch downscale (gallery batches, multi-image hero sets)
    BATCH_MAX_WIDTH: int = 1200
    BATCH_MAX_HEIGHT: int = 1200
    BATCH_QUALITY: float = 0.8
    BATCH_CONCURRENCY: int = 4

    # Thumbnails
    THUMBNAIL_SIZE: int = 400
    THUMBNAIL_QUALITY: float = 0.7

    OUTPUT_ENCODING: str = "image/jpeg"

    # Largest output side we will allocate, in pixels
    MAX_OUTPUT_DIMENSION: int = 10000

    def output_spec(self, preset: Preset = "crop") -> OutputSpec:
        """Build the OutputSpec for a named preset.

        Args:
            preset: One of "crop", "batch" or "thumbnail".

        Returns:
            OutputSpec populated from these settings.

        Raises:
            ConfigError: If the preset is unknown or OUTPUT_ENCODING is not
                a supported MIME type.
        """
        from cropline.core.types import Encoding, OutputSpec  # noqa: PLC0415

        try:
            encoding = Encoding(self.OUTPUT_ENCODING)
        except ValueError:
            supported = ", ".join(e.value for e in Encoding)
            raise ConfigError(
                f"Unsupported output encoding {self.OUTPUT_ENCODING!r} "
                f"(supported: {supported}).",
                "OUTPUT_ENCODING",
            ) from None

        if preset == "crop":
            return OutputSpec(
                max_width=self.CROP_MAX_WIDTH,
                quality=self.CROP_QUALITY,
                encoding=encoding,
            )
        if preset == "batch":
            return OutputSpec(
                max_width=self.BATCH_MAX_WIDTH,
                max_height=self.BATCH_MAX_HEIGHT,
                quality=self.BATCH_QUALITY,
                encoding=encoding,
            )
        if preset == "thumbnail":
            return OutputSpec(
                max_width=self.THUMBNAIL_SIZE,
                max_height=self.THUMBNAIL_SIZE,
                quality=self.THUMBNAIL_QUALITY,
                encoding=Encoding.JPEG,
            )
        raise ConfigError(
            f"Unknown output preset {preset!r}. Expected crop, batch or thumbnail."
        )


# Singleton instance for import convenience
settings = Settings()
