"""Tests for cropline.config module."""

import pytest

from cropline.config import ConfigError, Settings
from cropline.core.types import Encoding


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        """Test that default values match the original uploader presets."""
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FORMAT == "console"

        assert settings.CROP_MAX_WIDTH == 1920
        assert settings.CROP_QUALITY == 0.92

        assert settings.BATCH_MAX_WIDTH == 1200
        assert settings.BATCH_MAX_HEIGHT == 1200
        assert settings.BATCH_QUALITY == 0.8

        assert settings.THUMBNAIL_SIZE == 400
        assert settings.THUMBNAIL_QUALITY == 0.7

        assert settings.OUTPUT_ENCODING == "image/jpeg"
        assert settings.MAX_OUTPUT_DIMENSION == 10000

    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables override defaults."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CROP_MAX_WIDTH", "1280")
        monkeypatch.setenv("OUTPUT_ENCODING", "image/webp")

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.CROP_MAX_WIDTH == 1280
        assert settings.OUTPUT_ENCODING == "image/webp"

    def test_fixture_settings(self, test_settings: Settings) -> None:
        assert test_settings.LOG_LEVEL == "DEBUG"
        assert test_settings.BATCH_CONCURRENCY == 2


class TestOutputSpecPresets:
    """Tests for Settings.output_spec()."""

    def test_crop_preset_has_no_max_height(self) -> None:
        spec = Settings(_env_file=None).output_spec("crop")  # type: ignore[call-arg]
        assert spec.max_width == 1920
        assert spec.max_height is None
        assert spec.quality == 0.92
        assert spec.encoding is Encoding.JPEG

    def test_batch_preset(self) -> None:
        spec = Settings(_env_file=None).output_spec("batch")  # type: ignore[call-arg]
        assert (spec.max_width, spec.max_height) == (1200, 1200)
        assert spec.quality == 0.8

    def test_thumbnail_preset_is_always_jpeg(self) -> None:
        settings = Settings(
            OUTPUT_ENCODING="image/png",
            _env_file=None,  # type: ignore[call-arg]
        )
        spec = settings.output_spec("thumbnail")
        assert (spec.max_width, spec.max_height) == (400, 400)
        assert spec.quality == 0.7
        assert spec.encoding is Encoding.JPEG

    def test_configured_encoding_is_used(self) -> None:
        settings = Settings(
            OUTPUT_ENCODING="image/webp",
            _env_file=None,  # type: ignore[call-arg]
        )
        assert settings.output_spec("crop").encoding is Encoding.WEBP

    def test_unsupported_encoding_raises(self) -> None:
        settings = Settings(
            OUTPUT_ENCODING="image/gif",
            _env_file=None,  # type: ignore[call-arg]
        )
        with pytest.raises(ConfigError) as exc_info:
            settings.output_spec("crop")
        assert "OUTPUT_ENCODING" in str(exc_info.value)
        assert exc_info.value.env_var == "OUTPUT_ENCODING"

    def test_unknown_preset_raises(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        with pytest.raises(ConfigError, match="Unknown output preset"):
            settings.output_spec("poster")  # type: ignore[arg-type]


class TestConfigError:
    """Tests for the ConfigError exception."""

    def test_message_mentions_env_var(self) -> None:
        error = ConfigError("Bad value.", "CROP_QUALITY")
        assert "CROP_QUALITY" in str(error)
        assert error.env_var == "CROP_QUALITY"

    def test_message_without_env_var(self) -> None:
        error = ConfigError("Bad value.")
        assert str(error) == "Bad value."
        assert error.env_var is None
