"""Tests for the config module."""

import pytest
from pydantic import ValidationError

from filmstamp.config import PipelineConfig, Settings, get_settings


def test_default_settings():
    """Settings should load with all defaults when no env is set."""
    settings = Settings(
        _env_file=None,  # Don't read any .env file
    )
    assert settings.log_level == "WARNING"
    assert settings.jpeg_quality == 95


def test_override_via_kwargs():
    """Settings can be overridden via constructor kwargs."""
    settings = Settings(_env_file=None, log_level="DEBUG", jpeg_quality=80)
    assert settings.log_level == "DEBUG"
    assert settings.jpeg_quality == 80


def test_override_via_env(monkeypatch):
    """FILMSTAMP_-prefixed environment variables are picked up."""
    monkeypatch.setenv("FILMSTAMP_LOG_LEVEL", "info")
    monkeypatch.setenv("FILMSTAMP_JPEG_QUALITY", "70")
    settings = Settings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.jpeg_quality == 70


def test_invalid_log_level():
    """Invalid log level should raise ValidationError."""
    with pytest.raises(ValidationError, match="log_level"):
        Settings(_env_file=None, log_level="INVALID")


def test_log_level_case_insensitive():
    """Log level should accept lowercase and normalize to uppercase."""
    settings = Settings(_env_file=None, log_level="debug")
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("quality", [0, 96, -5])
def test_jpeg_quality_out_of_range(quality):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jpeg_quality=quality)


def test_get_settings_helper():
    """get_settings() should return a valid Settings instance."""
    settings = get_settings(log_level="ERROR", jpeg_quality="60")
    assert settings.log_level == "ERROR"
    assert settings.jpeg_quality == 60


def test_pipeline_config_inspect_needs_no_output(tmp_path):
    config = PipelineConfig(input_path=tmp_path / "a.jpg", annotate=False)
    assert config.output_path is None


def test_pipeline_config_annotate_needs_output(tmp_path):
    with pytest.raises(ValidationError, match="output_path is required"):
        PipelineConfig(input_path=tmp_path / "a.jpg")


def test_pipeline_config_accepts_strings():
    config = PipelineConfig(input_path="in.jpg", output_path="out.png")
    assert config.input_path.name == "in.jpg"
    assert config.output_path.suffix == ".png"
    assert config.annotate is True
