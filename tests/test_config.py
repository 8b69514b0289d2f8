"""Tests for settings loading and the immutable capture configuration."""

import dataclasses
from pathlib import Path

import pytest
from pydantic import ValidationError

from chargepoint_capture.config import (
  DEFAULT_API_ENDPOINT,
  DEFAULT_IDLE_TIMEOUT_MS,
  DEFAULT_TARGET_URL,
  CaptureConfig,
  Settings,
)
from chargepoint_capture.core.exceptions import ConfigurationError


def test_defaults_target_the_national_platform():
  config = Settings().to_capture_config()
  assert config.target_url == DEFAULT_TARGET_URL
  assert config.api_endpoint == DEFAULT_API_ENDPOINT
  assert config.idle_timeout_ms == DEFAULT_IDLE_TIMEOUT_MS == 30000
  assert config.output_directory == Path("output")
  assert config.headless is True
  assert config.session_timeout_seconds is None


def test_environment_overrides_defaults(monkeypatch):
  monkeypatch.setenv("NETWORK_IDLE_TIMEOUT_MS", "5000")
  monkeypatch.setenv("BROWSER_HEADLESS", "false")
  monkeypatch.setenv("SESSION_TIMEOUT_SECONDS", "120")

  config = Settings().to_capture_config()

  assert config.idle_timeout_ms == 5000
  assert config.headless is False
  assert config.session_timeout_seconds == 120.0


def test_dotenv_file_in_working_directory_is_read(tmp_path: Path):
  (tmp_path / ".env").write_text("OUTPUT_DIRECTORY=./captures\nLOG_LEVEL=debug\n")
  settings = Settings()
  assert settings.OUTPUT_DIRECTORY == "./captures"
  assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("name,value", [
  ("NETWORK_IDLE_TIMEOUT_MS", "0"),
  ("NAVIGATION_TIMEOUT_MS", "-1"),
  ("LOG_LEVEL", "verbose"),
])
def test_invalid_environment_values_are_rejected(monkeypatch, name, value):
  monkeypatch.setenv(name, value)
  with pytest.raises(ValidationError):
    Settings()


def test_overrides_replace_settings_and_ignore_none():
  config = Settings().to_capture_config(
    target_url="https://www.example.test/",
    idle_timeout_ms=None,
    output_directory="custom",
  )
  assert config.target_url == "https://www.example.test/"
  assert config.idle_timeout_ms == DEFAULT_IDLE_TIMEOUT_MS
  assert config.output_directory == Path("custom")


def test_unknown_override_is_rejected():
  with pytest.raises(ConfigurationError) as excinfo:
    Settings().to_capture_config(selector="#map")
  assert excinfo.value.details == {"fields": ["selector"]}


def test_capture_config_is_immutable(config):
  with pytest.raises(dataclasses.FrozenInstanceError):
    config.idle_timeout_ms = 1


@pytest.mark.parametrize("field,value", [
  ("idle_timeout_ms", 0),
  ("target_url", ""),
  ("api_endpoint", ""),
  ("navigation_timeout_ms", -5),
  ("session_timeout_seconds", 0),
])
def test_capture_config_validates_values(config, field, value):
  with pytest.raises(ConfigurationError):
    dataclasses.replace(config, **{field: value})


def test_capture_config_coerces_output_directory():
  config = CaptureConfig(
    target_url="https://www.example.test/",
    api_endpoint="/search",
    idle_timeout_ms=10,
    output_directory="out",
  )
  assert config.output_directory == Path("out")
