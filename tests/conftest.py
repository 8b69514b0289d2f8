"""Shared fixtures for capture tests."""

from pathlib import Path

import pytest

from chargepoint_capture.config import CaptureConfig

SETTINGS_ENV_VARS = (
  "TARGET_URL",
  "API_ENDPOINT",
  "NETWORK_IDLE_TIMEOUT_MS",
  "OUTPUT_DIRECTORY",
  "BROWSER_HEADLESS",
  "NAVIGATION_TIMEOUT_MS",
  "SESSION_TIMEOUT_SECONDS",
  "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch):
  """Keep host environment variables and .env files out of every test."""
  for name in SETTINGS_ENV_VARS:
    monkeypatch.delenv(name, raising=False)
  monkeypatch.chdir(tmp_path)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
  return tmp_path / "output"


@pytest.fixture
def config(output_dir: Path) -> CaptureConfig:
  return CaptureConfig(
    target_url="https://www.example.test/idr",
    api_endpoint="/chargepoints/public/map/search",
    idle_timeout_ms=50,
    output_directory=output_dir,
  )
