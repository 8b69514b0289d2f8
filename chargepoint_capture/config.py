"""Capture configuration settings.

This module defines the capture configuration using Pydantic Settings,
which loads values from environment variables and .env files with type
validation.

Configuration Priority:
1. Command-line overrides passed to ``Settings.to_capture_config``
2. Environment variables
3. .env file in the working directory
4. Default values defined in this module

Example:
  from chargepoint_capture.config import Settings

  config = Settings().to_capture_config(headless=False)
  print(config.target_url)

The ``Settings`` object is only a loader. A capture run receives the frozen
``CaptureConfig`` it produces, so nothing reads settings from a global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chargepoint_capture.core.exceptions import ConfigurationError

DEFAULT_TARGET_URL = "https://www.piattaformaunicanazionale.it/idr"
DEFAULT_API_ENDPOINT = "https://api.pun.piattaformaunicanazionale.it/v1/chargepoints/public/map/search"
DEFAULT_IDLE_TIMEOUT_MS = 30000
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CaptureConfig:
  """Immutable settings for one capture run.

  Attributes:
    target_url: Page to open in the browser
    api_endpoint: Substring a request URL must contain to be captured
    idle_timeout_ms: Continuous inactivity that counts as "settled"
    output_directory: Directory that receives the captured responses
    headless: Run Chromium without a window
    navigation_timeout_ms: Limit for page navigation (0 disables it)
    session_timeout_seconds: Optional limit for navigation, idle wait and save
  """

  target_url: str
  api_endpoint: str
  idle_timeout_ms: int
  output_directory: Path
  headless: bool = True
  navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
  session_timeout_seconds: Optional[float] = None

  def __post_init__(self):
    """Validate and normalize field values."""
    if not self.target_url:
      raise ConfigurationError("target_url must not be empty")
    if not self.api_endpoint:
      raise ConfigurationError("api_endpoint must not be empty")
    if self.idle_timeout_ms <= 0:
      raise ConfigurationError(
        "idle_timeout_ms must be positive",
        details={"idle_timeout_ms": self.idle_timeout_ms},
      )
    if self.navigation_timeout_ms < 0:
      raise ConfigurationError(
        "navigation_timeout_ms must not be negative",
        details={"navigation_timeout_ms": self.navigation_timeout_ms},
      )
    if self.session_timeout_seconds is not None and self.session_timeout_seconds <= 0:
      raise ConfigurationError(
        "session_timeout_seconds must be positive when set",
        details={"session_timeout_seconds": self.session_timeout_seconds},
      )
    # frozen dataclass: bypass __setattr__ to coerce str paths
    object.__setattr__(self, "output_directory", Path(self.output_directory))


class Settings(BaseSettings):
  """Capture settings loaded from the environment.

  Attributes:
    TARGET_URL: Page that triggers the map search requests
    API_ENDPOINT: Endpoint substring whose responses are captured
    NETWORK_IDLE_TIMEOUT_MS: Inactivity window before the page counts as settled
    OUTPUT_DIRECTORY: Directory for captured response files
    BROWSER_HEADLESS: Run browser in headless mode
    NAVIGATION_TIMEOUT_MS: Navigation timeout (0 = no limit)
    SESSION_TIMEOUT_SECONDS: Optional overall limit for a capture session
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
  """

  TARGET_URL: str = Field(default=DEFAULT_TARGET_URL, description="Page to load")
  API_ENDPOINT: str = Field(
    default=DEFAULT_API_ENDPOINT,
    description="Request URL substring selecting captured responses"
  )
  NETWORK_IDLE_TIMEOUT_MS: int = Field(
    default=DEFAULT_IDLE_TIMEOUT_MS,
    gt=0,
    description="Milliseconds without requests before capture completes"
  )
  OUTPUT_DIRECTORY: str = Field(
    default="./output",
    description="Directory for captured responses (cleared on every run)"
  )
  BROWSER_HEADLESS: bool = Field(
    default=True,
    description="Run browser in headless mode"
  )
  NAVIGATION_TIMEOUT_MS: int = Field(
    default=DEFAULT_NAVIGATION_TIMEOUT_MS,
    ge=0,
    description="Navigation timeout in milliseconds (0 disables it)"
  )
  SESSION_TIMEOUT_SECONDS: Optional[float] = Field(
    default=None,
    gt=0,
    description="Overall session limit in seconds (unset = no limit)"
  )

  # Logging
  LOG_LEVEL: str = Field(
    default="INFO",
    description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
  )

  model_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=True,
    extra="ignore",
  )

  @field_validator("LOG_LEVEL", mode="before")
  @classmethod
  def normalize_log_level(cls, value: Any) -> str:
    """Accept lower-case level names and reject unknown ones."""
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
      raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
    return level

  def to_capture_config(self, **overrides: Any) -> CaptureConfig:
    """Build the immutable run configuration.

    Args:
      **overrides: ``CaptureConfig`` field values that replace the loaded
        settings. ``None`` values are ignored so unset CLI flags fall through.

    Returns:
      Validated CaptureConfig

    Raises:
      ConfigurationError: If an override names an unknown field or a value
        fails validation
    """
    values = {
      "target_url": self.TARGET_URL,
      "api_endpoint": self.API_ENDPOINT,
      "idle_timeout_ms": self.NETWORK_IDLE_TIMEOUT_MS,
      "output_directory": Path(self.OUTPUT_DIRECTORY),
      "headless": self.BROWSER_HEADLESS,
      "navigation_timeout_ms": self.NAVIGATION_TIMEOUT_MS,
      "session_timeout_seconds": self.SESSION_TIMEOUT_SECONDS,
    }
    unknown = set(overrides) - set(values)
    if unknown:
      raise ConfigurationError(
        "Unknown configuration override",
        details={"fields": sorted(unknown)},
      )
    values.update({key: value for key, value in overrides.items() if value is not None})
    logging.getLogger(__name__).debug("Capture configuration: %s", values)
    return CaptureConfig(**values)
