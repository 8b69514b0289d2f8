"""Custom exceptions for charge-point network capture.

This module defines a hierarchy of custom exceptions with error codes and
process exit codes so that every failure in a capture run is reported the
same way by the command-line runner.
"""

from typing import Any, Dict, Optional


EXIT_FAILURE = 1
EXIT_USAGE = 2


class CaptureError(Exception):
  """Base exception for all capture errors.

  All custom exceptions should inherit from this class to ensure
  consistent error handling and log formatting.

  Attributes:
    message: User-friendly error message
    error_code: Machine-readable error code
    exit_code: Process exit status reported by the CLI
    details: Additional error details (optional)
  """

  def __init__(
    self,
    message: str,
    error_code: str,
    exit_code: int = EXIT_FAILURE,
    details: Optional[Dict[str, Any]] = None,
  ):
    """Initialize base capture exception with common error fields."""
    self.message = message
    self.error_code = error_code
    self.exit_code = exit_code
    self.details = details or {}
    super().__init__(self.message)

  def to_dict(self) -> Dict[str, Any]:
    """Convert exception to dictionary for structured logging."""
    response = {
      "error": {
        "message": self.message,
        "code": self.error_code,
      }
    }
    if self.details:
      response["error"]["details"] = self.details
    return response


# ============================================================================
# Usage Errors - User-fixable errors
# ============================================================================

class ConfigurationError(CaptureError):
  """Capture configuration is invalid.

  Used when settings or command-line values fail validation before any
  browser is started.
  """

  def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
    """Build configuration error with optional detail payload."""
    super().__init__(
      message=message,
      error_code="CONFIGURATION_ERROR",
      exit_code=EXIT_USAGE,
      details=details,
    )


# ============================================================================
# Runtime Errors - Browser and filesystem failures
# ============================================================================

class BrowserLaunchError(CaptureError):
  """Browser or page could not be started.

  Nothing has been acquired yet, so there is nothing to tear down.
  """

  def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
    """Build launch error with optional details."""
    super().__init__(
      message=f"Browser launch failed: {message}",
      error_code="BROWSER_LAUNCH_ERROR",
      details=details,
    )


class NavigationError(CaptureError):
  """Navigation to the target page failed."""

  def __init__(self, url: str, message: str):
    """Build navigation error including the target URL."""
    super().__init__(
      message=f"Navigation to {url} failed: {message}",
      error_code="NAVIGATION_ERROR",
      details={"url": url},
    )


class OutputStoreError(CaptureError):
  """Output directory could not be cleaned or written.

  Raised from the underlying ``OSError``, which stays available as
  ``__cause__``.
  """

  def __init__(self, operation: str, path: str, message: str):
    """Build output store error with the failing path."""
    super().__init__(
      message=f"Could not {operation} {path}: {message}",
      error_code="OUTPUT_STORE_ERROR",
      details={"operation": operation, "path": path},
    )


class SessionTimeoutError(CaptureError):
  """The whole capture session exceeded its time limit."""

  def __init__(self, timeout_seconds: float):
    """Build timeout error with the configured limit."""
    super().__init__(
      message=f"Capture session timed out after {timeout_seconds} seconds",
      error_code="SESSION_TIMEOUT",
      details={"timeout": timeout_seconds},
    )


class BrowserTeardownError(CaptureError):
  """Browser close failed after an otherwise successful run.

  When another error is already propagating the close failure is only
  logged, so this never masks the original cause.
  """

  def __init__(self, message: str):
    """Build teardown error."""
    super().__init__(
      message=f"Browser teardown failed: {message}",
      error_code="BROWSER_TEARDOWN_ERROR",
    )


# ============================================================================
# Error Code Reference
# ============================================================================

ERROR_CODE_REFERENCE = {
  "CONFIGURATION_ERROR": "Configuration is invalid - check your .env file or command-line flags",
  "BROWSER_LAUNCH_ERROR": "The browser could not be started - run 'playwright install chromium'",
  "NAVIGATION_ERROR": "The target page could not be loaded",
  "OUTPUT_STORE_ERROR": "The output directory could not be cleaned or written",
  "SESSION_TIMEOUT": "The capture session took too long",
  "BROWSER_TEARDOWN_ERROR": "The browser did not close cleanly",
}
