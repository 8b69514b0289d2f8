"""
Abstract base class for network traffic capturers.

Defines the interface that capture session implementations must follow.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


class BaseCapturer(ABC):
  """
  Abstract base class for network traffic capturers.

  A capturer owns one browser, one page and the lifecycle around them.
  """

  def __init__(self, status_callback: Optional[Callable[[str], None]] = None):
    """Initialize the capturer.

    Args:
      status_callback: Optional callable that accepts status messages.
    """
    self.playwright = None
    self.browser = None
    self.page = None
    self.is_active = False
    self._status_callback = status_callback

  @abstractmethod
  async def start_browser(self, headless: bool = True) -> None:
    """
    Start browser instance and open a page.

    Args:
      headless: Whether to run browser in headless mode

    Raises:
      BrowserLaunchError: If browser fails to start
    """
    pass

  @abstractmethod
  async def stop_browser(self) -> None:
    """
    Stop browser instance and cleanup resources.

    Raises:
      BrowserTeardownError: If the browser fails to close
    """
    pass

  @abstractmethod
  async def run(self):
    """
    Run one capture session end to end.

    Returns:
      Implementation-specific capture result

    Raises:
      CaptureError: If any fatal step fails
    """
    pass

  def is_browser_active(self) -> bool:
    """
    Check if browser session is active.

    Returns:
      True if browser is running, False otherwise
    """
    return self.is_active

  def _log_status(self, message: str) -> None:
    """Log progress and forward it to the status callback, when provided."""
    logging.getLogger(type(self).__module__).info(message)
    if self._status_callback:
      try:
        self._status_callback(message)
      except Exception:
        logger.debug("Status callback failed", exc_info=True)
