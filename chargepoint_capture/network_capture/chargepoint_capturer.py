"""Charge-point map search capturer using Playwright network interception.

This capturer opens the public charge-point platform, records every response
to the map search endpoint while the page loads, waits until network traffic
settles, and writes the raw response bodies to the output directory.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from playwright.async_api import async_playwright

from chargepoint_capture.config import CaptureConfig
from chargepoint_capture.core.exceptions import (
  BrowserLaunchError,
  BrowserTeardownError,
  NavigationError,
  SessionTimeoutError,
)

from .base_capturer import BaseCapturer
from .browser_manager import BrowserManager
from .idle_detector import NetworkIdleDetector
from .output_store import OutputStore

logger = logging.getLogger(__name__)


@dataclass
class CaptureResult:
  """Outcome of a successful capture run."""

  files: List[Path] = field(default_factory=list)
  captured: int = 0
  skipped: int = 0
  duration_ms: int = 0

  def to_dict(self) -> Dict[str, Any]:
    """Convert to JSON-serializable dictionary."""
    return {
      "files": [str(path) for path in self.files],
      "captured": self.captured,
      "skipped": self.skipped,
      "duration_ms": self.duration_ms,
    }


class ChargePointCapturer(BaseCapturer):
  """Charge-point map search network traffic capturer."""

  def __init__(
    self,
    config: CaptureConfig,
    *,
    output_store: Optional[OutputStore] = None,
    playwright_factory: Callable = async_playwright,
    status_callback: Optional[Callable[[str], None]] = None,
  ):
    """Initialize capturer.

    Args:
      config: Immutable run configuration
      output_store: Store for captured bodies. Defaults to one bound to
        ``config.output_directory``.
      playwright_factory: Returns an object whose ``start()`` coroutine
        yields a Playwright instance. Replaced by fakes in tests.
      status_callback: Optional callable that accepts status messages.
    """
    super().__init__(status_callback=status_callback)
    self.config = config
    self.output_store = output_store or OutputStore(config.output_directory)
    self.browser_manager = BrowserManager()
    self.cdp_session = None
    self._playwright_factory = playwright_factory

  async def start_browser(self, headless: bool = True) -> None:
    """Launch Chromium, open a page and attach a DevTools session.

    Anything acquired before a failure is released again, so a failed
    start leaves nothing running.

    Raises:
      BrowserLaunchError: If Playwright, the browser, the page or the CDP
        session cannot be started
    """
    try:
      self.playwright = await self._playwright_factory().start()
      self.browser = await self.playwright.chromium.launch(headless=headless)
      self.is_active = True
      self._log_status("Browser launched successfully.")

      self.page = await self.browser.new_page()
      self._log_status("Page created successfully.")

      # The site only serves map data to a page with DevTools attached
      self.cdp_session = await self.page.context.new_cdp_session(self.page)
      self._log_status("DevTools protocol activated.")
    except Exception as e:
      await self._release_quietly()
      raise BrowserLaunchError(str(e)) from e

  async def stop_browser(self) -> None:
    """Remove listeners, close the browser and stop Playwright.

    Raises:
      BrowserTeardownError: If the browser fails to close
    """
    self.browser_manager.unsubscribe_all()
    try:
      if self.browser:
        self._log_status("Closing browser...")
        await self.browser.close()
        self._log_status("Browser closed.")
    except Exception as e:
      raise BrowserTeardownError(str(e)) from e
    finally:
      self.browser = None
      self.page = None
      self.cdp_session = None
      self.is_active = False
      if self.playwright:
        try:
          await self.playwright.stop()
        except Exception as e:
          logger.warning("Failed to stop Playwright: %s", e)
        self.playwright = None

  async def run(self) -> CaptureResult:
    """Capture map search responses and write them to disk.

    Returns:
      CaptureResult describing the written files

    Raises:
      BrowserLaunchError: If the browser cannot be started
      NavigationError: If the target page cannot be loaded
      OutputStoreError: If the output directory cannot be cleaned or written
      SessionTimeoutError: If the optional session limit is exceeded
      BrowserTeardownError: If closing the browser fails after a clean run
    """
    started = time.monotonic()
    await self.start_browser(headless=self.config.headless)
    try:
      files = await self._capture()
    except BaseException:
      await self._release_quietly()
      raise
    await self.stop_browser()

    result = CaptureResult(
      files=files,
      captured=len(files),
      skipped=self.browser_manager.skipped_responses,
      duration_ms=int((time.monotonic() - started) * 1000),
    )
    self._log_status("Process completed successfully.")
    return result

  async def _capture(self) -> List[Path]:
    """Prepare the output directory, intercept, navigate and persist."""
    self.output_store.prepare()

    self.browser_manager.clear_captured_data()
    self.browser_manager.setup_network_interception(self.page, self.config.api_endpoint)

    timeout = self.config.session_timeout_seconds
    if timeout is None:
      return await self._navigate_and_collect()
    try:
      return await asyncio.wait_for(self._navigate_and_collect(), timeout=timeout)
    except asyncio.TimeoutError as e:
      raise SessionTimeoutError(timeout) from e

  async def _navigate_and_collect(self) -> List[Path]:
    """Load the page, wait for idle network traffic and save responses."""
    url = self.config.target_url
    self._log_status("Navigating to the page...")
    try:
      await self.page.goto(url, wait_until="load", timeout=self.config.navigation_timeout_ms)
    except Exception as e:
      raise NavigationError(url, str(e)) from e
    self._log_status("Page loaded.")

    self._log_status("Waiting for network traffic to settle...")
    detector = NetworkIdleDetector()
    self.browser_manager.subscribe(self.page, "request", detector.on_request)
    try:
      await detector.start(self.config.idle_timeout_ms)
    finally:
      detector.cancel()

    self.browser_manager.stop_interception()
    await self.browser_manager.wait_for_pending_reads()
    payloads = self.browser_manager.get_captured_responses()
    logger.info(
      "Captured %d map search response(s), skipped %d",
      len(payloads),
      self.browser_manager.skipped_responses,
    )
    return self.output_store.save(payloads)

  async def _release_quietly(self) -> None:
    """Tear down after a failure without masking the original error."""
    try:
      await self.stop_browser()
    except BrowserTeardownError as e:
      logger.error("%s", e.message)


async def run_capture(config: CaptureConfig, **kwargs) -> CaptureResult:
  """Run one capture session with ``config``.

  Args:
    config: Immutable run configuration
    **kwargs: Extra ChargePointCapturer arguments

  Returns:
    CaptureResult of the run
  """
  return await ChargePointCapturer(config, **kwargs).run()
