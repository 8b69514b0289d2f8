"""Network idle detection for a single browser page.

The detector resolves a future once no request has been seen for a
continuous window of ``timeout_ms`` milliseconds. Every observed request
pushes the deadline back (debounce). A page that makes no requests at all
settles ``timeout_ms`` after ``start``.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Callable, Optional

from chargepoint_capture.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class IdleState(enum.Enum):
  """Lifecycle of a NetworkIdleDetector."""

  PENDING = "pending"
  WAITING = "waiting"
  IDLE = "idle"


class NetworkIdleDetector:
  """Debounced inactivity timer fed by page request events.

  Only one idle check is ever scheduled: the detector owns a single
  ``asyncio.TimerHandle`` and cancels it before arming a new one.

  Example:
    detector = NetworkIdleDetector()
    page.on("request", detector.on_request)
    await detector.start(30000)
  """

  def __init__(
    self,
    loop: Optional[asyncio.AbstractEventLoop] = None,
    clock: Optional[Callable[[], float]] = None,
  ):
    """Initialize the detector.

    Args:
      loop: Event loop used for scheduling. Defaults to the running loop
        when ``start`` is called.
      clock: Monotonic clock in seconds. Defaults to ``loop.time``.
    """
    self._loop = loop
    self._clock = clock
    self._timeout = 0.0
    self._last_activity = 0.0
    self._handle: Optional[asyncio.TimerHandle] = None
    self._future: Optional[asyncio.Future] = None
    self.state = IdleState.PENDING
    self.request_count = 0

  @property
  def last_activity(self) -> float:
    """Monotonic time of the most recent request (or of ``start``)."""
    return self._last_activity

  def start(self, timeout_ms: int) -> asyncio.Future:
    """Arm the detector and return the idle future.

    Args:
      timeout_ms: Required inactivity window in milliseconds

    Returns:
      Future resolved exactly once when the page is idle. Cancelling it
      also cancels the pending check.

    Raises:
      ConfigurationError: If timeout_ms is not positive
      RuntimeError: If the detector was already started
    """
    if timeout_ms <= 0:
      raise ConfigurationError(
        "Idle timeout must be positive",
        details={"timeout_ms": timeout_ms},
      )
    if self.state is not IdleState.PENDING:
      raise RuntimeError("NetworkIdleDetector can only be started once")

    if self._loop is None:
      self._loop = asyncio.get_running_loop()
    if self._clock is None:
      self._clock = self._loop.time

    self._timeout = timeout_ms / 1000
    self._last_activity = self._clock()
    self._future = self._loop.create_future()
    self._future.add_done_callback(self._on_future_done)
    self.state = IdleState.WAITING
    self._schedule(self._timeout)
    return self._future

  def on_request(self, *_args) -> None:
    """Record network activity and push the idle deadline back.

    Accepts and ignores the Playwright ``Request`` argument so it can be
    registered directly as a ``request`` event handler.
    """
    if self.state is not IdleState.WAITING:
      return
    self.request_count += 1
    self._last_activity = self._clock()
    logger.debug("Request observed; idle timer reset (%d so far)", self.request_count)
    self._schedule(self._timeout)

  def cancel(self) -> None:
    """Stop waiting without signalling idle."""
    self._cancel_timer()
    if self._future is not None and not self._future.done():
      self._future.cancel()

  def _schedule(self, delay: float) -> None:
    """Replace the pending check with one firing after ``delay`` seconds."""
    self._cancel_timer()
    self._handle = self._loop.call_later(delay, self._check_idle)

  def _cancel_timer(self) -> None:
    if self._handle is not None:
      self._handle.cancel()
      self._handle = None

  def _check_idle(self) -> None:
    """Timer callback: resolve when the window has elapsed, else re-arm."""
    self._cancel_timer()
    if self.state is not IdleState.WAITING:
      return
    elapsed = self._clock() - self._last_activity
    if elapsed >= self._timeout:
      self.state = IdleState.IDLE
      logger.info("Network traffic is idle. Continuing...")
      if not self._future.done():
        self._future.set_result(None)
      return
    # fired early (scheduler slack); wait out the remainder
    self._schedule(self._timeout - elapsed)

  def _on_future_done(self, future: asyncio.Future) -> None:
    if future.cancelled():
      self._cancel_timer()
