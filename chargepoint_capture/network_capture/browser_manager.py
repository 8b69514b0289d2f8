"""Browser event subscriptions and response interception.

Handles page event subscriptions and the ordered buffer of intercepted
response bodies.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
  """Handle for one handler registered on a page event."""

  page: Any
  event: str
  handler: Callable
  active: bool = True

  def unsubscribe(self) -> None:
    """Remove the handler from the page. Safe to call twice."""
    if not self.active:
      return
    self.active = False
    self.page.remove_listener(self.event, self.handler)


class BrowserManager:
  """Manager for page event subscriptions and network interception.

  This class provides utilities for:
  - Subscribing to page events with deterministic unsubscribe
  - Filtering responses by request URL
  - Keeping intercepted bodies in arrival order while they are read
  """

  def __init__(self):
    """Initialize browser manager."""
    self.subscriptions: List[Subscription] = []
    self.intercepted_responses: List[Optional[str]] = []
    self.skipped_responses = 0
    self.accepting_responses = True
    self._pending_reads: Set[asyncio.Task] = set()

  def subscribe(self, page, event: str, handler: Callable) -> Subscription:
    """Register ``handler`` for ``event`` on ``page``.

    Args:
      page: Playwright page object
      event: Page event name (e.g. "request", "response")
      handler: Callable receiving the event payload

    Returns:
      Subscription that removes the handler again
    """
    page.on(event, handler)
    subscription = Subscription(page=page, event=event, handler=handler)
    self.subscriptions.append(subscription)
    return subscription

  def unsubscribe_all(self) -> None:
    """Remove every handler and abandon body reads still in flight.

    Abandoned reads count as skipped responses.
    """
    self.accepting_responses = False
    for task in list(self._pending_reads):
      if not task.done():
        task.cancel()
        self.skipped_responses += 1
    while self.subscriptions:
      subscription = self.subscriptions.pop()
      try:
        subscription.unsubscribe()
      except Exception as e:
        logger.warning("Failed to remove %s listener: %s", subscription.event, e)

  def setup_network_interception(self, page, url_pattern: str) -> Subscription:
    """Capture response bodies whose request URL contains ``url_pattern``.

    A slot in the capture sequence is reserved when the response event
    arrives, so the order of bodies matches the order of responses even
    though the body reads finish in any order.

    Args:
      page: Playwright page object
      url_pattern: Substring the originating request URL must contain

    Returns:
      Subscription for the response handler
    """
    def handle_response(response):
      """Handle incoming responses."""
      if url_pattern not in response.request.url:
        return
      if not self.accepting_responses:
        logger.debug("Response from %s arrived after capture closed; ignored", response.url)
        return
      logger.info("Map search response detected")
      slot = len(self.intercepted_responses)
      self.intercepted_responses.append(None)
      task = asyncio.get_running_loop().create_task(self._read_body(slot, response))
      self._pending_reads.add(task)
      task.add_done_callback(self._pending_reads.discard)

    return self.subscribe(page, "response", handle_response)

  async def _read_body(self, slot: int, response) -> None:
    """Read a response body into its reserved slot."""
    try:
      body = await response.text()
    except Exception as e:
      # Redirects and evicted bodies cannot be read
      self.skipped_responses += 1
      logger.warning("Error processing response from %s: %s", response.url, e)
      return
    if not body or not body.strip():
      self.skipped_responses += 1
      logger.debug("Empty response body from %s skipped", response.url)
      return
    self.intercepted_responses[slot] = body

  def stop_interception(self) -> None:
    """Stop reserving slots for new responses. Reads already started continue."""
    self.accepting_responses = False

  async def wait_for_pending_reads(self) -> None:
    """Wait until every body read started so far has finished."""
    if self._pending_reads:
      logger.debug("Waiting for %d response bodies", len(self._pending_reads))
      await asyncio.gather(*list(self._pending_reads))

  def get_captured_responses(self) -> List[str]:
    """Get successfully read, non-empty bodies in arrival order.

    Returns:
      List of response bodies
    """
    return [body for body in self.intercepted_responses if body is not None]

  def clear_captured_data(self):
    """Clear all captured network data."""
    self.intercepted_responses = []
    self.skipped_responses = 0
    self.accepting_responses = True
