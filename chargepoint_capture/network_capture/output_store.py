"""Output directory management for captured responses.

Each run starts from an empty directory and writes one file per captured
response, named ``response_<index>_<timestamp>.json`` where ``index`` is the
capture order and ``timestamp`` is shared by every file of the run.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from chargepoint_capture.core.exceptions import OutputStoreError

logger = logging.getLogger(__name__)

FILENAME_TEMPLATE = "response_{index}_{timestamp}.json"
FILENAME_PATTERN = re.compile(r"^response_(?P<index>\d+)_(?P<timestamp>\d+)\.json$")


def filename_for(index: int, timestamp: int) -> str:
  """Return the file name for the response at ``index``."""
  return FILENAME_TEMPLATE.format(index=index, timestamp=timestamp)


def parse_index(filename: str) -> Optional[int]:
  """Return the capture index embedded in a response file name.

  Args:
    filename: Bare file name (not a path)

  Returns:
    The index, or None when the name was not produced by this store
  """
  match = FILENAME_PATTERN.match(filename)
  if not match:
    return None
  return int(match.group("index"))


def _epoch_millis() -> int:
  return int(time.time() * 1000)


class OutputStore:
  """Flat directory holding the responses of the latest capture run."""

  def __init__(
    self,
    directory: Union[str, Path],
    clock: Callable[[], int] = _epoch_millis,
  ):
    """Initialize the store.

    Args:
      directory: Output directory. It does not need to exist yet.
      clock: Returns the session timestamp (epoch milliseconds) used in
        file names
    """
    self.directory = Path(directory)
    self._clock = clock

  def prepare(self) -> int:
    """Delete every entry directly inside the output directory.

    A missing directory is left alone; ``save`` creates it.

    Returns:
      Number of deleted entries

    Raises:
      OutputStoreError: If an entry cannot be deleted. Cleanup stops at the
        first failure.
    """
    logger.info("Output directory path: %s", self.directory)
    if not self.directory.exists():
      logger.info("Output directory does not exist. It will be created.")
      return 0

    deleted = 0
    try:
      entries = sorted(self.directory.iterdir())
    except OSError as exc:
      raise OutputStoreError("list", str(self.directory), str(exc)) from exc

    for entry in entries:
      try:
        entry.unlink()
      except OSError as exc:
        raise OutputStoreError("delete", str(entry), str(exc)) from exc
      deleted += 1
      logger.info("Deleted %s", entry.name)
    return deleted

  def save(self, payloads: Sequence[str]) -> List[Path]:
    """Write each payload to its own file, in capture order.

    Args:
      payloads: Response bodies in the order they were captured

    Returns:
      Paths of the written files, in the same order

    Raises:
      OutputStoreError: On the first directory or write failure. Remaining
        payloads are not written.
    """
    logger.info("Saving JSON responses...")
    try:
      self.directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
      raise OutputStoreError("create", str(self.directory), str(exc)) from exc

    timestamp = self._clock()
    written: List[Path] = []
    for index, payload in enumerate(payloads):
      path = self.directory / filename_for(index, timestamp)
      try:
        path.write_text(payload, encoding="utf-8")
      except OSError as exc:
        raise OutputStoreError("write", str(path), str(exc)) from exc
      written.append(path)
      logger.info("Saved %s", path.name)
    return written
