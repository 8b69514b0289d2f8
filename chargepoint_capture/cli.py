"""Command-line runner for charge-point network capture.

Loads settings, applies command-line overrides, runs one capture session and
maps the outcome to a process exit status:

- 0: responses captured and saved
- 1: capture failed (launch, navigation, output or teardown error)
- 2: invalid settings or arguments
- 130: interrupted
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError as SettingsValidationError

from chargepoint_capture.config import LOG_LEVELS, Settings
from chargepoint_capture.core.exceptions import (
  ERROR_CODE_REFERENCE,
  EXIT_FAILURE,
  EXIT_USAGE,
  CaptureError,
)
from chargepoint_capture.network_capture import run_capture

logger = logging.getLogger("chargepoint_capture")

EXIT_INTERRUPTED = 130
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str) -> None:
  """Configure root logging for a command-line run."""
  logging.basicConfig(
    level=getattr(logging, level.upper(), logging.INFO),
    format=LOG_FORMAT,
    datefmt=LOG_DATEFMT,
  )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
  """Parse command-line flags. Unset flags stay None so settings apply."""
  parser = argparse.ArgumentParser(
    prog="chargepoint-capture",
    description="Capture charge-point map search responses from the national platform.",
  )
  parser.add_argument("--url", dest="target_url", help="Page to load (TARGET_URL).")
  parser.add_argument("--endpoint", dest="api_endpoint", help="Request URL substring to capture (API_ENDPOINT).")
  parser.add_argument(
    "--idle-timeout-ms",
    type=int,
    dest="idle_timeout_ms",
    help="Milliseconds without requests before the page counts as settled (NETWORK_IDLE_TIMEOUT_MS).",
  )
  parser.add_argument("--output-dir", dest="output_directory", help="Output directory, cleared first (OUTPUT_DIRECTORY).")
  parser.add_argument("--headed", action="store_true", help="Show the browser window.")
  parser.add_argument(
    "--navigation-timeout-ms",
    type=int,
    dest="navigation_timeout_ms",
    help="Navigation timeout, 0 disables it (NAVIGATION_TIMEOUT_MS).",
  )
  parser.add_argument(
    "--session-timeout",
    type=float,
    dest="session_timeout_seconds",
    help="Abort the whole capture after this many seconds (SESSION_TIMEOUT_SECONDS).",
  )
  parser.add_argument("--env-file", help="Extra .env file to load before reading settings.")
  parser.add_argument(
    "--log-level",
    type=str.upper,
    choices=LOG_LEVELS,
    default=None,
    help="Logging level (LOG_LEVEL).",
  )
  return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
  """Run one capture from the command line.

  Args:
    argv: Arguments without the program name. Defaults to ``sys.argv[1:]``.

  Returns:
    Process exit status
  """
  args = parse_args(argv)
  configure_logging(args.log_level or "INFO")
  logger.info("Starting capture...")

  if args.env_file and not load_dotenv(args.env_file):
    logger.warning("No settings loaded from %s", args.env_file)

  try:
    settings = Settings()
  except SettingsValidationError as e:
    logger.error("Invalid settings: %s", e)
    return EXIT_USAGE
  if args.log_level is None:
    logging.getLogger().setLevel(settings.LOG_LEVEL)

  try:
    config = settings.to_capture_config(
      target_url=args.target_url,
      api_endpoint=args.api_endpoint,
      idle_timeout_ms=args.idle_timeout_ms,
      output_directory=args.output_directory,
      headless=False if args.headed else None,
      navigation_timeout_ms=args.navigation_timeout_ms,
      session_timeout_seconds=args.session_timeout_seconds,
    )
    result = asyncio.run(run_capture(config))
  except CaptureError as e:
    logger.error("An error occurred: %s", e.message)
    hint = ERROR_CODE_REFERENCE.get(e.error_code)
    if hint:
      logger.error("Hint: %s", hint)
    logger.debug("Error details: %s", e.to_dict(), exc_info=True)
    return e.exit_code
  except KeyboardInterrupt:
    logger.warning("Capture interrupted")
    return EXIT_INTERRUPTED
  except Exception:
    logger.exception("Unhandled error")
    return EXIT_FAILURE

  logger.info(
    "Saved %d response(s) to %s in %d ms",
    result.captured,
    config.output_directory,
    result.duration_ms,
  )
  logger.debug("Capture result: %s", result.to_dict())
  return 0
