"""Entry point for ``python -m chargepoint_capture``."""

import sys

from chargepoint_capture.cli import main

if __name__ == "__main__":
  sys.exit(main())
