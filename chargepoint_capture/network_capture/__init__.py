"""Network capture module for intercepting charge-point map search traffic.

This module provides browser automation, network idle detection and output
persistence for capturing the map search responses the public charge-point
platform loads in the background.
"""

from .base_capturer import BaseCapturer
from .chargepoint_capturer import CaptureResult, ChargePointCapturer, run_capture
from .idle_detector import IdleState, NetworkIdleDetector
from .output_store import OutputStore

__all__ = [
  'BaseCapturer',
  'CaptureResult',
  'ChargePointCapturer',
  'IdleState',
  'NetworkIdleDetector',
  'OutputStore',
  'run_capture',
]
