"""Capture charge-point location data from the national charge-point platform."""

__version__ = "1.0.0"
