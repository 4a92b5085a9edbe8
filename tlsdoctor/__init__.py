"""Inspect, validate and assemble TLS certificate chains."""

__version__ = "0.1.0"