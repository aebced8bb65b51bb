"""Streaming bridge and citation rendering for an upstream assistant service."""

__version__ = "0.1.0"
