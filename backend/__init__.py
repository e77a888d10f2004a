"""Backend package for the colony exporter.

This package provides the tick dispatcher, HTTP transport, host lifecycle
service, settings, and the companion receiver used for local development.
"""

__version__ = "1.0.0"
