"""Exporter exception hierarchy.

Centralised base classes so the capture, build and send stages can catch
narrow failure classes instead of bare ``except Exception`` blocks.
None of these are fatal: each one degrades a single entity or a single
cycle, never the host simulation.
"""


class ExportError(Exception):
    """Root of all exporter exceptions."""


class EntityUnavailableError(ExportError):
    """A region or actor vanished (or was half-updated) while being read."""


class CaptureError(ExportError):
    """Portrait capture failed for one actor."""


class CaptureContextError(CaptureError):
    """Portrait capture was invoked off the rendering thread."""


class DeliveryError(ExportError):
    """A payload could not be delivered to the configured destination."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"failed to POST to {url}: {cause}")
        self.url = url
        self.cause = cause


class ConfigurationError(ExportError):
    """Invalid or missing configuration."""
