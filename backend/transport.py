"""One-shot HTTP delivery of serialized snapshots.

Each ``send`` opens its own short-lived ``httpx.Client``, POSTs once with
a short timeout on every phase, drains and closes the response, and reports
the outcome. There is no queue and no retry: a failed send loses that cycle's
data and nothing else. Every failure (refused, timeout, DNS, non-2xx) is
handled the same way.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from backend.notifications import Notifier
from backend.settings import Destination
from core.config.export import CONTENT_TYPE, DATA_VERSION, DATA_VERSION_HEADER, REMEDIATION_HINT
from core.exceptions import DeliveryError
from core.serializer import SerializedPayload

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "Content-Type": CONTENT_TYPE,
    "Accept": CONTENT_TYPE,
    DATA_VERSION_HEADER: DATA_VERSION,
}


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a single delivery attempt."""

    url: str
    ok: bool
    elapsed_ms: float
    status_code: Optional[int] = None
    error: Optional[DeliveryError] = None


class SnapshotTransport:
    """POST payloads to the companion endpoint, fire-and-forget."""

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            notifier: Where delivery failures are reported
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.notifier = notifier or Notifier()
        self._transport = transport

    def _client(self, destination: Destination) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(destination.timeout),
            transport=self._transport,
            follow_redirects=False,
            trust_env=False,
        )

    def send(self, payload: SerializedPayload, destination: Destination) -> DeliveryResult:
        """Deliver *payload* once.

        Never raises for delivery problems; they are reported through the
        notifier and returned in the result.
        """
        url = destination.data_url
        start = time.perf_counter()
        try:
            with self._client(destination) as client:
                with client.stream("POST", url, content=payload.body, headers=REQUEST_HEADERS) as response:
                    response.raise_for_status()
                    # Body is irrelevant, but must be consumed to release the connection
                    response.read()
                    status_code = response.status_code
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            error = DeliveryError(url, e)
            self._report_failure(destination, e)
            return DeliveryResult(url=url, ok=False, elapsed_ms=elapsed_ms, error=error)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("Delivered tick %d (%d bytes) to %s in %.1fms", payload.tick, payload.size, url, elapsed_ms)
        return DeliveryResult(url=url, ok=True, elapsed_ms=elapsed_ms, status_code=status_code)

    def _report_failure(self, destination: Destination, cause: BaseException) -> None:
        reason = str(cause) or type(cause).__name__
        self.notifier.reject(f"RimIO failed to POST to {destination.base_url}/ --> {reason}")
        self.notifier.reject(REMEDIATION_HINT)
