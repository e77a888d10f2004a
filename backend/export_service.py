"""Host-facing export service.

This is the one object a host simulation plugs in. It owns the region
registry, the portrait cache and the dispatcher, and exposes the lifecycle
hooks the host calls:

    service = ExportService(host, settings)
    service.world_loaded()          # on world (re)load
    service.region_loaded(region)   # when a map is loaded
    service.region_discarded(region)
    service.tick(current_tick)      # every simulation tick, on the update thread

Everything the host calls runs on its update thread. Only the background part
of a cycle (build, serialize, send) runs elsewhere.
"""

import functools
import logging
import time
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from backend.export_dispatcher import ExportDispatcher, Spawn, spawn_daemon_thread
from backend.notifications import MessageCallback, Notifier
from backend.region_registry import RegionRegistry
from backend.settings import Destination, ExportSettings
from backend.transport import DeliveryResult, SnapshotTransport
from core.config.export import CADENCE_PHASE, CADENCE_TICKS
from core.exceptions import ConfigurationError
from core.interfaces import HostRegion, HostSimulation
from core.serializer import serialize_snapshot
from core.snapshot_builder import InclusionOptions, SnapshotBuilder
from rendering.portraits import PortraitCapture, PortraitSource, SpritePortraitSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    """What one background cycle did."""

    tick: int
    regions: int
    actors: int
    skipped_entities: int
    payload_bytes: int
    elapsed_ms: float
    delivery: DeliveryResult


class ExportService:
    """Periodically export the host's state to the configured receiver."""

    def __init__(
        self,
        host: HostSimulation,
        settings: Optional[ExportSettings] = None,
        portrait_source: Optional[PortraitSource] = None,
        on_message: Optional[MessageCallback] = None,
        transport: Optional[SnapshotTransport] = None,
        spawn: Spawn = spawn_daemon_thread,
        cadence: int = CADENCE_TICKS,
        phase: int = CADENCE_PHASE,
    ) -> None:
        """Initialize the service.

        Must be created on the host's update thread: portrait capture binds to
        the creating thread.
        """
        self.host = host
        self.settings = settings if settings is not None else ExportSettings()
        self.notifier = Notifier(on_message)
        self.regions = RegionRegistry()
        self.portraits = PortraitCapture(portrait_source or SpritePortraitSource())
        self.transport = transport or SnapshotTransport(self.notifier)
        self.dispatcher = ExportDispatcher(
            is_enabled=lambda: self.settings.enable_sending,
            prepare=self.prepare_cycle,
            spawn=spawn,
            cadence=cadence,
            phase=phase,
        )
        self.consecutive_failures = 0
        self.last_report: Optional[CycleReport] = None

    # ------------------------------------------------------------------
    # Host hooks
    # ------------------------------------------------------------------

    def world_loaded(self) -> None:
        self.regions.clear()
        self.portraits.cache.clear()

    def region_loaded(self, region: HostRegion) -> None:
        self.regions.register(region)
        self.notifier.caution("rimio map loaded")

    def region_discarded(self, region: HostRegion) -> None:
        self.regions.discard(region)

    def tick(self, current_tick: int) -> bool:
        """Advance the cadence; returns True if a cycle was started."""
        return self.dispatcher.on_tick(current_tick)

    def shutdown(self, timeout: float = 2.0) -> bool:
        """Wait briefly for an in-flight cycle to finish."""
        return self.dispatcher.wait_idle(timeout)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def prepare_cycle(self, tick: int):
        """Synchronous part of a cycle, on the update thread.

        Captures portraits and freezes everything the background part needs.
        """
        settings = self.settings
        try:
            settings.validate()
        except ConfigurationError as e:
            self.notifier.reject(f"RimIO export disabled for this cycle: {e}")
            raise

        options = settings.inclusion()
        destination = settings.destination()
        debug = settings.enable_debug

        if options.pawns and options.portraits:
            self._capture_portraits(debug)
        else:
            self.portraits.cache.clear()

        return functools.partial(
            self.run_cycle,
            tick,
            options,
            destination,
            self.regions.known(),
            self.portraits.cache.view(),
            debug,
        )

    def _capture_portraits(self, debug: bool) -> None:
        start = time.perf_counter()
        try:
            colonists = list(self.host.colonists_in_order())
        except (AttributeError, LookupError, RuntimeError) as e:
            logger.debug("Colonist list unavailable for portraits: %s", e)
            colonists = []
        count = self.portraits.capture_all(colonists)
        if debug:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            self.notifier.silent(f"copied {count} portraits in {elapsed_ms:.0f}ms")

    def run_cycle(
        self,
        tick: int,
        options: InclusionOptions,
        destination: Destination,
        regions: Tuple[HostRegion, ...],
        portraits: Mapping[str, bytes],
        debug: bool = False,
    ) -> CycleReport:
        """Background part of a cycle: build, serialize, send."""
        start = time.perf_counter()
        builder = SnapshotBuilder(options)
        snapshot = builder.build(self.host, regions, portraits)
        payload = serialize_snapshot(snapshot)
        delivery = self.transport.send(payload, destination)

        if delivery.ok:
            self.consecutive_failures = 0
        else:
            self.consecutive_failures += 1

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        report = CycleReport(
            tick=tick,
            regions=len(snapshot.regions or ()),
            actors=snapshot.actor_count(),
            skipped_entities=builder.skipped_regions + builder.skipped_actors,
            payload_bytes=payload.size,
            elapsed_ms=elapsed_ms,
            delivery=delivery,
        )
        self.last_report = report
        if debug:
            self.notifier.silent(
                f"rimio tick {tick} built and sent in {elapsed_ms:.0f}ms for {payload.size} bytes"
            )
        return report
