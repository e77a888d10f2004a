"""Drive the synthetic colony and the exporter from one loop thread.

The loop plays the host: it steps the colony and calls the export service's
tick hook on the same thread, at a fixed tick rate with drift correction.
"""

import logging
import os
import time
from typing import Optional

from backend.export_service import ExportService
from backend.settings import ExportSettings
from core.demo_colony import DemoColony

logger = logging.getLogger(__name__)


def run_demo(
    seconds: float = 10.0,
    tps: int = 60,
    seed: int = 42,
    settings: Optional[ExportSettings] = None,
) -> ExportService:
    """Run the demo colony for *seconds* at *tps* ticks per second.

    Returns:
        The export service, so callers can inspect its counters
    """
    # pygame must not try to open a window for portrait rendering
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

    colony = DemoColony(seed=seed)
    service = ExportService(colony, settings=settings)
    service.world_loaded()
    for region in colony.regions:
        service.region_loaded(region)

    destination = service.settings.destination()
    logger.info(
        "Demo: %d colonists, %d ticks/s for %.1fs -> %s",
        len(colony.colonists),
        tps,
        seconds,
        destination.data_url,
    )

    frame_time = 1.0 / tps
    deadline = time.time() + seconds
    next_frame_start_time = time.time()
    try:
        while time.time() < deadline:
            next_frame_start_time += frame_time
            colony.step()
            service.tick(colony.ticks_game)

            sleep_time = next_frame_start_time - time.time()
            if sleep_time > 0:
                time.sleep(sleep_time)
            elif sleep_time < -1.0:
                # Fell far behind (debugger, suspend); don't try to catch up
                next_frame_start_time = time.time()
    except KeyboardInterrupt:
        logger.info("Demo interrupted")
    finally:
        service.shutdown()

    dispatcher = service.dispatcher
    logger.info(
        "Demo finished at tick %d: %d cycles sent, %d skipped, %d failed",
        colony.ticks_game,
        dispatcher.dispatched_cycles,
        dispatcher.skipped_cycles,
        dispatcher.failed_cycles,
    )
    return service
