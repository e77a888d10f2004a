"""Tick-cadence dispatcher for export cycles.

Runs on the simulation's update thread and never blocks it on I/O:

1. Once every ``cadence`` ticks (and only while sending is enabled) it runs the
   cycle's *prepare* step synchronously. That step is where portrait capture
   happens, since it needs the rendering thread.
2. The work returned by *prepare* (build, serialize, send) is handed to a new
   background thread, and ``on_tick`` returns immediately.

At most one cycle is in flight. A cadence boundary that arrives while the
previous cycle is still running is skipped rather than stacked, so a slow or
unreachable receiver cannot pile up threads.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from core.config.export import CADENCE_PHASE, CADENCE_TICKS
from core.exceptions import ExportError

logger = logging.getLogger(__name__)

CycleWork = Callable[[], None]
PrepareCycle = Callable[[int], CycleWork]
Spawn = Callable[[CycleWork, str], None]


class DispatchState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"


def spawn_daemon_thread(work: CycleWork, name: str) -> None:
    """Default spawner: one short-lived daemon thread per cycle."""
    threading.Thread(target=work, name=name, daemon=True).start()


class ExportDispatcher:
    """Fire one export cycle per cadence boundary, without waiting on it."""

    def __init__(
        self,
        is_enabled: Callable[[], bool],
        prepare: PrepareCycle,
        spawn: Spawn = spawn_daemon_thread,
        cadence: int = CADENCE_TICKS,
        phase: int = CADENCE_PHASE,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            is_enabled: Master switch, read on every cadence boundary
            prepare: Synchronous step run on the simulation thread; returns the
                background work for this cycle
            spawn: Starts background work (tests pass a synchronous spawner)
            cadence: Ticks between cycles
            phase: Tick offset within the cadence at which cycles fire
        """
        if cadence <= 0:
            raise ValueError(f"cadence must be positive, got {cadence}")
        self._is_enabled = is_enabled
        self._prepare = prepare
        self._spawn = spawn
        self.cadence = cadence
        self.phase = phase % cadence
        self._in_flight = threading.Lock()

        self.dispatched_cycles = 0
        self.skipped_cycles = 0
        self.failed_cycles = 0

    @property
    def state(self) -> DispatchState:
        return DispatchState.DISPATCHING if self._in_flight.locked() else DispatchState.IDLE

    def is_cadence_tick(self, tick: int) -> bool:
        return tick % self.cadence == self.phase

    def on_tick(self, tick: int) -> bool:
        """Called by the host once per simulation tick.

        Returns:
            True if a cycle was started on this tick
        """
        if not self.is_cadence_tick(tick) or not self._is_enabled():
            return False

        if not self._in_flight.acquire(blocking=False):
            self.skipped_cycles += 1
            logger.debug("Tick %d: previous export still in flight, skipping", tick)
            return False

        try:
            work = self._prepare(tick)
        except ExportError as e:
            self._in_flight.release()
            self.failed_cycles += 1
            logger.error("Tick %d: export prepare failed: %s", tick, e)
            return False
        except Exception as e:
            # Never let an export problem escape into the simulation loop
            self._in_flight.release()
            self.failed_cycles += 1
            logger.error("Tick %d: export prepare failed: %s", tick, e, exc_info=True)
            return False

        try:
            self._spawn(lambda: self._run(tick, work), f"rimio-export-{tick}")
        except RuntimeError as e:
            # Thread could not be started (interpreter shutting down, limits)
            self._in_flight.release()
            self.failed_cycles += 1
            logger.error("Tick %d: could not start export thread: %s", tick, e)
            return False

        self.dispatched_cycles += 1
        return True

    def _run(self, tick: int, work: CycleWork) -> None:
        try:
            work()
        except Exception as e:
            self.failed_cycles += 1
            logger.error("Export cycle for tick %d failed: %s", tick, e, exc_info=True)
        finally:
            self._in_flight.release()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no cycle is in flight.

        Returns:
            False if *timeout* expired first
        """
        acquired = self._in_flight.acquire(timeout=-1 if timeout is None else timeout)
        if acquired:
            self._in_flight.release()
        return acquired
