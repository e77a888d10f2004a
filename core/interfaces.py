"""Protocol interfaces for the host simulation.

The exporter never owns the simulation it reports on. These protocols are the
narrow accessor surface it reads through, and that surface is read from a
background thread while the host keeps mutating it:

- Every accessor must be idempotent and side-effect free.
- Any accessor may fail if its object was unloaded or is mid-update. The
  snapshot builder contains such failures per entity (see
  ``core.snapshot_builder.TRANSIENT_READ_ERRORS``).
- No locking is expected or performed. This is the best-effort snapshot read
  path: readers tolerate stale or partially updated data.
"""

from typing import Iterable, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class WealthWatcher(Protocol):
    """Wealth figures for one region, as tracked by the host."""

    @property
    def wealth_floors(self) -> float:
        """Value of floors only."""
        ...

    @property
    def wealth_buildings(self) -> float:
        """Value of buildings, including floors."""
        ...

    @property
    def wealth_items(self) -> float:
        ...

    @property
    def wealth_pawns(self) -> float:
        ...

    @property
    def wealth_total(self) -> float:
        ...


@runtime_checkable
class HostRegion(Protocol):
    """A loaded sub-area of the world (a map)."""

    @property
    def region_id(self) -> int:
        """Stable identifier, unique while the region is loaded."""
        ...

    @property
    def name(self) -> str:
        ...

    @property
    def is_player_home(self) -> bool:
        ...

    @property
    def size(self) -> Tuple[int, int]:
        """Width and height in cells."""
        ...

    @property
    def wealth(self) -> WealthWatcher:
        ...


class HostSkill(Protocol):
    name: str
    passion: str
    level: int
    totally_disabled: bool
    xp_progress: float
    xp_total_earned: float
    xp_since_last_level: float
    xp_required_for_level_up: float


class HostNeed(Protocol):
    label: str
    level: float


class HostHediff(Protocol):
    label: str
    tendable_now: bool
    tended: bool
    bleed_rate: float
    pain_offset: float
    part_label: Optional[str]
    health_percent_impact: float
    permanent: bool


class HostJobTarget(Protocol):
    """Something a job points at: a physical object, or just a cell."""

    thing_label: Optional[str]
    cell: Tuple[int, int]

    def describe(self) -> str:
        """Fallback description used when there is no backing object."""
        ...


class HostJob(Protocol):
    report_string: str
    target_a: Optional[HostJobTarget]
    target_b: Optional[HostJobTarget]
    target_c: Optional[HostJobTarget]


@runtime_checkable
class HostActor(Protocol):
    """One simulated inhabitant."""

    actor_id: str
    full_name: str
    short_label: str
    label: str
    region_id: Optional[int]
    is_colonist: bool
    is_visitor: bool
    is_prisoner: bool
    is_enemy: bool
    drafted: bool
    dead: bool
    downed: bool
    asleep: bool
    idle: bool
    in_medical_bed: bool
    in_mental_state: bool
    in_aggro_mental_state: bool
    age_years: float
    health_percent: float
    position: Tuple[int, int]
    traits: Sequence[str]
    skills: Optional[Sequence[HostSkill]]
    needs: Optional[Sequence[HostNeed]]
    hediffs: Optional[Sequence[HostHediff]]
    capacities: Optional[Mapping[str, float]]
    current_job: Optional[HostJob]


@runtime_checkable
class HostSimulation(Protocol):
    """World-level accessors used once per snapshot."""

    @property
    def ticks_game(self) -> int:
        """Monotonic simulation tick counter."""
        ...

    @property
    def world_seed(self) -> str:
        ...

    def colonists_in_order(self) -> Sequence[Optional[HostActor]]:
        """Colonists in the host's canonical display order (may contain None)."""
        ...

    def visitors_in_order(self) -> Sequence[Optional[HostActor]]:
        ...

    def enemies_in_order(self) -> Sequence[Optional[HostActor]]:
        ...

    def selected_ids(self) -> Iterable[str]:
        """Identifiers of the objects currently selected in the host UI."""
        ...
