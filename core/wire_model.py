"""Immutable wire model for one point-in-time colony snapshot.

Every entity here is value-shaped: built once from live host state by
``core.snapshot_builder``, never mutated, and dropped after the cycle that
produced it has been serialized and sent (or failed). Optional sections are
``None`` when absent; the matching ``includes_*`` flag is true exactly when the
section is populated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.config.export import NO_REGION_ID


@dataclass(frozen=True)
class Location:
    """Integer cell coordinate (the host's x/z plane, reported as x/y)."""

    x: int
    y: int


@dataclass(frozen=True)
class RegionData:
    """One loaded map. ``wealth_buildings`` is reported net of floor value."""

    id: str
    name: str
    colony: bool
    size_x: int
    size_y: int
    wealth_floors: float
    wealth_buildings: float
    wealth_items: float
    wealth_pawns: float
    wealth_total: float


@dataclass(frozen=True)
class SkillData:
    name: str
    passion: str
    level: int
    enabled: bool
    xp_progress: float
    total_xp: float
    current_xp: float
    levelup_xp: float


@dataclass(frozen=True)
class KeyValue:
    """Name/value pair; the value is already a locale-independent string."""

    key: str
    value: str


@dataclass(frozen=True)
class HediffData:
    label: str
    tendable: bool
    tended: bool
    bleed_rate: float
    pain: float
    location: Optional[str]
    health_percent_impact: float
    permanent: bool


@dataclass(frozen=True)
class JobTarget:
    name: str
    location: Location


@dataclass(frozen=True)
class JobData:
    name: str
    target_a: Optional[JobTarget] = None
    target_b: Optional[JobTarget] = None
    target_c: Optional[JobTarget] = None


@dataclass(frozen=True)
class ActorData:
    """One simulated inhabitant at snapshot time."""

    id: str
    full_name: str
    nick_name: str
    label: str
    on_map: int = NO_REGION_ID
    colonist: bool = False
    visitor: bool = False
    prisoner: bool = False
    enemy: bool = False
    drafted: bool = False
    selected: bool = False
    age: float = 0.0
    current_health: float = 0.0
    dead: bool = False
    downed: bool = False
    sleeping: bool = False
    idle: bool = False
    medical_rest: bool = False
    in_mental_state: bool = False
    in_aggro_mental_state: bool = False
    location: Location = field(default_factory=lambda: Location(0, 0))
    traits: Tuple[str, ...] = ()
    skills: Optional[Tuple[SkillData, ...]] = None
    needs: Optional[Tuple[KeyValue, ...]] = None
    hediffs: Optional[Tuple[HediffData, ...]] = None
    capacities: Optional[Tuple[KeyValue, ...]] = None
    job: Optional[JobData] = None
    portrait: Optional[bytes] = None

    @property
    def includes_skills(self) -> bool:
        return self.skills is not None

    @property
    def includes_needs(self) -> bool:
        return self.needs is not None

    @property
    def includes_health(self) -> bool:
        return self.hediffs is not None

    @property
    def includes_job(self) -> bool:
        return self.job is not None

    @property
    def includes_portrait(self) -> bool:
        return self.portrait is not None


@dataclass(frozen=True)
class Snapshot:
    """Root entity: the world at one tick.

    ``regions`` is ``None`` unless world data was requested; the three actor
    sequences are ``None`` unless actor data was requested.
    """

    tick: int
    world_seed: str
    regions: Optional[Tuple[RegionData, ...]] = None
    colonists: Optional[Tuple[ActorData, ...]] = None
    visitors: Optional[Tuple[ActorData, ...]] = None
    enemies: Optional[Tuple[ActorData, ...]] = None

    @property
    def includes_maps(self) -> bool:
        return self.regions is not None

    @property
    def includes_pawns(self) -> bool:
        return self.colonists is not None

    def actor_count(self) -> int:
        return sum(len(group) for group in (self.colonists, self.visitors, self.enemies) if group)
