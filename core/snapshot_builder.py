"""Live host state -> immutable ``Snapshot`` conversion.

This runs on a background thread while the host keeps simulating, so every
read here goes through the best-effort snapshot read path described in
``core.interfaces``: nothing is locked, and a region or actor that fails while
being read is dropped from this snapshot instead of aborting it.

Keeping this logic out of the dispatcher separates concerns:
- Cycle timing/threading (backend.export_dispatcher)
- Live state inspection (here)
- Wire encoding (core.serializer)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from core.config.export import CAPACITY_NAMES, NO_REGION_ID, UNBACKED_TARGET_PREFIX
from core.exceptions import EntityUnavailableError
from core.interfaces import (
    HostActor,
    HostHediff,
    HostJob,
    HostJobTarget,
    HostRegion,
    HostSimulation,
    HostSkill,
)
from core.serializer import format_number
from core.wire_model import (
    ActorData,
    HediffData,
    JobData,
    JobTarget,
    KeyValue,
    Location,
    RegionData,
    SkillData,
    Snapshot,
)

logger = logging.getLogger(__name__)

# Failures a concurrent host mutation can surface while we read an entity:
# an unloaded object (EntityUnavailableError/ReferenceError), a half-built one
# (AttributeError/TypeError), a collection changing size mid-iteration
# (RuntimeError) or an index/key that just went away (LookupError).
TRANSIENT_READ_ERRORS = (
    EntityUnavailableError,
    AttributeError,
    TypeError,
    LookupError,
    ReferenceError,
    RuntimeError,
)


@dataclass(frozen=True)
class InclusionOptions:
    """Which optional sections a cycle should populate."""

    world: bool = True
    pawns: bool = True
    skills: bool = True
    jobs: bool = True
    needs: bool = True
    health: bool = True
    portraits: bool = True


class SnapshotBuilder:
    """Build a ``Snapshot`` from the host, the known regions and the portrait cache.

    The builder is stateless between calls and performs no randomized
    iteration: identical source state yields an identical snapshot.
    """

    def __init__(self, options: InclusionOptions) -> None:
        self.options = options
        self.skipped_regions = 0
        self.skipped_actors = 0

    def build(
        self,
        host: HostSimulation,
        regions: Iterable[HostRegion],
        portraits: Mapping[str, bytes],
    ) -> Snapshot:
        """Collect one snapshot.

        Args:
            host: World-level accessors (tick, seed, actor ordering, selection)
            regions: Known loaded regions, in the order the host registered them
            portraits: Encoded portraits keyed by actor id

        Returns:
            Fully populated Snapshot; entities that failed mid-read are omitted
        """
        region_data: Optional[Tuple[RegionData, ...]] = None
        if self.options.world:
            region_data = tuple(self._collect(regions, self.region_to_data, "region"))

        colonists = visitors = enemies = None
        if self.options.pawns:
            selected = frozenset(self._read_selection(host))
            colonists = self._collect_actors(host.colonists_in_order, selected, portraits)
            visitors = self._collect_actors(
                getattr(host, "visitors_in_order", None), selected, portraits
            )
            enemies = self._collect_actors(
                getattr(host, "enemies_in_order", None), selected, portraits
            )

        return Snapshot(
            tick=int(host.ticks_game),
            world_seed=str(host.world_seed),
            regions=region_data,
            colonists=colonists,
            visitors=visitors,
            enemies=enemies,
        )

    def _read_selection(self, host: HostSimulation) -> List[str]:
        try:
            return list(host.selected_ids())
        except TRANSIENT_READ_ERRORS as e:
            logger.debug("Selection unavailable for this snapshot: %s", e)
            return []

    def _collect_actors(self, source, selected, portraits) -> Tuple[ActorData, ...]:
        if source is None:
            return ()
        try:
            actors = list(source())
        except TRANSIENT_READ_ERRORS as e:
            logger.debug("Actor list unavailable for this snapshot: %s", e)
            return ()
        return tuple(
            self._collect(
                (a for a in actors if a is not None),
                lambda actor: self.actor_to_data(actor, selected, portraits),
                "actor",
            )
        )

    def _collect(self, items, convert, kind: str) -> List:
        out = []
        for item in items:
            try:
                out.append(convert(item))
            except TRANSIENT_READ_ERRORS as e:
                if kind == "region":
                    self.skipped_regions += 1
                else:
                    self.skipped_actors += 1
                logger.debug("Skipping %s unavailable mid-build: %s: %s", kind, type(e).__name__, e)
        return out

    @staticmethod
    def region_to_data(region: HostRegion) -> RegionData:
        wealth = region.wealth
        floors = float(wealth.wealth_floors)
        size_x, size_y = region.size
        return RegionData(
            id=str(region.region_id),
            name=str(region.name),
            colony=bool(region.is_player_home),
            size_x=int(size_x),
            size_y=int(size_y),
            wealth_floors=floors,
            wealth_buildings=float(wealth.wealth_buildings) - floors,
            wealth_items=float(wealth.wealth_items),
            wealth_pawns=float(wealth.wealth_pawns),
            wealth_total=float(wealth.wealth_total),
        )

    def actor_to_data(
        self,
        actor: HostActor,
        selected: frozenset = frozenset(),
        portraits: Optional[Mapping[str, bytes]] = None,
    ) -> ActorData:
        options = self.options
        actor_id = str(actor.actor_id)

        skills = None
        if options.skills and actor.skills is not None:
            skills = tuple(self.skill_to_data(s) for s in actor.skills)

        needs = None
        if options.needs and actor.needs is not None:
            needs = tuple(KeyValue(str(n.label), format_number(n.level)) for n in actor.needs)

        hediffs = capacities = None
        if options.health and actor.hediffs is not None:
            hediffs = tuple(self.hediff_to_data(h) for h in actor.hediffs)
            capacities = self.capacities_to_data(actor.capacities or {})

        job = None
        if options.jobs:
            current_job = actor.current_job
            if current_job is not None:
                job = self.job_to_data(current_job)

        portrait = None
        if options.portraits and portraits:
            portrait = portraits.get(actor_id)

        region_id = actor.region_id
        x, y = actor.position
        return ActorData(
            id=actor_id,
            full_name=str(actor.full_name),
            nick_name=str(actor.short_label),
            label=str(actor.label),
            on_map=NO_REGION_ID if region_id is None else int(region_id),
            colonist=bool(actor.is_colonist),
            visitor=bool(actor.is_visitor),
            prisoner=bool(actor.is_prisoner),
            enemy=bool(actor.is_enemy),
            drafted=bool(actor.drafted),
            selected=actor_id in selected,
            age=float(actor.age_years),
            current_health=float(actor.health_percent),
            dead=bool(actor.dead),
            downed=bool(actor.downed),
            sleeping=bool(actor.asleep) and actor.current_job is not None,
            idle=bool(actor.idle),
            medical_rest=bool(actor.in_medical_bed),
            in_mental_state=bool(actor.in_mental_state),
            in_aggro_mental_state=bool(actor.in_aggro_mental_state),
            location=Location(int(x), int(y)),
            traits=tuple(str(t) for t in (actor.traits or ())),
            skills=skills,
            needs=needs,
            hediffs=hediffs,
            capacities=capacities,
            job=job,
            portrait=portrait,
        )

    @staticmethod
    def skill_to_data(skill: HostSkill) -> SkillData:
        return SkillData(
            name=str(skill.name),
            passion=str(skill.passion),
            level=int(skill.level),
            enabled=not skill.totally_disabled,
            xp_progress=float(skill.xp_progress),
            total_xp=float(skill.xp_total_earned),
            current_xp=float(skill.xp_since_last_level),
            levelup_xp=float(skill.xp_required_for_level_up),
        )

    @staticmethod
    def hediff_to_data(hediff: HostHediff) -> HediffData:
        part = hediff.part_label
        return HediffData(
            label=str(hediff.label),
            tendable=bool(hediff.tendable_now),
            tended=bool(hediff.tended),
            bleed_rate=float(hediff.bleed_rate),
            pain=float(hediff.pain_offset),
            location=None if part is None else str(part),
            health_percent_impact=float(hediff.health_percent_impact),
            permanent=bool(hediff.permanent),
        )

    @staticmethod
    def capacities_to_data(levels: Mapping[str, float]) -> Tuple[KeyValue, ...]:
        # Fixed wire order; capacities the host does not report read as 0
        return tuple(KeyValue(name, format_number(levels.get(name, 0.0))) for name in CAPACITY_NAMES)

    @staticmethod
    def job_to_data(job: HostJob) -> JobData:
        def target(t: Optional[HostJobTarget]) -> Optional[JobTarget]:
            if t is None:
                return None
            if t.thing_label is not None:
                name = str(t.thing_label)
            else:
                name = UNBACKED_TARGET_PREFIX + t.describe()
            x, y = t.cell
            return JobTarget(name=name, location=Location(int(x), int(y)))

        return JobData(
            name=str(job.report_string),
            target_a=target(job.target_a),
            target_b=target(job.target_b),
            target_c=target(job.target_c),
        )
