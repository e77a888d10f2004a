"""Small synthetic colony implementing the host protocols.

Used by the ``demo`` CLI command to drive the real export pipeline without a
game attached, and by the tests as a realistic host. All randomness comes from
a seeded ``random.Random`` so a given seed always produces the same colony and
the same sequence of mutations.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from core.config.export import CAPACITY_NAMES

FIRST_NAMES = ["Ada", "Bram", "Cora", "Dax", "Edda", "Finn", "Greta", "Hal"]
LAST_NAMES = ["Voss", "Marlow", "Quill", "Stroud", "Pell", "Rourke"]
TRAITS = ["Industrious", "Night owl", "Tough", "Kind", "Greedy", "Optimist", "Nimble"]
SKILLS = ["Shooting", "Melee", "Construction", "Mining", "Cooking", "Plants", "Medicine", "Social"]
NEEDS = ["Food", "Rest", "Recreation", "Mood", "Comfort"]
PASSIONS = ["None", "Minor", "Major"]
JOBS = [
    ("hauling {a}.", 2),
    ("constructing {a}.", 1),
    ("cooking at {a}.", 3),
    ("wandering.", 0),
    ("sowing plants.", 1),
]
THINGS = ["steel", "wood", "stove", "wall", "bed", "potato plant"]


@dataclass
class DemoWealth:
    wealth_floors: float = 0.0
    wealth_buildings: float = 0.0  # includes floors
    wealth_items: float = 0.0
    wealth_pawns: float = 0.0

    @property
    def wealth_total(self) -> float:
        return self.wealth_buildings + self.wealth_items + self.wealth_pawns


@dataclass
class DemoRegion:
    region_id: int
    name: str
    is_player_home: bool
    size: Tuple[int, int]
    wealth: DemoWealth = field(default_factory=DemoWealth)


@dataclass
class DemoSkill:
    name: str
    passion: str = "None"
    level: int = 0
    totally_disabled: bool = False
    xp_progress: float = 0.0
    xp_total_earned: float = 0.0
    xp_since_last_level: float = 0.0
    xp_required_for_level_up: float = 1000.0


@dataclass
class DemoNeed:
    label: str
    level: float = 1.0


@dataclass
class DemoHediff:
    label: str
    tendable_now: bool = False
    tended: bool = False
    bleed_rate: float = 0.0
    pain_offset: float = 0.0
    part_label: Optional[str] = None
    health_percent_impact: float = 0.0
    permanent: bool = False


@dataclass
class DemoJobTarget:
    thing_label: Optional[str]
    cell: Tuple[int, int]

    def describe(self) -> str:
        return f"({self.cell[0]}, 0, {self.cell[1]})"


@dataclass
class DemoJob:
    report_string: str
    target_a: Optional[DemoJobTarget] = None
    target_b: Optional[DemoJobTarget] = None
    target_c: Optional[DemoJobTarget] = None


@dataclass
class DemoActor:
    actor_id: str
    full_name: str
    short_label: str
    label: str
    region_id: Optional[int] = None
    is_colonist: bool = True
    is_visitor: bool = False
    is_prisoner: bool = False
    is_enemy: bool = False
    drafted: bool = False
    dead: bool = False
    downed: bool = False
    asleep: bool = False
    idle: bool = False
    in_medical_bed: bool = False
    in_mental_state: bool = False
    in_aggro_mental_state: bool = False
    age_years: float = 30.0
    health_percent: float = 1.0
    position: Tuple[int, int] = (0, 0)
    traits: List[str] = field(default_factory=list)
    skills: Optional[List[DemoSkill]] = field(default_factory=list)
    needs: Optional[List[DemoNeed]] = field(default_factory=list)
    hediffs: Optional[List[DemoHediff]] = field(default_factory=list)
    capacities: Optional[Dict[str, float]] = field(default_factory=dict)
    current_job: Optional[DemoJob] = None


class DemoColony:
    """A tiny world: a home map, an outpost map and a handful of colonists."""

    def __init__(self, seed: int = 42, colonists: int = 3) -> None:
        self.rng = random.Random(seed)
        self.ticks_game = 0
        self.world_seed = f"demo-{seed}"
        self.regions: List[DemoRegion] = [
            DemoRegion(1, "Home", True, (250, 250)),
            DemoRegion(2, "Outpost", False, (150, 150)),
        ]
        self.colonists: List[Optional[DemoActor]] = [
            self._make_colonist(index) for index in range(colonists)
        ]
        self.visitors: List[Optional[DemoActor]] = []
        self.enemies: List[Optional[DemoActor]] = []
        self.selected: Set[str] = set()
        for region in self.regions:
            self._refresh_wealth(region)

    # ------------------------------------------------------------------
    # HostSimulation
    # ------------------------------------------------------------------

    def colonists_in_order(self) -> Sequence[Optional[DemoActor]]:
        return list(self.colonists)

    def visitors_in_order(self) -> Sequence[Optional[DemoActor]]:
        return list(self.visitors)

    def enemies_in_order(self) -> Sequence[Optional[DemoActor]]:
        return list(self.enemies)

    def selected_ids(self) -> Sequence[str]:
        return sorted(self.selected)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def _make_colonist(self, index: int) -> DemoActor:
        rng = self.rng
        first = FIRST_NAMES[index % len(FIRST_NAMES)]
        last = rng.choice(LAST_NAMES)
        actor = DemoActor(
            actor_id=f"Human{1000 + index}",
            full_name=f"{first} '{first[:3]}' {last}",
            short_label=first,
            label=f"{first}, colonist",
            region_id=1,
            age_years=round(rng.uniform(18, 70), 2),
            position=(rng.randrange(250), rng.randrange(250)),
            traits=rng.sample(TRAITS, 2),
            skills=[
                DemoSkill(
                    name=name,
                    passion=rng.choice(PASSIONS),
                    level=rng.randrange(0, 16),
                    totally_disabled=rng.random() < 0.1,
                )
                for name in SKILLS
            ],
            needs=[DemoNeed(name, round(rng.uniform(0.3, 1.0), 3)) for name in NEEDS],
            capacities={name: 1.0 for name in CAPACITY_NAMES},
        )
        return actor

    def _make_job(self, actor: DemoActor) -> Optional[DemoJob]:
        template, target_count = self.rng.choice(JOBS)
        targets: List[Optional[DemoJobTarget]] = []
        for _ in range(target_count):
            x = min(249, max(0, actor.position[0] + self.rng.randint(-5, 5)))
            y = min(249, max(0, actor.position[1] + self.rng.randint(-5, 5)))
            label = self.rng.choice(THINGS) if self.rng.random() < 0.8 else None
            targets.append(DemoJobTarget(label, (x, y)))
        targets += [None] * (3 - len(targets))
        first = targets[0]
        report = template.format(a=(first.thing_label or "somewhere") if first else "")
        return DemoJob(report, *targets)

    def _refresh_wealth(self, region: DemoRegion) -> None:
        rng = self.rng
        floors = round(rng.uniform(100, 500), 1)
        region.wealth = DemoWealth(
            wealth_floors=floors,
            wealth_buildings=floors + round(rng.uniform(1000, 5000), 1),
            wealth_items=round(rng.uniform(500, 8000), 1),
            wealth_pawns=round(rng.uniform(0, 3000), 1),
        )

    def step(self) -> None:
        """Advance one tick, mutating actors and (occasionally) regions."""
        self.ticks_game += 1
        rng = self.rng
        for actor in self.colonists:
            if actor is None or actor.dead:
                continue
            x, y = actor.position
            actor.position = (
                min(249, max(0, x + rng.randint(-1, 1))),
                min(249, max(0, y + rng.randint(-1, 1))),
            )
            for need in actor.needs or ():
                need.level = max(0.0, round(need.level - rng.uniform(0, 0.002), 4))
            if actor.current_job is None or rng.random() < 0.01:
                actor.current_job = self._make_job(actor)
                actor.idle = actor.current_job.report_string == "wandering."
            if rng.random() < 0.001:
                actor.hediffs.append(
                    DemoHediff(
                        "Cut",
                        tendable_now=True,
                        bleed_rate=0.05,
                        pain_offset=0.02,
                        part_label=rng.choice(["left arm", "torso", "right leg"]),
                        health_percent_impact=0.01,
                    )
                )
                actor.health_percent = max(0.0, actor.health_percent - 0.01)
        if self.ticks_game % 600 == 0:
            for region in self.regions:
                self._refresh_wealth(region)
