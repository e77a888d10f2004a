"""Snapshot -> XML wire payload.

The payload is rooted at ``<GameData>`` and mirrors the wire model one-to-one.
Element names follow the companion app's schema (camelCase, ``MapData``,
``PawnData`` ...). Serialization is pure: the same ``Snapshot`` always yields
the same bytes.

Value formatting is fixed and locale independent:
- ints as plain decimal
- floats as Python's shortest round-trip ``repr`` (``NaN``/``INF``/``-INF``
  for non-finite values, XML Schema spelling)
- bools as ``true``/``false``
- bytes as base64
- text with characters XML 1.0 forbids (control characters, lone
  surrogates) has them replaced by U+FFFD
"""

from __future__ import annotations

import base64
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterable, Optional, Union

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

ROOT_TAG = "GameData"

Scalar = Union[str, int, float, bool, bytes]

# Characters XML 1.0 does not allow in a document (C0 controls, lone
# surrogates, U+FFFE/U+FFFF); host text containing them is written as U+FFFD
_INVALID_XML_CHARS = re.compile("[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")
REPLACEMENT_CHAR = "\uFFFD"


@dataclass(frozen=True)
class SerializedPayload:
    """Encoded snapshot ready for transport."""

    tick: int
    body: bytes

    @property
    def size(self) -> int:
        return len(self.body)


def format_number(value: Union[int, float]) -> str:
    """Locale-independent textual form of a number."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return repr(value)


def xml_safe(text: str) -> str:
    """Replace characters that cannot appear in an XML 1.0 document."""
    return _INVALID_XML_CHARS.sub(REPLACEMENT_CHAR, text)


def _text(value: Scalar) -> str:
    if isinstance(value, str):
        return xml_safe(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return format_number(value)


def _leaf(parent: ET.Element, tag: str, value: Optional[Scalar]) -> None:
    """Append ``<tag>value</tag>``; ``None`` values are omitted entirely."""
    if value is None:
        return
    ET.SubElement(parent, tag).text = _text(value)


def _location(parent: ET.Element, tag: str, location: Location) -> None:
    node = ET.SubElement(parent, tag)
    _leaf(node, "x", location.x)
    _leaf(node, "y", location.y)


def _key_values(parent: ET.Element, tag: str, items: Iterable[KeyValue]) -> None:
    node = ET.SubElement(parent, tag)
    for item in items:
        pair = ET.SubElement(node, "KeyValuePair")
        _leaf(pair, "key", item.key)
        _leaf(pair, "value", item.value)


def _region(parent: ET.Element, region: RegionData) -> None:
    node = ET.SubElement(parent, "MapData")
    _leaf(node, "id", region.id)
    _leaf(node, "name", region.name)
    _leaf(node, "colony", region.colony)
    _leaf(node, "sizeX", region.size_x)
    _leaf(node, "sizeY", region.size_y)
    _leaf(node, "wealthFloors", region.wealth_floors)
    _leaf(node, "wealthBuildings", region.wealth_buildings)
    _leaf(node, "wealthItems", region.wealth_items)
    _leaf(node, "wealthPawns", region.wealth_pawns)
    _leaf(node, "wealthTotal", region.wealth_total)


def _skill(parent: ET.Element, skill: SkillData) -> None:
    node = ET.SubElement(parent, "SkillData")
    _leaf(node, "name", skill.name)
    _leaf(node, "passion", skill.passion)
    _leaf(node, "level", skill.level)
    _leaf(node, "enabled", skill.enabled)
    _leaf(node, "xpProgress", skill.xp_progress)
    _leaf(node, "totalXp", skill.total_xp)
    _leaf(node, "currentXp", skill.current_xp)
    _leaf(node, "levelupXp", skill.levelup_xp)


def _hediff(parent: ET.Element, hediff: HediffData) -> None:
    node = ET.SubElement(parent, "HediffData")
    _leaf(node, "label", hediff.label)
    _leaf(node, "tendable", hediff.tendable)
    _leaf(node, "tended", hediff.tended)
    _leaf(node, "bleedRate", hediff.bleed_rate)
    _leaf(node, "pain", hediff.pain)
    _leaf(node, "location", hediff.location)
    _leaf(node, "healthPercentImpact", hediff.health_percent_impact)
    _leaf(node, "permanent", hediff.permanent)


def _job_target(parent: ET.Element, tag: str, target: Optional[JobTarget]) -> None:
    if target is None:
        return
    node = ET.SubElement(parent, tag)
    _leaf(node, "name", target.name)
    _location(node, "location", target.location)


def _job(parent: ET.Element, job: JobData) -> None:
    node = ET.SubElement(parent, "job")
    _leaf(node, "name", job.name)
    _job_target(node, "targetA", job.target_a)
    _job_target(node, "targetB", job.target_b)
    _job_target(node, "targetC", job.target_c)


def _actor(parent: ET.Element, actor: ActorData) -> None:
    node = ET.SubElement(parent, "PawnData")
    _leaf(node, "id", actor.id)
    _leaf(node, "fullName", actor.full_name)
    _leaf(node, "nickName", actor.nick_name)
    _leaf(node, "label", actor.label)
    _leaf(node, "includesSkills", actor.includes_skills)
    _leaf(node, "includesNeeds", actor.includes_needs)
    _leaf(node, "includesHealth", actor.includes_health)
    _leaf(node, "includesJob", actor.includes_job)
    _leaf(node, "includesPortrait", actor.includes_portrait)
    _leaf(node, "onMap", actor.on_map)
    _leaf(node, "colonist", actor.colonist)
    _leaf(node, "visitor", actor.visitor)
    _leaf(node, "prisoner", actor.prisoner)
    _leaf(node, "enemy", actor.enemy)
    _leaf(node, "drafted", actor.drafted)
    _leaf(node, "selected", actor.selected)
    _leaf(node, "age", actor.age)
    _leaf(node, "currentHealth", actor.current_health)
    _leaf(node, "dead", actor.dead)
    _leaf(node, "downed", actor.downed)
    _leaf(node, "sleeping", actor.sleeping)
    _leaf(node, "idle", actor.idle)
    _leaf(node, "medicalRest", actor.medical_rest)
    _leaf(node, "inMentalState", actor.in_mental_state)
    _leaf(node, "inAggroMentalState", actor.in_aggro_mental_state)
    _location(node, "location", actor.location)

    traits = ET.SubElement(node, "traits")
    for trait in actor.traits:
        _leaf(traits, "string", trait)

    if actor.skills is not None:
        skills = ET.SubElement(ET.SubElement(node, "skillsData"), "skills")
        for skill in actor.skills:
            _skill(skills, skill)
    if actor.needs is not None:
        _key_values(ET.SubElement(node, "needData"), "needs", actor.needs)
    if actor.hediffs is not None:
        hediffs = ET.SubElement(ET.SubElement(node, "healthData"), "hediffs")
        for hediff in actor.hediffs:
            _hediff(hediffs, hediff)
        _key_values(ET.SubElement(node, "capacityData"), "capacities", actor.capacities or ())
    if actor.job is not None:
        _job(node, actor.job)
    _leaf(node, "portrait", actor.portrait)


def _actor_group(root: ET.Element, tag: str, actors) -> None:
    if actors is None:
        return
    node = ET.SubElement(root, tag)
    for actor in actors:
        _actor(node, actor)


def snapshot_to_element(snapshot: Snapshot) -> ET.Element:
    root = ET.Element(ROOT_TAG)
    _leaf(root, "tick", snapshot.tick)
    _leaf(root, "worldSeed", snapshot.world_seed)
    _leaf(root, "includesMaps", snapshot.includes_maps)
    _leaf(root, "includesPawns", snapshot.includes_pawns)

    if snapshot.regions is not None:
        maps = ET.SubElement(root, "maps")
        for region in snapshot.regions:
            _region(maps, region)

    if snapshot.includes_pawns:
        _actor_group(root, "colonists", snapshot.colonists)
        _actor_group(root, "visitors", snapshot.visitors or ())
        _actor_group(root, "enemies", snapshot.enemies or ())
    return root


def serialize_snapshot(snapshot: Snapshot) -> SerializedPayload:
    """Encode *snapshot* as a UTF-8 XML document."""
    body = ET.tostring(snapshot_to_element(snapshot), encoding="utf-8", xml_declaration=True)
    return SerializedPayload(tick=snapshot.tick, body=body)
