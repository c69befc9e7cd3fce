from __future__ import annotations

from collections import Counter
from typing import Final, Iterable, Sequence

from ..replay.types import (
    BuildCategory,
    BuildOrderEntry,
    Command,
    OpcodeCategory,
    Race,
    ReplayHeader,
)
from .metrics import frames_to_timestamp, opcode_info
from .units import STARTING_SUPPLY_CAP, tech_name, unit_info, unit_name, upgrade_name

MIN_SUPPLY: Final[int] = 4
MAX_SUPPLY: Final[int] = 200
DEFAULT_LIMIT: Final[int] = 25

_UNIT_CATEGORIES: Final[dict[OpcodeCategory, BuildCategory]] = {
    OpcodeCategory.BUILD: BuildCategory.BUILD,
    OpcodeCategory.BUILDING_MORPH: BuildCategory.BUILD,
    OpcodeCategory.TRAIN: BuildCategory.TRAIN,
    OpcodeCategory.MORPH: BuildCategory.TRAIN,
}
_TECH_CATEGORIES: Final[dict[OpcodeCategory, BuildCategory]] = {
    OpcodeCategory.RESEARCH: BuildCategory.TECH,
    OpcodeCategory.UPGRADE: BuildCategory.UPGRADE,
}


def _clamp_supply(value: int) -> int:
    return max(MIN_SUPPLY, min(MAX_SUPPLY, int(value)))


def _build_commands(
    commands: Iterable[Command],
    player_id: int,
    *,
    include_tech: bool,
) -> list[tuple[Command, BuildCategory]]:
    picked: list[tuple[Command, BuildCategory]] = []
    for cmd in commands:
        if cmd.player_id != player_id:
            continue
        info = opcode_info(cmd)
        if info is None:
            continue
        category = _UNIT_CATEGORIES.get(info.category)
        if category is not None and cmd.params.unit_type is None:
            # Train Fighter and similar carry no unit type.
            continue
        if category is None and include_tech:
            category = _TECH_CATEGORIES.get(info.category)
        if category is not None:
            picked.append((cmd, category))
    # sorted() is stable: same-frame commands keep stream order.
    return sorted(picked, key=lambda item: item[0].frame)


def _entry_name(cmd: Command, category: BuildCategory) -> str:
    if category == BuildCategory.TECH:
        return tech_name(cmd.params.tech_type)
    if category == BuildCategory.UPGRADE:
        return upgrade_name(cmd.params.tech_type)
    return unit_name(cmd.params.unit_type)


def _race_from_unit_types(unit_types: Iterable[int | None]) -> Race:
    votes: Counter[Race] = Counter()
    for unit_type in unit_types:
        info = unit_info(unit_type)
        if info is not None:
            votes[info.race] += 1
    if not votes:
        return Race.INVALID
    # Ties resolve in race id order.
    best = max(votes.values())
    return min(race for race, count in votes.items() if count == best)


def infer_race_from_build_order(entries: Iterable[BuildOrderEntry]) -> Race:
    """Guess a player's race from the units and buildings they produced."""

    return _race_from_unit_types(
        entry.unit_type for entry in entries if entry.category in (BuildCategory.BUILD, BuildCategory.TRAIN)
    )


def compute_build_order(
    commands: Sequence[Command],
    player_id: int,
    *,
    fps: float,
    race: Race = Race.INVALID,
    limit: int = DEFAULT_LIMIT,
    include_tech: bool = True,
) -> tuple[BuildOrderEntry, ...]:
    picked = _build_commands(commands, player_id, include_tech=include_tech)[: max(0, int(limit))]
    if race not in STARTING_SUPPLY_CAP:
        race = _race_from_unit_types(
            cmd.params.unit_type for cmd, category in picked if category in (BuildCategory.BUILD, BuildCategory.TRAIN)
        )
    supply_cap = STARTING_SUPPLY_CAP.get(race, 0)

    used = MIN_SUPPLY
    entries: list[BuildOrderEntry] = []
    for cmd, category in picked:
        is_unit = category in (BuildCategory.BUILD, BuildCategory.TRAIN)
        info = unit_info(cmd.params.unit_type) if is_unit else None
        entries.append(
            BuildOrderEntry(
                frame=cmd.frame,
                timestamp=frames_to_timestamp(cmd.frame, fps),
                unit_name=_entry_name(cmd, category),
                category=category,
                supply_estimate=_clamp_supply(used),
                unit_type=cmd.params.unit_type if is_unit else None,
                supply_cap=min(MAX_SUPPLY, supply_cap),
                minerals=info.minerals if info is not None else 0,
                gas=info.gas if info is not None else 0,
            )
        )
        if info is not None:
            used += info.supply
            supply_cap += info.supply_provided
    return tuple(entries)


def compute_build_orders(
    header: ReplayHeader,
    commands: Sequence[Command],
    *,
    fps: float,
    limit: int = DEFAULT_LIMIT,
    include_tech: bool = True,
) -> tuple[tuple[BuildOrderEntry, ...], ...]:
    """Build orders for every active player, indexed by dense player id."""

    return tuple(
        compute_build_order(
            commands,
            slot.player_id,
            fps=fps,
            race=slot.race,
            limit=limit,
            include_tech=include_tech,
        )
        for slot in header.player_slots
    )


def infer_player_races(
    header: ReplayHeader,
    build_orders: Sequence[Sequence[BuildOrderEntry]],
) -> tuple[Race, ...]:
    """Recorded races, with Random and invalid slots replaced by a build-order guess."""

    races: list[Race] = []
    for slot in header.player_slots:
        race = slot.race
        if race not in STARTING_SUPPLY_CAP and slot.player_id < len(build_orders):
            race = infer_race_from_build_order(build_orders[slot.player_id])
        races.append(race)
    return tuple(races)
