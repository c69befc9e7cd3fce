from __future__ import annotations

from collections import Counter
from typing import Final, Sequence

from ..replay.types import ActionDistribution, Command, OpcodeCategory, ReplayHeader
from .metrics import game_minutes, opcode_info

MACRO_CATEGORIES: Final[frozenset[OpcodeCategory]] = frozenset(
    {
        OpcodeCategory.BUILD,
        OpcodeCategory.TRAIN,
        OpcodeCategory.MORPH,
        OpcodeCategory.BUILDING_MORPH,
        OpcodeCategory.RESEARCH,
        OpcodeCategory.UPGRADE,
    }
)
MICRO_CATEGORIES: Final[frozenset[OpcodeCategory]] = frozenset(
    {
        OpcodeCategory.PLAIN_MOVE,
        OpcodeCategory.ATTACK,
        OpcodeCategory.ORDER,
        OpcodeCategory.ABILITY,
        OpcodeCategory.TRANSPORT,
    }
)

_CATEGORY_ORDER: Final[dict[OpcodeCategory, int]] = {category: idx for idx, category in enumerate(OpcodeCategory)}


def _percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return 100.0 * part / whole


def action_distribution(
    commands: Sequence[Command],
    player_id: int,
    *,
    frame_count: int,
    fps: float,
) -> ActionDistribution:
    counts: Counter[OpcodeCategory] = Counter()
    for cmd in commands:
        if cmd.player_id != player_id:
            continue
        info = opcode_info(cmd)
        if info is None or not info.is_game_action:
            continue
        counts[info.category] += 1

    total = sum(counts.values())
    macro = sum(count for category, count in counts.items() if category in MACRO_CATEGORIES)
    micro = sum(count for category, count in counts.items() if category in MICRO_CATEGORIES)
    minutes = game_minutes(frame_count, fps)
    hotkeys = counts.get(OpcodeCategory.HOTKEY, 0)
    return ActionDistribution(
        player_id=player_id,
        counts=tuple(sorted(counts.items(), key=lambda item: _CATEGORY_ORDER[item[0]])),
        macro_percentage=_percentage(macro, total),
        micro_percentage=_percentage(micro, total),
        hotkey_actions_per_minute=hotkeys / minutes if minutes > 0.0 else 0.0,
    )


def compute_action_distributions(
    header: ReplayHeader,
    commands: Sequence[Command],
    *,
    fps: float,
) -> tuple[ActionDistribution, ...]:
    return tuple(
        action_distribution(commands, player_id, frame_count=header.frame_count, fps=fps)
        for player_id in range(header.player_count)
    )
