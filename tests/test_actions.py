from __future__ import annotations

import pytest

from bwrep.analysis import action_distribution, compute_action_distributions
from bwrep.replay import Command, CommandParams, Opcode, OpcodeCategory, decode_header

from conftest import build_stream


def _cmd(frame: int, player: int, opcode: Opcode, **params: int) -> Command:
    return Command(frame=frame, player_id=player, opcode=opcode, params=CommandParams(**params))


def _mixed_commands() -> list[Command]:
    return [
        _cmd(10, 0, Opcode.SELECT, unit_count=2),
        _cmd(11, 0, Opcode.MOVE, x=1, y=1, target_id=0, unit_type=0),
        _cmd(20, 0, Opcode.BUILD, unit_type=0x6D, x=1, y=1),
        _cmd(30, 0, Opcode.HOTKEY, hotkey_action=0, hotkey=1),
        _cmd(40, 0, Opcode.RESEARCH, tech_type=0),
        _cmd(50, 0, Opcode.TRAIN, unit_type=0x07),
        _cmd(60, 0, Opcode.CHAT),
        _cmd(70, 1, Opcode.TRAIN, unit_type=0x40),
    ]


def test_action_distribution_counts_game_actions() -> None:
    dist = action_distribution(_mixed_commands(), 0, frame_count=1440, fps=24.0)

    counts = dict(dist.counts)
    assert counts == {
        OpcodeCategory.SELECT: 1,
        OpcodeCategory.PLAIN_MOVE: 1,
        OpcodeCategory.BUILD: 1,
        OpcodeCategory.TRAIN: 1,
        OpcodeCategory.RESEARCH: 1,
        OpcodeCategory.HOTKEY: 1,
    }
    assert OpcodeCategory.CHAT not in counts
    assert dist.macro_percentage == pytest.approx(50.0)
    assert dist.micro_percentage == pytest.approx(100.0 / 6.0)
    assert dist.hotkey_actions_per_minute == pytest.approx(1.0)


def test_action_distribution_counts_follow_category_order() -> None:
    dist = action_distribution(_mixed_commands(), 0, frame_count=1440, fps=24.0)
    order = list(OpcodeCategory)
    positions = [order.index(category) for category, _ in dist.counts]
    assert positions == sorted(positions)


def test_action_distribution_for_idle_player() -> None:
    dist = action_distribution([], 0, frame_count=0, fps=24.0)
    assert dist.counts == ()
    assert dist.macro_percentage == 0.0
    assert dist.hotkey_actions_per_minute == 0.0


def test_compute_action_distributions_per_player() -> None:
    header = decode_header(build_stream())
    dists = compute_action_distributions(header, _mixed_commands(), fps=24.0)

    assert [dist.player_id for dist in dists] == [0, 1]
    assert dict(dists[1].counts) == {OpcodeCategory.TRAIN: 1}
    assert dists[1].macro_percentage == pytest.approx(100.0)
