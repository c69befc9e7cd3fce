from __future__ import annotations

from .actions import action_distribution, compute_action_distributions
from .build_order import compute_build_order, compute_build_orders, infer_player_races, infer_race_from_build_order
from .metrics import (
    VolumeAssessment,
    assess_command_volume,
    compute_player_metrics,
    fps_for_format,
    frames_to_timestamp,
    game_minutes,
)
from .units import UNITS, UnitInfo, unit_name

__all__ = [
    "UNITS",
    "UnitInfo",
    "VolumeAssessment",
    "action_distribution",
    "assess_command_volume",
    "compute_action_distributions",
    "compute_build_order",
    "compute_build_orders",
    "compute_player_metrics",
    "fps_for_format",
    "frames_to_timestamp",
    "game_minutes",
    "infer_player_races",
    "infer_race_from_build_order",
    "unit_name",
]
