from __future__ import annotations

from typing import Final
import warnings

from .errors import QualityIssue
from .types import CommandVolume, ReplayAnalysis, StreamTermination

# Multiplied into the format detection confidence for each recorded issue.
ISSUE_PENALTIES: Final[dict[QualityIssue, float]] = {
    QualityIssue.COMMAND_STREAM_EMPTY: 0.3,
    QualityIssue.OFFSET_RECOVERY_FAILED: 0.5,
    QualityIssue.DECOMPRESSION_FALLBACK: 0.5,
    QualityIssue.FRAME_COUNT_ESTIMATED: 0.8,
    QualityIssue.COMMAND_STREAM_TRUNCATED: 0.9,
    QualityIssue.COMMAND_CAP_REACHED: 0.7,
}
VOLUME_PENALTIES: Final[dict[CommandVolume, float]] = {
    CommandVolume.REALISTIC: 1.0,
    CommandVolume.SUSPICIOUS: 0.7,
    CommandVolume.INSUFFICIENT: 0.7,
}


class ReplayQualityWarning(UserWarning):
    """Warnings for replays decoded with reduced confidence."""


def collect_issues(
    *,
    command_count: int,
    offset_recovered: bool,
    decompression_fallback: bool,
    frame_count_estimated: bool,
    termination: StreamTermination,
) -> tuple[QualityIssue, ...]:
    issues: list[QualityIssue] = []
    if decompression_fallback:
        issues.append(QualityIssue.DECOMPRESSION_FALLBACK)
    if frame_count_estimated:
        issues.append(QualityIssue.FRAME_COUNT_ESTIMATED)
    if not offset_recovered:
        issues.append(QualityIssue.OFFSET_RECOVERY_FAILED)
    if command_count == 0:
        issues.append(QualityIssue.COMMAND_STREAM_EMPTY)
    if termination == StreamTermination.TRUNCATED_COMMAND:
        issues.append(QualityIssue.COMMAND_STREAM_TRUNCATED)
    elif termination == StreamTermination.COMMAND_CAP:
        issues.append(QualityIssue.COMMAND_CAP_REACHED)
    return tuple(issues)


def confidence_score(
    format_confidence: float,
    issues: tuple[QualityIssue, ...],
    volume: CommandVolume,
) -> float:
    score = float(format_confidence)
    for issue in issues:
        score *= ISSUE_PENALTIES[issue]
    score *= VOLUME_PENALTIES[volume]
    return round(max(0.0, min(1.0, score)), 4)


def warn_on_low_confidence(analysis: ReplayAnalysis, *, action: str = "analysis") -> bool:
    """Warn if `analysis` was decoded with low confidence.

    Returns True if a warning was emitted.
    """

    quality = analysis.quality
    if not quality.low_confidence:
        return False
    issues = ", ".join(issue.value for issue in quality.issues) or quality.command_volume.value
    warnings.warn(
        f"Replay decoded with low confidence ({quality.confidence:.2f}); {action} may be unreliable ({issues}).",
        category=ReplayQualityWarning,
        stacklevel=2,
    )
    return True
