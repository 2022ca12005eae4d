# src/internship_compliance/compliance.py
"""
Two-factor institution compliance score.

Every dashboard that shows a compliance score (state, principal, faculty) goes
through `compute_compliance`. Report and visit cadence are not inputs.
"""

from __future__ import annotations

import math
from typing import Optional

from .config import DEFAULT_CONFIG, CycleConfig
from .models import ComplianceInput, ComplianceResult, ComplianceTier


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def capped_rate(numerator: int, denominator: int) -> Optional[int]:
    """Percentage capped at 100 and rounded; None when the denominator is zero."""
    if denominator <= 0:
        return None
    return round_half_up(min(numerator / denominator * 100, 100))


def classify_tier(score: Optional[int], cfg: CycleConfig = DEFAULT_CONFIG) -> Optional[ComplianceTier]:
    if score is None:
        return None
    if score >= cfg.excellent_min:
        return ComplianceTier.EXCELLENT
    elif score >= cfg.good_min:
        return ComplianceTier.GOOD
    elif score >= cfg.warning_min:
        return ComplianceTier.WARNING
    elif score >= cfg.critical_min:
        return ComplianceTier.CRITICAL
    else:
        return ComplianceTier.INTERVENTION_REQUIRED


def compute_compliance(
    snapshot: ComplianceInput, cfg: CycleConfig = DEFAULT_CONFIG
) -> ComplianceResult:
    active = snapshot.active_student_count
    mentor_rate = capped_rate(snapshot.students_with_active_mentor, active)
    joining_letter_rate = capped_rate(snapshot.students_with_joining_letter_uploaded, active)

    # both factors or nothing; no partial average
    if mentor_rate is None or joining_letter_rate is None:
        score = None
    else:
        score = round_half_up((mentor_rate + joining_letter_rate) / 2)

    return ComplianceResult(
        mentor_rate=mentor_rate,
        joining_letter_rate=joining_letter_rate,
        score=score,
        tier=classify_tier(score, cfg),
    )
