"""
Weekly load calculation.

Every entry in a schedule index is either a theory class or a lab. Labs are
recognized by subject name: the whole word "lab" or "laboratory", any case.
Theory classes count as 1 and labs as 0.5 towards the weekly load.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from faculty_routine.data.models import EntryKind, LoadSummary
from .index_builder import ScheduleIndex

THEORY_WEIGHT = 1.0
LAB_WEIGHT = 0.5

LAB_PATTERN = re.compile(r"\blab\b|\blaboratory\b", re.IGNORECASE)


def round_half_up(value: float, places: int = 2) -> float:
    """Round like a person would: 0.125 -> 0.13, not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def classify_subject(subject: str) -> EntryKind:
    """Classify a subject name as lab or theory."""
    return EntryKind.LAB if LAB_PATTERN.search(subject or "") else EntryKind.THEORY


def is_lab(subject: str) -> bool:
    return classify_subject(subject) is EntryKind.LAB


class LoadCalculator:
    """Computes a LoadSummary from a schedule index."""

    def __init__(self, theory_weight: float = THEORY_WEIGHT, lab_weight: float = LAB_WEIGHT):
        if theory_weight < 0 or lab_weight < 0:
            raise ValueError("Load weights must not be negative")
        self.theory_weight = theory_weight
        self.lab_weight = lab_weight

    def compute(self, index: ScheduleIndex) -> LoadSummary:
        """
        Count theory and lab entries and weigh them.

        Pure: the same index always gives the same summary, whatever the
        iteration order.
        """
        theory_count = 0
        lab_count = 0

        for _day, _period, entry in index.entries():
            if classify_subject(entry.subject) is EntryKind.LAB:
                lab_count += 1
            else:
                theory_count += 1

        total = theory_count * self.theory_weight + lab_count * self.lab_weight
        return LoadSummary(
            theory_count=theory_count,
            lab_count=lab_count,
            total_load=round_half_up(total),
        )

    def lab_load(self, summary: LoadSummary) -> float:
        """Load contributed by labs alone."""
        return round_half_up(summary.lab_count * self.lab_weight)


def compute_load(index: ScheduleIndex) -> LoadSummary:
    """Compute the load summary with the default weights."""
    return LoadCalculator().compute(index)


# =============================================================================
# Limit Comparison
# =============================================================================

def exceeds_limit(total_load: float, limit: Optional[float]) -> bool:
    """True only when a limit is set and the load is strictly above it."""
    return limit is not None and total_load > limit


def limit_overage(total_load: float, limit: Optional[float]) -> Optional[float]:
    """How far the load is above the limit, or None when it is not above."""
    if not exceeds_limit(total_load, limit):
        return None
    return round_half_up(total_load - limit)


def format_load(value: Optional[float]) -> str:
    """Display a load value: '-' when absent, no decimals when whole."""
    if value is None:
        return "-"
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"
