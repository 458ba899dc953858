from __future__ import annotations
from typing import List

from .telemetry import SessionLog


def _quantile(values: List[float], q: float) -> float:
    """Linear-interpolated quantile (0..1)."""
    if not values:
        return 0.0
    q = min(1.0, max(0.0, float(q)))
    data = sorted(values)
    idx = q * (len(data) - 1)
    lo = int(idx)
    hi = min(lo + 1, len(data) - 1)
    frac = idx - lo
    return data[lo] * (1 - frac) + data[hi] * frac


def summarize_marks(log: SessionLog) -> str:
    """Summarize the horizontal eccentricity at which diplopia was marked.

    Reports count, min, median, average and max in degrees, plus how many
    marks fell left/right of center.
    """
    if not log.entries:
        return "No diplopia marks"
    eccentricities = [entry.ecc_deg_x for entry in log.entries]
    left = sum(1 for entry in log.entries if entry.norm_x < 0)
    right = len(log.entries) - left
    average = sum(eccentricities) / len(eccentricities)
    return (
        f"diplopia ecc deg: min={min(eccentricities):.1f}, "
        f"p50={_quantile(eccentricities, 0.5):.1f}, avg={average:.1f}, "
        f"max={max(eccentricities):.1f}, marks={len(eccentricities)} "
        f"(left={left}, right={right})"
    )
