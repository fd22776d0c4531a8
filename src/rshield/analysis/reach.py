"""Estimated audience reach from a 0-100 search-interest index.

Reach is the interest index times a fixed calibration factor (people per
index point). A trend table for one keyword becomes an ObservedSeries with
days counted from the first date.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Sequence

from rshield.types.series import ObservedPoint, ObservedSeries

logger = logging.getLogger(__name__)

K_FACTOR = 5715


def estimate_reach(index_value: float, k_factor: float = K_FACTOR) -> int:
    """People reached for an interest index value."""
    return int(math.floor(index_value * k_factor + 0.5))


def _index_value(row: Mapping[str, Any], keyword: str) -> float:
    raw = row.get(keyword)
    try:
        return max(0.0, float(raw)) if raw is not None else 0.0
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric interest {raw!r} for {keyword!r} on {row.get('date')}")
        return 0.0


def observed_from_trend(
    rows: Sequence[Mapping[str, Any]],
    keyword: str,
    k_factor: float = K_FACTOR,
) -> ObservedSeries:
    """Convert trend rows ({"date": "YYYY-MM-DD", keyword: index}) to reach.

    Rows are ordered by date (ISO dates sort lexically); day 0 is the
    earliest date. Missing or negative values count as zero interest.
    """
    ordered = sorted(rows, key=lambda r: str(r.get("date", "")))
    points = [
        ObservedPoint(day=day, value=float(estimate_reach(_index_value(row, keyword), k_factor)))
        for day, row in enumerate(ordered)
    ]
    return ObservedSeries(points=points)
