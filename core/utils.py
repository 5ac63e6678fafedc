from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional

import numpy as np
from dateutil.relativedelta import relativedelta


def round_half_up(x, decimals: int = 0):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def round_to_int(x: float) -> int:
    return int(round_half_up(x, 0))


def safe_pct(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator × 100, or None when the denominator is zero."""
    if denominator == 0:
        return None
    return numerator / denominator * 100.0


def margin_pct(profit: float, revenue: float) -> float:
    """Profit margin in percent; defined as 0 when revenue is 0."""
    if revenue == 0:
        return 0.0
    return profit / revenue * 100.0


def snap_to_zero(value: float, epsilon: float) -> float:
    return 0.0 if abs(value) < epsilon else value


def period_label(period_unit: str, period: int) -> str:
    return f"{period_unit} {period}"


def period_start_dates(start_date: dt.date, period_unit: str, n_periods: int) -> List[dt.date]:
    """Start date of each projection period, period 1 first."""
    if period_unit == "Week":
        return [start_date + dt.timedelta(weeks=k) for k in range(n_periods)]
    return [start_date + relativedelta(months=k) for k in range(n_periods)]


def duplicated(values: Iterable) -> List:
    """Values that occur more than once, in first-seen order."""
    seen = set()
    dups = []
    for v in values:
        if v in seen and v not in dups:
            dups.append(v)
        seen.add(v)
    return dups
