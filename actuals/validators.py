"""
Data-quality checks for actual period entries before they are merged.

Nothing here raises: anomalies in recorded actuals are expected in sparse,
hand-entered data, so they are collected for the caller to show.

Rejected (the entry cannot be merged, reported as errors):
  - entries recorded in a different period unit than the forecast
  - periods outside the forecast horizon
Warnings (the entry is merged, or superseded):
  - more than one mergeable entry for the same period (last one wins)
  - revenue / cost keys that match no configured line
  - attendance recorded for a business without attendance
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from core.schema import SYNTHETIC_COST_LINES, ActualPeriodEntry, ForecastAssumptions


@dataclass
class ValidationResult:
    """Rejected entries (errors) and data-quality warnings for a set of actuals."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when every entry can be merged into the forecast."""
        return not self.errors

    def summary(self) -> str:
        sections = [
            ("REJECTED", "✗", self.errors),
            ("WARNINGS", "⚠", self.warnings),
        ]
        lines = []
        for title, mark, messages in sections:
            if messages:
                lines.append(f"{title} ({len(messages)}):")
                lines.extend(f"  {mark} {m}" for m in messages)
        return "\n".join(lines) if lines else "✓ All actual entries can be merged."


def duplicate_period_warnings(entries: Iterable[ActualPeriodEntry]) -> List[str]:
    counts = Counter(e.period for e in entries)
    return [
        f"Period {period} has {n} actual entries; using the last one recorded."
        for period, n in sorted(counts.items())
        if n > 1
    ]


def applicability_warning(
    entry: ActualPeriodEntry,
    period_unit: str,
    period_count: int,
) -> Optional[str]:
    """Reason ``entry`` cannot be merged into the forecast, or None."""
    if entry.period_unit != period_unit:
        return (
            f"Period {entry.period} was recorded per {entry.period_unit} but the forecast is "
            f"per {period_unit}; entry ignored."
        )
    if entry.period > period_count:
        return f"Period {entry.period} is beyond the {period_count}-period forecast; entry ignored."
    return None


def index_actuals(
    entries: Iterable[ActualPeriodEntry],
    *,
    period_unit: Optional[str],
    period_count: int,
) -> Tuple[Dict[int, ActualPeriodEntry], List[str], List[str]]:
    """
    Period -> entry lookup of the mergeable entries, last one wins.

    Returns
    -------
    (lookup, rejected, duplicates)
    rejected: reasons for entries that cannot be merged (unit or range)
    duplicates: warnings for periods with several mergeable entries
    """
    usable: List[ActualPeriodEntry] = []
    rejected: List[str] = []
    for e in entries:
        reason = applicability_warning(e, period_unit or e.period_unit, period_count)
        if reason:
            rejected.append(reason)
        else:
            usable.append(e)
    lookup = {e.period: e for e in usable}
    return lookup, rejected, duplicate_period_warnings(usable)


def line_warnings(
    entries: Iterable[ActualPeriodEntry],
    assumptions: ForecastAssumptions,
) -> List[str]:
    """Unknown revenue/cost keys and misplaced attendance, per entry."""
    warnings: List[str] = []
    stream_names = {s.name for s in assumptions.revenue_streams}
    cost_names = {c.name for c in assumptions.cost_categories} | set(SYNTHETIC_COST_LINES)

    for e in entries:
        unknown_rev = sorted(set(e.revenue_actuals) - stream_names)
        if unknown_rev:
            warnings.append(f"Period {e.period}: revenue actuals {unknown_rev} match no revenue stream.")
        unknown_cost = sorted(set(e.cost_actuals) - cost_names)
        if unknown_cost:
            warnings.append(f"Period {e.period}: cost actuals {unknown_cost} match no cost category.")
        if e.attendance_actual is not None and not assumptions.is_attendance_driven:
            warnings.append(
                f"Period {e.period}: attendance recorded for a business without attendance; ignored."
            )
    return warnings


def validate_actuals(
    entries: Iterable[ActualPeriodEntry],
    assumptions: ForecastAssumptions,
) -> ValidationResult:
    """
    Run all data-quality checks on ``entries`` against ``assumptions``.

    Entries that cannot be merged land in ``errors``; line checks only look
    at the entries that would actually be merged.
    """
    lookup, rejected, duplicates = index_actuals(
        entries, period_unit=assumptions.period_unit, period_count=assumptions.period_count
    )
    result = ValidationResult(errors=rejected)
    result.warnings.extend(duplicates)
    result.warnings.extend(line_warnings((lookup[p] for p in sorted(lookup)), assumptions))
    return result
