"""
Monthly payroll summaries built from saved batch history.

Batches are assigned to the month their date range starts in.
"""

import calendar
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from .models import PayrollBatchRecord

_MONTH = re.compile(r"^(\d{4})-(\d{2})")

UNDATED = "undated"

SUMMARY_FIELDS = ["gross_pay", "extra_pay", "admin_fee", "tax", "deposit", "net_pay", "games"]


def month_key(date_str: str) -> str:
    """'2024-01-15' -> '2024-01'. Batches without a usable start date share one bucket."""
    match = _MONTH.match(date_str or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        return UNDATED
    return f"{match.group(1)}-{match.group(2)}"


def month_label(key: str) -> str:
    """'2024-01' -> 'January 2024'."""
    if month_key(key) == UNDATED:
        return "Undated"
    year, month = int(key[:4]), int(key[5:7])
    return f"{calendar.month_name[month]} {year}"


@dataclass
class MonthlySummary:
    month: str
    month_label: str
    total_gross: float = 0.0
    total_extra: float = 0.0
    total_admin_fees: float = 0.0
    total_fines: float = 0.0
    total_tax: float = 0.0
    total_deposits: float = 0.0
    total_net: float = 0.0
    total_games: int = 0
    referee_count: int = 0
    batches: List[PayrollBatchRecord] = field(default_factory=list)


@dataclass
class RefereeMonthlySummary:
    employee_number: str
    referee_name: str
    months: Dict[str, Dict[str, float]] = field(default_factory=dict)
    totals: Dict[str, float] = field(default_factory=lambda: dict.fromkeys(SUMMARY_FIELDS, 0))


def monthly_summaries(history: Iterable[PayrollBatchRecord]) -> List[MonthlySummary]:
    """One summary per month, newest first."""
    by_month: Dict[str, MonthlySummary] = {}
    referees: Dict[str, Set[str]] = {}

    for batch in history:
        key = month_key(batch.date_range[0])
        summary = by_month.get(key)
        if summary is None:
            summary = by_month[key] = MonthlySummary(month=key, month_label=month_label(key))
            referees[key] = set()

        summary.total_gross += batch.totals.gross_pay
        summary.total_extra += batch.totals.total_extra_pay
        summary.total_admin_fees += batch.totals.total_admin_fees
        summary.total_fines += batch.totals.total_fines
        summary.total_tax += batch.totals.total_tax
        summary.total_deposits += batch.totals.total_deposit
        summary.total_net += batch.totals.net_pay
        summary.total_games += batch.totals.total_games
        referees[key].update(line.employee_number for line in batch.referees)
        summary.referee_count = len(referees[key])
        summary.batches.append(batch)

    return sorted(by_month.values(), key=lambda s: s.month, reverse=True)


def referee_monthly_summaries(history: Iterable[PayrollBatchRecord]) -> List[RefereeMonthlySummary]:
    """Per-referee month-by-month breakdown, sorted by referee name."""
    by_referee: Dict[str, RefereeMonthlySummary] = {}

    for batch in history:
        key = month_key(batch.date_range[0])
        for line in batch.referees:
            summary = by_referee.get(line.employee_number)
            if summary is None:
                summary = by_referee[line.employee_number] = RefereeMonthlySummary(
                    employee_number=line.employee_number,
                    referee_name=line.referee_name,
                )
            month = summary.months.setdefault(key, dict.fromkeys(SUMMARY_FIELDS, 0))
            values = {
                "gross_pay": line.gross_pay,
                "extra_pay": line.extra_pay,
                "admin_fee": line.admin_fee,
                "tax": line.hacienda_tax,
                "deposit": line.deposit_fee,
                "net_pay": line.net_pay,
                "games": line.games,
            }
            for name, value in values.items():
                month[name] += value
                summary.totals[name] += value

    return sorted(by_referee.values(), key=lambda s: s.referee_name)


def batches_in_month(history: Iterable[PayrollBatchRecord], key: str) -> List[PayrollBatchRecord]:
    return [b for b in history if month_key(b.date_range[0]) == key]
