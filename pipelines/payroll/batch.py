"""
Payroll Batch Assembly.

Responsibilities:
- Group resolved schedule entries per referee.
- Run the deduction pipeline for each referee.
- Aggregate batch totals and check them against the per-referee lines.

Non-Responsibilities:
- No identity resolution.
- No persistence: the caller saves the returned batch.

Invariant:
Batch totals equal the sum of the per-referee lines.
"""

import time
from dataclasses import fields
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from refpay.logger import get_logger
from refpay.models import (
    DEFAULT_EXTRA_PAY,
    BatchTotals,
    GlobalSettings,
    PayrollBatchRecord,
    PayrollCalculationInput,
    PayrollRefereeRecord,
    RefereeRecord,
    RefereeSettings,
    ScheduleEntry,
)
from refpay.settings import get_referee_settings

from .deductions import calculate_referee_payroll
from .rates import rate_breakdown, unrated_categories

logger = get_logger()

TOTALS_TOLERANCE = 0.01

# BatchTotals field -> PayrollRefereeRecord field
TOTAL_FIELDS = {
    "gross_pay": "gross_pay",
    "total_extra_pay": "extra_pay",
    "total_admin_fees": "admin_fee",
    "total_fines": "fines",
    "total_tax": "hacienda_tax",
    "total_deposit": "deposit_fee",
    "net_pay": "net_pay",
    "total_games": "games",
}

Assignment = Tuple[ScheduleEntry, Optional[RefereeRecord]]


def _group_assignments(assignments: Sequence[Assignment]) -> Dict[str, dict]:
    """Merge every schedule name that resolved to the same referee."""
    groups: Dict[str, dict] = {}
    for entry, referee in assignments:
        # Unresolved names are paid under their schedule name
        key = referee.employee_number if referee is not None else entry.name
        group = groups.get(key)
        if group is None:
            groups[key] = {
                "referee_name": referee.full_name if referee is not None else entry.name,
                "schedule_names": [entry.name],
                "categories": dict(entry.categories),
            }
            continue
        if entry.name not in group["schedule_names"]:
            group["schedule_names"].append(entry.name)
        for category, count in entry.categories.items():
            group["categories"][category] = group["categories"].get(category, 0) + count
    return groups


def compute_batch(
    assignments: Sequence[Assignment],
    rates: Mapping[str, float],
    global_settings: GlobalSettings,
    referee_settings: Mapping[str, RefereeSettings],
    lifetime_before: Mapping[str, float],
    extra_pay: Optional[Mapping[str, float]] = None,
    fines: Optional[Mapping[str, float]] = None,
) -> List[PayrollRefereeRecord]:
    """
    Compute one payroll line per referee.

    Args:
        assignments: (schedule entry, resolved referee or None) pairs
        rates: Category -> per-game rate
        global_settings: Tax rate, deposit fee and admin fee policy
        referee_settings: Stored per-referee settings (defaults derived when absent)
        lifetime_before: Prior lifetime gross + extra per employee number
        extra_pay: Extra pay for this batch by employee number
        fines: Fines for this batch by employee number

    Returns:
        Lines sorted by referee name
    """
    extra_pay = extra_pay or {}
    fines = fines or {}
    records = []

    for key, group in _group_assignments(assignments).items():
        categories = group["categories"]
        missing = unrated_categories(categories, rates)
        if missing:
            logger.warning("Categories without a configured rate pay 0", employee_number=key, categories=missing)

        settings = get_referee_settings(referee_settings, key)
        result = calculate_referee_payroll(
            PayrollCalculationInput(
                employee_number=key,
                referee_name=group["referee_name"],
                schedule_name=" / ".join(group["schedule_names"]),
                categories=categories,
                rates=dict(rates),
                global_settings=global_settings,
                referee_settings=settings,
                extra_pay=extra_pay.get(key, DEFAULT_EXTRA_PAY.get(key, 0.0)),
                fines=fines.get(key, 0.0),
                lifetime_earnings_before=lifetime_before.get(key, 0.0),
            )
        )
        records.append(
            PayrollRefereeRecord(
                employee_number=key,
                referee_name=group["referee_name"],
                schedule_name=" / ".join(group["schedule_names"]),
                games=result.games,
                gross_pay=result.gross_pay,
                extra_pay=result.extra_pay,
                admin_fee=result.admin_fee,
                fines=result.fines,
                taxable_income=result.taxable_income,
                hacienda_tax=result.hacienda_tax,
                deposit_fee=result.deposit_fee,
                net_pay=result.net_pay,
                used_fixed_rate=result.used_fixed_rate,
                fixed_rate=result.fixed_rate,
                categories=dict(categories),
                category_rates=rate_breakdown(categories, rates),
            )
        )

    logger.record_payroll(len(records))
    return sorted(records, key=lambda r: r.referee_name)


def compute_totals(records: Sequence[PayrollRefereeRecord]) -> BatchTotals:
    totals = BatchTotals()
    for record in records:
        for total_field, line_field in TOTAL_FIELDS.items():
            setattr(totals, total_field, getattr(totals, total_field) + getattr(record, line_field))
    return totals


def build_batch_record(
    records: Sequence[PayrollRefereeRecord],
    date_range: Tuple[str, str],
    batch_id: Optional[str] = None,
    name: Optional[str] = None,
    files: Optional[List[str]] = None,
    timestamp: Optional[float] = None,
) -> PayrollBatchRecord:
    timestamp = time.time() if timestamp is None else timestamp
    return PayrollBatchRecord(
        id=batch_id or f"batch_{int(timestamp * 1000)}",
        timestamp=timestamp,
        date_range=date_range,
        referees=list(records),
        totals=compute_totals(records),
        files=list(files or []),
        name=name,
    )


def verify_totals(batch: PayrollBatchRecord, tolerance: float = TOTALS_TOLERANCE) -> List[str]:
    """Names of total fields that disagree with the per-referee lines."""
    expected = compute_totals(batch.referees)
    return [
        f.name
        for f in fields(BatchTotals)
        if abs(getattr(batch.totals, f.name) - getattr(expected, f.name)) > tolerance
    ]
