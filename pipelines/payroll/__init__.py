from .batch import build_batch_record, compute_batch, compute_totals, verify_totals
from .deductions import calculate_referee_payroll
from .ledger import lifetime_earnings_before
from .rates import resolve_gross_pay

__all__ = [
    "build_batch_record",
    "calculate_referee_payroll",
    "compute_batch",
    "compute_totals",
    "lifetime_earnings_before",
    "resolve_gross_pay",
    "verify_totals",
]
