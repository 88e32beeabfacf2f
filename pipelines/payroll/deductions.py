"""
Deduction Pipeline.

Responsibilities:
- Apply extra pay, admin fee, lifetime-aware hacienda tax, deposit fee and fines.

Non-Responsibilities:
- No ledger reads: prior lifetime earnings are passed in.
- No persistence.

Invariant:
Recomputing with the same input always yields the same result.
Net pay may be negative and is never clamped.

Stage order:
1. total earnings = gross + extra
2. admin fee = games * per-game fee, when the referee is charged
3. taxable = earnings above whatever remains of the lifetime exemption
4. hacienda tax = taxable * tax rate
5. deposit fee, flat per referee per batch
6. net = total - admin fee - tax - deposit - fines
"""

from refpay.models import (
    LIFETIME_TAX_EXEMPTION,
    PayrollCalculationInput,
    PayrollCalculationResult,
)

from .rates import resolve_gross_pay, total_games


def admin_fee(games: int, charged: bool, per_game: float) -> float:
    return games * per_game if charged else 0.0


def remaining_exemption(lifetime_earnings_before: float, exemption: float = LIFETIME_TAX_EXEMPTION) -> float:
    return max(0.0, exemption - lifetime_earnings_before)


def taxable_amount(total_earnings: float, lifetime_earnings_before: float) -> float:
    """The exemption is consumed batch by batch in processing order."""
    return max(0.0, total_earnings - remaining_exemption(lifetime_earnings_before))


def calculate_referee_payroll(data: PayrollCalculationInput) -> PayrollCalculationResult:
    games = total_games(data.categories)
    gross_pay, fixed_applied = resolve_gross_pay(data.categories, data.rates, data.referee_settings)

    total_earnings = gross_pay + data.extra_pay
    fee = admin_fee(games, data.referee_settings.has_admin_fee, data.global_settings.admin_fee_per_game)

    taxable = taxable_amount(total_earnings, data.lifetime_earnings_before)
    tax = taxable * data.global_settings.hacienda_tax_rate if taxable > 0 else 0.0
    deposit = data.global_settings.deposit_fee

    net_pay = total_earnings - fee - tax - deposit - data.fines

    return PayrollCalculationResult(
        games=games,
        gross_pay=gross_pay,
        extra_pay=data.extra_pay,
        fines=data.fines,
        total_earnings=total_earnings,
        admin_fee=fee,
        taxable_income=taxable,
        hacienda_tax=tax,
        deposit_fee=deposit,
        net_pay=net_pay,
        used_fixed_rate=fixed_applied,
        fixed_rate=data.referee_settings.fixed_rate if fixed_applied else None,
    )
