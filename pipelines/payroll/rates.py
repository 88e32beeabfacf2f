"""
Rate Resolution.

Responsibilities:
- Turn per-category game counts into gross pay.
- Apply a referee's fixed per-game rate when one is configured.

Non-Responsibilities:
- No deductions.
- No validation of the rate table.

Invariant:
A category missing from the rate table pays 0; this never raises.
"""

import re
from typing import Dict, List, Mapping, Tuple

from refpay.models import RefereeSettings

_AGE_LABEL = re.compile(r"^(\d+)(u|uF)$")


def total_games(categories: Mapping[str, int]) -> int:
    return sum(categories.values())


def uses_fixed_rate(settings: RefereeSettings) -> bool:
    return bool(settings.has_fixed_rate and settings.fixed_rate > 0)


def category_gross(categories: Mapping[str, int], rates: Mapping[str, float]) -> float:
    return sum(count * rates.get(category, 0) for category, count in categories.items())


def resolve_gross_pay(
    categories: Mapping[str, int],
    rates: Mapping[str, float],
    settings: RefereeSettings,
) -> Tuple[float, bool]:
    """
    Returns:
        Tuple of (gross_pay, fixed_rate_applied)
    """
    if uses_fixed_rate(settings):
        return total_games(categories) * settings.fixed_rate, True
    return category_gross(categories, rates), False


def unrated_categories(categories: Mapping[str, int], rates: Mapping[str, float]) -> List[str]:
    """Categories with games but no configured rate, sorted."""
    return sorted(c for c, count in categories.items() if count and c not in rates)


_NAMED_RATES = [
    ("senior", 40.0),
    ("junior", 30.0),
    ("juvenil", 28.0),
    ("mini", 25.0),
    ("infantil", 20.0),
    ("femenino", 28.0),
]

_AGE_RATES = [
    (6, 8, 25.0),
    (9, 11, 27.0),
    (12, 14, 29.0),
    (15, 16, 30.0),
    (17, 19, 35.0),
]

_NAMED_ORDER = ["mini", "infantil", "juvenil", "junior", "femenino", "senior"]


def default_rate(category: str) -> float:
    """Suggested starting rate for a category; 0 when nothing applies."""
    lower = category.strip().lower()
    for keyword, rate in _NAMED_RATES:
        if keyword in lower:
            return rate

    match = re.search(r"\d+", category)
    if not match:
        return 0.0
    age = int(match.group())
    for low, high, rate in _AGE_RATES:
        if low <= age <= high:
            return rate
    if age >= 20:
        return 40.0
    return 0.0


def category_sort_key(category: str) -> float:
    """Age brackets ascending (girls' bracket right after), named divisions last."""
    lower = category.lower()
    for offset, keyword in enumerate(_NAMED_ORDER):
        if keyword in lower:
            return 100.0 + offset
    match = _AGE_LABEL.match(category)
    if not match:
        return 0.0
    age, suffix = match.groups()
    return int(age) + (0.5 if suffix == "uF" else 0.0)


def suggest_rates(categories) -> Dict[str, float]:
    return {c: default_rate(c) for c in sorted(categories, key=category_sort_key)}


def rate_breakdown(categories: Mapping[str, int], rates: Mapping[str, float]) -> Dict[str, float]:
    """Rates actually used for each category, for reporting."""
    return {category: rates.get(category, 0) for category in categories}
