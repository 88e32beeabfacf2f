"""
Per-referee and global payroll settings derivation.

Stored settings always win. A referee without stored settings pays the admin
fee unless their employee number is on the static exemption list.
"""

from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Tuple

from .models import ADMIN_FEE_EXEMPT, ADMIN_FEE_PER_GAME, GlobalSettings, RefereeRecord, RefereeSettings


def is_admin_fee_exempt(employee_number: str) -> bool:
    return employee_number in ADMIN_FEE_EXEMPT


def default_referee_settings(employee_number: str) -> RefereeSettings:
    return RefereeSettings(
        employee_number=employee_number,
        has_fixed_rate=False,
        fixed_rate=0.0,
        has_admin_fee=not is_admin_fee_exempt(employee_number),
    )


def get_referee_settings(stored: Mapping[str, RefereeSettings], employee_number: str) -> RefereeSettings:
    existing = stored.get(employee_number)
    if existing is None:
        return default_referee_settings(employee_number)
    return existing


def initialize_default_settings(
    registry: Iterable[RefereeRecord],
    stored: Mapping[str, RefereeSettings],
) -> Tuple[Dict[str, RefereeSettings], List[RefereeSettings]]:
    """
    Fill in defaults for every registry entry without stored settings.

    Returns:
        Tuple of (complete settings map, newly created settings to persist)
    """
    merged = dict(stored)
    created = []
    for referee in registry:
        if referee.employee_number not in merged:
            settings = default_referee_settings(referee.employee_number)
            merged[referee.employee_number] = settings
            created.append(settings)
    return merged, created


def enforce_policy(settings: GlobalSettings) -> GlobalSettings:
    """The per-game admin fee is fixed by policy and cannot be edited."""
    if settings.admin_fee_per_game == ADMIN_FEE_PER_GAME:
        return settings
    return replace(settings, admin_fee_per_game=ADMIN_FEE_PER_GAME)
