"""
Settings Repository.

Responsibilities:
- Read and write global settings, per-referee settings and category rates.

Non-Responsibilities:
- No default derivation beyond returning nothing for a missing row.

Invariant:
Global settings are a single row; saving always enforces the fixed admin fee.
"""

from dataclasses import asdict
from typing import Dict, Iterable, Mapping

from refpay.database import CategoryRate, GlobalSettingsRow, RefereeSettingsRow
from refpay.models import GlobalSettings, RefereeSettings
from refpay.settings import enforce_policy
from refpay.storage import diff_dict

GLOBAL_ROW_ID = 1


def _to_settings(row: RefereeSettingsRow) -> RefereeSettings:
    return RefereeSettings(
        employee_number=row.employee_number,
        has_fixed_rate=row.has_fixed_rate,
        fixed_rate=row.fixed_rate,
        has_admin_fee=row.has_admin_fee,
    )


class SettingsRepository:
    def __init__(self, session):
        self.session = session

    # Global

    def get_global(self) -> GlobalSettings:
        row = self.session.get(GlobalSettingsRow, GLOBAL_ROW_ID)
        if row is None:
            return GlobalSettings()
        return enforce_policy(
            GlobalSettings(
                hacienda_tax_rate=row.hacienda_tax_rate,
                deposit_fee=row.deposit_fee,
                admin_fee_per_game=row.admin_fee_per_game,
            )
        )

    def save_global(self, settings: GlobalSettings) -> Dict[str, Dict]:
        """Returns the changed fields as {field: {"old", "new"}}."""
        before = asdict(self.get_global())
        settings = enforce_policy(settings)
        row = self.session.get(GlobalSettingsRow, GLOBAL_ROW_ID)
        if row is None:
            row = GlobalSettingsRow(id=GLOBAL_ROW_ID)
            self.session.add(row)
        row.hacienda_tax_rate = settings.hacienda_tax_rate
        row.deposit_fee = settings.deposit_fee
        row.admin_fee_per_game = settings.admin_fee_per_game
        self.session.commit()
        return diff_dict(before, asdict(settings))

    # Per referee

    def referee_settings(self) -> Dict[str, RefereeSettings]:
        rows = self.session.query(RefereeSettingsRow).all()
        return {r.employee_number: _to_settings(r) for r in rows}

    def save_referee(self, settings: RefereeSettings) -> None:
        self.save_referees([settings])

    def save_referees(self, settings: Iterable[RefereeSettings]) -> int:
        saved = 0
        for item in settings:
            row = self.session.get(RefereeSettingsRow, item.employee_number)
            if row is None:
                row = RefereeSettingsRow(employee_number=item.employee_number)
                self.session.add(row)
            row.has_fixed_rate = item.has_fixed_rate
            row.fixed_rate = item.fixed_rate
            row.has_admin_fee = item.has_admin_fee
            saved += 1
        self.session.commit()
        return saved

    # Category rates

    def rates(self) -> Dict[str, float]:
        return {r.category: r.rate for r in self.session.query(CategoryRate).order_by(CategoryRate.category).all()}

    def save_rates(self, rates: Mapping[str, float]) -> Dict[str, Dict]:
        before = self.rates()
        for category, rate in rates.items():
            row = self.session.get(CategoryRate, category)
            if row is None:
                self.session.add(CategoryRate(category=category, rate=float(rate)))
            else:
                row.rate = float(rate)
        self.session.commit()
        return diff_dict({c: before[c] for c in rates if c in before}, {c: float(r) for c, r in rates.items()})
