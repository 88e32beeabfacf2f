"""
Core record types and policy constants.

These are plain in-memory snapshots. The core never reads or writes storage;
callers load snapshots from the repositories, pass them in, and persist
whatever comes back.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

CONFIDENCE_THRESHOLD = 60
SUGGESTION_FLOOR = 30
CONFIDENT_SUGGESTIONS = 5
REVIEW_SUGGESTIONS = 8

ADMIN_FEE_PER_GAME = 2.0
LIFETIME_TAX_EXEMPTION = 500.0

# Referees that do NOT pay the admin fee unless explicitly toggled on.
ADMIN_FEE_EXEMPT = frozenset({
    "346",
    "1421",
    "1865",
    "2594",
    "5192",
    "5379",
    "6222",
    "9475",
    "4073",
    "2455",
    "4006",
})


@dataclass(frozen=True)
class RefereeRecord:
    employee_number: str
    full_name: str

    @property
    def display_name(self) -> str:
        return f"{self.full_name} ({self.employee_number})"


@dataclass
class ScheduleEntry:
    """A raw schedule name with its per-category game counts."""

    name: str
    categories: Dict[str, int] = field(default_factory=dict)

    @property
    def games(self) -> int:
        return sum(self.categories.values())


@dataclass
class MatchMapping:
    """A confirmed schedule name -> referee link."""

    schedule_name: str
    employee_number: str
    confirmed_at: float
    date_processed: str = ""
    is_manual: bool = False


@dataclass(frozen=True)
class MatchSuggestion:
    referee: RefereeRecord
    confidence: int


@dataclass
class MatchResult:
    schedule_name: str
    matched_referee: Optional[RefereeRecord]
    confidence: int
    is_from_storage: bool = False
    suggestions: List[MatchSuggestion] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        """Low-confidence or unresolved results are flagged for a human."""
        return self.matched_referee is None or self.confidence < CONFIDENCE_THRESHOLD


@dataclass
class RefereeSettings:
    employee_number: str
    has_fixed_rate: bool = False
    fixed_rate: float = 0.0
    has_admin_fee: bool = True


@dataclass
class GlobalSettings:
    hacienda_tax_rate: float = 0.10
    deposit_fee: float = 1.00
    admin_fee_per_game: float = ADMIN_FEE_PER_GAME


@dataclass
class PayrollCalculationInput:
    employee_number: str
    referee_name: str
    schedule_name: str
    categories: Dict[str, int]
    rates: Dict[str, float]
    global_settings: GlobalSettings
    referee_settings: RefereeSettings
    extra_pay: float = 0.0
    fines: float = 0.0
    lifetime_earnings_before: float = 0.0


@dataclass
class PayrollCalculationResult:
    games: int
    gross_pay: float
    extra_pay: float
    fines: float
    total_earnings: float
    admin_fee: float
    taxable_income: float
    hacienda_tax: float
    deposit_fee: float
    net_pay: float
    used_fixed_rate: bool
    fixed_rate: Optional[float] = None


@dataclass
class PayrollRefereeRecord:
    """Per-referee line of a saved batch."""

    employee_number: str
    referee_name: str
    schedule_name: str
    games: int
    gross_pay: float
    extra_pay: float
    admin_fee: float
    fines: float
    taxable_income: float
    hacienda_tax: float
    deposit_fee: float
    net_pay: float
    used_fixed_rate: bool
    fixed_rate: Optional[float] = None
    categories: Dict[str, int] = field(default_factory=dict)
    category_rates: Dict[str, float] = field(default_factory=dict)

    @property
    def total_earnings(self) -> float:
        return self.gross_pay + self.extra_pay


@dataclass
class BatchTotals:
    gross_pay: float = 0.0
    total_extra_pay: float = 0.0
    total_admin_fees: float = 0.0
    total_fines: float = 0.0
    total_tax: float = 0.0
    total_deposit: float = 0.0
    net_pay: float = 0.0
    total_games: int = 0


@dataclass
class PayrollBatchRecord:
    id: str
    timestamp: float
    date_range: Tuple[str, str]
    referees: List[PayrollRefereeRecord] = field(default_factory=list)
    totals: BatchTotals = field(default_factory=BatchTotals)
    files: List[str] = field(default_factory=list)
    name: Optional[str] = None


# Seed registry loaded by `scripts/import_registry.py --seed-defaults`.
DEFAULT_REFEREE_REGISTRY = [
    RefereeRecord("346", "PAMELA L PEREZ MENDEZ"),
    RefereeRecord("442", "JOEL F MADERA"),
    RefereeRecord("1421", "JOEL SANCHEZ"),
    RefereeRecord("1865", "JUAN M MELENDEZ"),
    RefereeRecord("2073", "LUIS JAVIER FIGUEROA"),
    RefereeRecord("2410", "ISMAEL BENITEZ"),
    RefereeRecord("2594", "CARMELO DE LA ROSA"),
    RefereeRecord("2788", "WILLREY CARMONA SANTIAGO"),
    RefereeRecord("2906", "TURIANO MALDONADO"),
    RefereeRecord("2953", "JOSE R RIVERA BENITEZ"),
    RefereeRecord("3610", "GABRIEL R RODRIGUEZ"),
    RefereeRecord("3804", "HECTOR M LANDRAU"),
    RefereeRecord("4169", "LUIS A MELENDEZ"),
    RefereeRecord("5192", "RAFAEL QUIÑONES"),
    RefereeRecord("5234", "HECTOR R LOPEZ"),
    RefereeRecord("5379", "LUIS JOEL CURBELO MELENDEZ"),
    RefereeRecord("5486", "ANDRES ORTIZ"),
    RefereeRecord("6222", "HUGO MANUEL TEJEDA-DE LA ROSA"),
    RefereeRecord("6476", "VILMARIE MORALES"),
    RefereeRecord("6833", "RAMON E FALU"),
    RefereeRecord("9230", "SAMUEL NIEVES"),
    RefereeRecord("9475", "AXEL COLL"),
    RefereeRecord("9791", "JONATHAN A HERNANDEZ"),
    RefereeRecord("O602", "CESAR O. QUIÑOENES"),
    RefereeRecord("5025", "EDWIN X MILLET"),
    RefereeRecord("4073", "GLORYVEE PEREZ"),
    RefereeRecord("4697", "LUIS GOMEZ"),
    RefereeRecord("3008", "JOSE QUIÑONES"),
    RefereeRecord("2325", "CARLOS A. CARRERO"),
    RefereeRecord("2455", "JOHNNY BATISTA"),
    RefereeRecord("8347", "EDWIN PIZARRO"),
    RefereeRecord("4006", "WILLIAM FIGUEROA"),
    RefereeRecord("3474", "JOEL A. CRUZ"),
    RefereeRecord("3792", "ANGEL M. RIVERA"),
    RefereeRecord("O629", "AMANDA PEREZ"),
    RefereeRecord("2845", "ALEXIS MERCADO"),
    RefereeRecord("7669", "CARMEN SANTIAGO"),
    RefereeRecord("9800", "ZERIMAR MERCADO"),
    RefereeRecord("9801", "PEPE MILAN"),
    RefereeRecord("9802", "ROBERTO RAMIREZ"),
]

# Standing per-batch extra pay, applied unless the batch sets its own amount.
DEFAULT_EXTRA_PAY = {
    "2594": 175.0,
}
