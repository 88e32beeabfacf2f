"""
Pytest configuration and shared fixtures.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Keep log files out of the working tree; modules create their logger on import
os.environ.setdefault("REFPAY_LOG_DIR", tempfile.mkdtemp(prefix="refpay-logs-"))

from refpay.database import init_database, get_session  # noqa: E402
from refpay.models import GlobalSettings, RefereeRecord, RefereeSettings  # noqa: E402


@pytest.fixture
def registry() -> List[RefereeRecord]:
    """Small registry with a mix of surname-first and accented names."""
    return [
        RefereeRecord("001", "JOHN SMITH"),
        RefereeRecord("002", "JANE DOE"),
        RefereeRecord("003", "RAFAEL QUIÑONES"),
        RefereeRecord("004", "ANA MARIA PEREZ"),
        RefereeRecord("005", "JUAN M MELENDEZ"),
        RefereeRecord("006", "CARMELO DE LA ROSA"),
    ]


@pytest.fixture
def global_settings() -> GlobalSettings:
    return GlobalSettings(hacienda_tax_rate=0.10, deposit_fee=1.00, admin_fee_per_game=2.0)


@pytest.fixture
def charged_settings() -> RefereeSettings:
    """A referee who pays the admin fee and uses category rates."""
    return RefereeSettings(employee_number="001", has_fixed_rate=False, fixed_rate=0.0, has_admin_fee=True)


@pytest.fixture
def rates() -> Dict[str, float]:
    return {"12u": 29.0, "14uF": 29.0, "Senior": 40.0, "Mini": 25.0}


@pytest.fixture
def tally_data() -> Dict[str, Any]:
    """Parsed schedule tally document."""
    return {
        "date_range": {"start": "2024-01-06", "end": "2024-01-13"},
        "files": ["week1.xlsx"],
        "entries": [
            {"name": "Smith, John", "categories": {"12": 2, "Senior": 1}},
            {"name": "Doe Jane", "categories": {"14UF": 3}},
            {"name": "Smith, John", "categories": {"12u": 1}},
        ],
    }


@pytest.fixture
def tally_file(tmp_path, tally_data) -> Path:
    """Write the sample tally to a temporary JSON file."""
    path = tmp_path / "tally.json"
    path.write_text(json.dumps(tally_data), encoding="utf-8")
    return path


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Initialized empty database."""
    path = tmp_path / "refpay.db"
    init_database(path)
    return path


@pytest.fixture
def session(db_path):
    """Open session on the temporary database."""
    session = get_session(db_path)
    yield session
    session.close()
