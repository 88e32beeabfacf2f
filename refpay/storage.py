import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from .errors import InvalidDocumentError
from .models import RefereeRecord, ScheduleEntry
from .normalize import normalize_category_counts, normalize_category_label
from .schema import validate_amounts, validate_rates, validate_registry, validate_tally


def load_json(path: Path) -> Any:
    if not path.exists():
        raise InvalidDocumentError(str(path), ["file not found"])
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise InvalidDocumentError(str(path), [str(e)]) from e


def _load_valid(path: Path, validator: Callable[[Any], List[str]]) -> Any:
    data = load_json(path)
    errors = validator(data)
    if errors:
        raise InvalidDocumentError(str(path), errors)
    return data


def load_tally(path: Path) -> Tuple[List[ScheduleEntry], Tuple[str, str], List[str]]:
    """
    Load a parsed schedule tally.

    Returns:
        Tuple of (entries, (start, end) date range, source file names).
        Entries sharing a schedule name are merged.
    """
    data = _load_valid(path, validate_tally)
    merged: Dict[str, ScheduleEntry] = {}
    for raw in data["entries"]:
        categories = normalize_category_counts(raw["categories"])
        entry = merged.get(raw["name"])
        if entry is None:
            merged[raw["name"]] = ScheduleEntry(name=raw["name"], categories=categories)
            continue
        for category, count in categories.items():
            entry.categories[category] = entry.categories.get(category, 0) + count

    date_range = data.get("date_range") or {}
    return list(merged.values()), (date_range.get("start", ""), date_range.get("end", "")), data.get("files", [])


def load_rates(path: Path) -> Dict[str, float]:
    data = _load_valid(path, validate_rates)
    return {normalize_category_label(category): float(rate) for category, rate in data.items()}


def load_amounts(path: Path, label: str) -> Dict[str, float]:
    data = _load_valid(path, lambda d: validate_amounts(d, label))
    return {str(emp): float(amount) for emp, amount in data.items()}


def load_registry(path: Path) -> List[RefereeRecord]:
    data = _load_valid(path, validate_registry)
    return [RefereeRecord(employee_number=r["employee_number"].strip(), full_name=r["full_name"].strip()) for r in data]


def diff_dict(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    keys = set(old.keys()) | set(new.keys())
    for k in keys:
        ov = old.get(k)
        nv = new.get(k)
        if ov != nv:
            changed[k] = {"old": ov, "new": nv}
    return changed
