from numbers import Number
from typing import Any, Dict, List

REQUIRED_TALLY_FIELDS = ["entries"]
REQUIRED_ENTRY_FIELDS = ["name", "categories"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_amount(v: Any) -> bool:
    return isinstance(v, Number) and not isinstance(v, bool)


def validate_tally(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    A tally is the already-parsed schedule: names with per-category game counts.
    """
    if not isinstance(data, dict):
        return ["Tally document must be a JSON object"]

    errors: List[str] = []
    for f in REQUIRED_TALLY_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")

    date_range = data.get("date_range")
    if date_range is not None:
        if not isinstance(date_range, dict):
            errors.append("Field 'date_range' must be an object with 'start' and 'end'")
        else:
            for key in ("start", "end"):
                if key in date_range and not isinstance(date_range[key], str):
                    errors.append(f"Field 'date_range.{key}' must be a string")

    files = data.get("files")
    if files is not None and not (isinstance(files, list) and all(isinstance(f, str) for f in files)):
        errors.append("Field 'files' must be a list of strings")

    entries = data.get("entries")
    if entries is None:
        return errors
    if not isinstance(entries, list):
        errors.append("Field 'entries' must be a list")
        return errors

    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            errors.append(f"Entry {i} must be an object")
            continue
        for f in REQUIRED_ENTRY_FIELDS:
            if f not in entry:
                errors.append(f"Entry {i}: missing required field: {f}")
        if "name" in entry and not _is_non_empty_str(entry["name"]):
            errors.append(f"Entry {i}: field 'name' must be a non-empty string")
        categories = entry.get("categories")
        if categories is not None:
            if not isinstance(categories, dict):
                errors.append(f"Entry {i}: field 'categories' must be an object")
                continue
            for category, count in categories.items():
                if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                    errors.append(f"Entry {i}: game count for '{category}' must be a non-negative integer")

    return errors


def validate_rates(data: Any) -> List[str]:
    if not isinstance(data, dict):
        return ["Rate table must be a JSON object of category -> rate"]
    errors = []
    for category, rate in data.items():
        if not _is_amount(rate) or rate < 0:
            errors.append(f"Rate for '{category}' must be a non-negative number")
    return errors


def validate_amounts(data: Any, label: str) -> List[str]:
    """Extra pay / fines maps: employee number -> non-negative amount."""
    if not isinstance(data, dict):
        return [f"{label} must be a JSON object of employee number -> amount"]
    errors = []
    for employee_number, amount in data.items():
        if not _is_amount(amount) or amount < 0:
            errors.append(f"{label} for '{employee_number}' must be a non-negative number")
    return errors


def validate_referee(data: Dict[str, Any]) -> List[str]:
    if not isinstance(data, dict):
        return ["Referee must be an object"]
    errors = []
    for f in ("employee_number", "full_name"):
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
    return errors


def validate_registry(data: Any) -> List[str]:
    if not isinstance(data, list):
        return ["Registry must be a JSON list of referees"]
    errors = []
    seen = set()
    for i, item in enumerate(data):
        for message in validate_referee(item):
            errors.append(f"Referee {i}: {message}")
        if isinstance(item, dict):
            emp = item.get("employee_number")
            if emp in seen:
                errors.append(f"Referee {i}: duplicate employee_number {emp}")
            seen.add(emp)
    return errors
