import re
import unicodedata
from typing import Dict, List

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_CATEGORY = re.compile(r"^(\d+)\s*(u|uf)?$", re.IGNORECASE)


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def strip_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFD", s)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(name: str) -> str:
    """Lenient comparison form: lowercase, no accents, alphanumerics only."""
    if not name:
        return ""
    return normalize_text(_NON_ALNUM.sub(" ", strip_accents(name.lower())))


def name_parts(name: str) -> List[str]:
    return [p for p in normalize_name(name).split(" ") if p]


def normalize_category_label(category: str) -> str:
    trimmed = category.strip()
    match = _CATEGORY.match(trimmed)
    if not match:
        return trimmed
    digits, suffix = match.groups()
    if suffix and suffix.lower() == "uf":
        return f"{digits}uF"
    return f"{digits}u"


def normalize_category_counts(categories: Dict[str, int]) -> Dict[str, int]:
    merged: Dict[str, int] = {}
    for category, count in categories.items():
        key = normalize_category_label(category)
        merged[key] = merged.get(key, 0) + count
    return merged
