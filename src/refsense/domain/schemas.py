from __future__ import annotations
import logging
import math
import re
from typing import Any, Dict, List, Optional

from .models import DEFAULT_CONFIDENCE, MetadataRecord

logger = logging.getLogger(__name__)

STRING_FIELDS = ["title", "journal", "volume", "issue", "pages", "doi", "abstract"]
LIST_FIELDS = ["authors", "keywords"]
EXPECTED_FIELDS = ["title", "authors", "year"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def normalize_string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for x in value:
            # some models return [{"name": "A. Smith", "affiliation": ...}]
            if isinstance(x, dict):
                x = x.get("name")
            if not isinstance(x, str):
                continue
            s = x.strip()
            if s:
                out.append(s)
        return out
    return []


def normalize_year(value: Any) -> Optional[int]:
    # bool is an int subclass; "true" is not a year
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        return int(m.group(1)) if m else None
    return None


def normalize_confidence(value: Any) -> float:
    if not value or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        c = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if not math.isfinite(c):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, c))


def normalize_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def to_metadata_record(obj: Dict[str, Any]) -> MetadataRecord:
    """Map a decoded backend object onto the canonical record.

    Unknown keys are dropped. Missing title/authors/year are only logged,
    the record is still returned with defaults.
    """
    missing = [k for k in EXPECTED_FIELDS if obj.get(k) in (None, "", [])]
    if missing:
        logger.warning("Backend output missing expected fields: %s", missing)

    return MetadataRecord(
        authors=normalize_string_list(obj.get("authors")),
        keywords=normalize_string_list(obj.get("keywords")),
        year=normalize_year(obj.get("year")),
        confidence=normalize_confidence(obj.get("confidence")),
        **{k: normalize_string(obj.get(k)) for k in STRING_FIELDS},
    )
