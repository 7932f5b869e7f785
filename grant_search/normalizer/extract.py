"""Generic normalization of raw source records into NormalizedOpportunity."""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from ..models.opportunity import NormalizedOpportunity, SourceId
from .field_maps import Candidate, SourceMapping, get_mapping
from .money import parse_money

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:$|[T\s])")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
)


def resolve_path(raw: Dict[str, Any], candidate: Candidate) -> Any:
    """Resolve one candidate (dotted path or callable) against a raw record."""
    if callable(candidate):
        try:
            return candidate(raw)
        except (TypeError, ValueError, AttributeError, KeyError):
            return None

    current: Any = raw
    for part in candidate.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, dict)):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value)
    if isinstance(value, (list, tuple)):
        parts = [_as_text(item) for item in value]
        joined = ", ".join(p for p in parts if p)
        return joined or None
    if isinstance(value, str):
        return value.strip() or None
    return None


def extract_text(raw: Dict[str, Any], candidates: Iterable[Candidate]) -> Optional[str]:
    """First candidate that yields a non-empty string."""
    for candidate in candidates:
        text = _as_text(resolve_path(raw, candidate))
        if text:
            return text
    return None


def extract_amount(raw: Dict[str, Any], candidates: Iterable[Candidate]) -> Optional[float]:
    for candidate in candidates:
        amount = parse_money(resolve_path(raw, candidate))
        if amount is not None:
            return amount
    return None


def parse_date(value: Any) -> Optional[str]:
    """Parse an upstream date into ISO YYYY-MM-DD, None when unparsable."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = _ISO_DATE_RE.match(text)
    if match:
        try:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3))).isoformat()
        except ValueError:
            return None

    # Drop a trailing time component ("03/18/2025 11:59 PM")
    candidates = [text]
    head = text.split(" ")[0]
    if head != text and "/" in head:
        candidates.append(head)

    for candidate in candidates:
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date().isoformat()
            except ValueError:
                continue
    return None


def extract_date(raw: Dict[str, Any], candidates: Iterable[Candidate]) -> Optional[str]:
    for candidate in candidates:
        parsed = parse_date(resolve_path(raw, candidate))
        if parsed:
            return parsed
    return None


def build_link(raw: Dict[str, Any], mapping: SourceMapping) -> Optional[str]:
    """Direct URL if the record has one, else the source template, else None."""
    for candidate in mapping.fields.get("link", []):
        url = _as_text(resolve_path(raw, candidate))
        if url and url.lower().startswith(("http://", "https://")):
            return url

    if not mapping.link_template:
        return None
    link_id = extract_text(raw, mapping.link_id_paths)
    if not link_id:
        return None
    return mapping.link_template.format(id=quote(link_id, safe="-_.~"))


def normalize(raw: Any, source: SourceId) -> NormalizedOpportunity:
    """Map one raw record from `source` onto NormalizedOpportunity. Never raises."""
    source = SourceId(source)
    if not isinstance(raw, dict):
        raw = {}

    mapping = get_mapping(source)
    fields = mapping.fields
    defaults = mapping.defaults

    def text(name: str) -> Optional[str]:
        return extract_text(raw, fields.get(name, [])) or defaults.get(name)

    return NormalizedOpportunity(
        source=source,
        source_record_id=text("id"),
        title=text("title") or "Untitled",
        agency=text("agency"),
        description=text("description"),
        amount=extract_amount(raw, fields.get("amount", [])),
        posted_date=extract_date(raw, fields.get("posted", [])),
        deadline_date=extract_date(raw, fields.get("deadline", [])),
        link=build_link(raw, mapping),
        eligibility_text=text("eligibility"),
        category_text=text("category"),
    )


def normalize_records(raws: Iterable[Any], source: SourceId) -> List[NormalizedOpportunity]:
    """Normalize a batch, dropping records that cannot be identified."""
    normalized = []
    dropped = 0
    for raw in raws or []:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        opportunity = normalize(raw, source)
        if not opportunity.is_identifiable:
            dropped += 1
            continue
        normalized.append(opportunity)
    if dropped:
        logger.debug("normalize_dropped source=%s dropped=%d kept=%d", SourceId(source).value, dropped, len(normalized))
    return normalized
