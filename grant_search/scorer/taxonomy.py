"""Keyword taxonomies used by the match scorer.

Focus-area and eligibility keyword lists are plain lookup tables kept behind
named accessors. A different taxonomy can be loaded from JSON/YAML and
activated for a block of code with `use_taxonomy`, without touching the
scoring logic.
"""

import json
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

FOCUS_AREA_KEYWORDS: Dict[str, List[str]] = {
    "education": ["education", "school", "student", "teacher", "learning", "training", "curriculum", "stem", "literacy"],
    "healthcare": ["health", "medical", "hospital", "clinical", "patient", "disease", "mental health", "public health"],
    "environment": ["environment", "climate", "conservation", "sustainability", "green", "renewable", "pollution", "ecosystem"],
    "research": ["research", "study", "investigation", "scientific", "innovation", "discovery", "laboratory"],
    "technology": ["technology", "innovation", "digital", "software", "cyber", "ai", "data", "computing"],
    "arts": ["arts", "culture", "museum", "creative", "humanities", "music", "theater", "visual arts"],
    "housing": ["housing", "community development", "affordable", "homeless", "shelter", "urban development"],
    "workforce": ["workforce", "employment", "job", "career", "apprentice", "vocational", "labor"],
    "agriculture": ["agriculture", "farm", "food", "rural", "crop", "livestock", "nutrition"],
    "disaster": ["disaster", "emergency", "fema", "mitigation", "resilience", "hazard", "recovery"],
    "justice": ["justice", "public safety", "law enforcement", "court", "crime", "corrections"],
    "transportation": ["transportation", "infrastructure", "transit", "highway", "road", "bridge"],
    "energy": ["energy", "power", "electric", "solar", "wind", "efficiency", "grid"],
    "social_services": ["social services", "welfare", "assistance", "poverty", "family", "child", "senior"],
    "veterans": ["veteran", "military", "armed forces", "service member", "va "],
}

ELIGIBILITY_KEYWORDS: Dict[str, List[str]] = {
    "nonprofit": ["nonprofit", "non-profit", "501(c)(3)", "501c3", "charitable", "organization"],
    "small_business": ["small business", "sbir", "sttr", "entrepreneur", "commercial"],
    "university": ["university", "college", "higher education", "academic", "institution of higher"],
    "k12": ["school district", "k-12", "elementary", "secondary", "local education"],
    "government": ["state", "local", "municipal", "county", "government", "public agency"],
    "tribal": ["tribal", "native", "indigenous", "indian"],
    "hospital": ["hospital", "healthcare", "health system", "medical center"],
    "individual": ["individual", "researcher", "investigator", "principal investigator"],
}

US_STATES: Dict[str, str] = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
    "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "FL": "Florida", "GA": "Georgia",
    "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi", "MO": "Missouri",
    "MT": "Montana", "NE": "Nebraska", "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey",
    "NM": "New Mexico", "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
    "VA": "Virginia", "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
    "DC": "District of Columbia",
}


class Taxonomy(BaseModel):
    """Lookup tables for focus areas, eligibility and state names."""

    model_config = {"frozen": True}

    focus_areas: Dict[str, List[str]] = Field(default_factory=lambda: dict(FOCUS_AREA_KEYWORDS))
    eligibility: Dict[str, List[str]] = Field(default_factory=lambda: dict(ELIGIBILITY_KEYWORDS))
    states: Dict[str, str] = Field(default_factory=lambda: dict(US_STATES))
    version: str = "1.0"

    @field_validator("focus_areas", "eligibility")
    @classmethod
    def lowercase_keywords(cls, table: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Keys and keywords are matched against lower-cased text."""
        return {
            key.strip().lower(): [kw.strip().lower() for kw in keywords if kw and kw.strip()]
            for key, keywords in table.items()
        }

    def focus_area_keywords(self, area: str) -> List[str]:
        """Keywords for a focus area; an unknown area matches on its own name."""
        key = (area or "").strip().lower()
        if not key:
            return []
        return self.focus_areas.get(key, [key])

    def eligibility_keywords(self, org_type: Optional[str]) -> List[str]:
        if not org_type:
            return []
        return self.eligibility.get(str(org_type).strip().lower(), [])

    def state_name(self, state: Optional[str]) -> Optional[str]:
        """Full state name for a two-letter code or a full name, None if unknown."""
        if not state:
            return None
        value = state.strip()
        if value.upper() in self.states:
            return self.states[value.upper()]
        for name in self.states.values():
            if name.lower() == value.lower():
                return name
        return None

    def state_code(self, state: Optional[str]) -> Optional[str]:
        name = self.state_name(state)
        if not name:
            return None
        for code, full in self.states.items():
            if full == name:
                return code
        return None


DEFAULT_TAXONOMY = Taxonomy()

_active_taxonomy: ContextVar[Taxonomy] = ContextVar("active_taxonomy", default=DEFAULT_TAXONOMY)


def active_taxonomy() -> Taxonomy:
    return _active_taxonomy.get()


def get_focus_area_keywords(area: str) -> List[str]:
    return active_taxonomy().focus_area_keywords(area)


def get_eligibility_keywords(org_type: Optional[str]) -> List[str]:
    return active_taxonomy().eligibility_keywords(org_type)


@contextmanager
def use_taxonomy(taxonomy: Taxonomy) -> Iterator[Taxonomy]:
    """Activate `taxonomy` for the current context (thread / task)."""
    token = _active_taxonomy.set(taxonomy)
    try:
        yield taxonomy
    finally:
        _active_taxonomy.reset(token)


def load_taxonomy(filepath: Optional[str] = None) -> Taxonomy:
    """Load a taxonomy from file or return the default.

    Supports JSON and YAML. Tables in the file extend the defaults; an entry
    with the same key replaces the default list.

    Raises:
        FileNotFoundError: If filepath provided but doesn't exist
        ValueError: If the file format is unsupported
    """
    if not filepath:
        return DEFAULT_TAXONOMY

    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Taxonomy file not found: {filepath}")

    if path.suffix == ".json":
        with open(path, "r") as f:
            data = json.load(f)
    elif path.suffix in [".yaml", ".yml"]:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}. Use .json, .yaml, or .yml")

    data = data or {}
    return Taxonomy(
        focus_areas={**FOCUS_AREA_KEYWORDS, **(data.get("focus_areas") or {})},
        eligibility={**ELIGIBILITY_KEYWORDS, **(data.get("eligibility") or {})},
        states={**US_STATES, **(data.get("states") or {})},
        version=str(data.get("version", "custom")),
    )
