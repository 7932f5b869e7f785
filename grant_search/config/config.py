"""Configuration management for grant search, matching and notifications."""

from typing import List, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from ..models.opportunity import SourceId

# Needed by the scheduled job, which persists matches and sends digests
PERSISTENCE_VARS = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
]

DEFAULT_SEARCH_TERMS = "education,health,environment,technology,community"


def _split(value: str) -> List[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class Config(BaseSettings):
    """Application configuration from environment variables.

    Every key is optional: a missing Supabase pair runs the pipelines in
    preview mode, a missing source key degrades that source to an empty
    result with an explanatory message.
    """

    # Persistence
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Source keys
    sam_api_key: Optional[str] = None
    regulations_api_key: Optional[str] = None
    grants_gov_attribution: str = "Grant Search"

    # Email digests
    resend_api_key: Optional[str] = None
    from_email: str = "Grant Search <notifications@grantsearch.app>"
    base_url: str = "http://localhost:3000"

    # Search and matching
    enabled_sources: str = ",".join(s.value for s in SourceId)
    match_threshold: int = 30
    daily_search_terms: str = DEFAULT_SEARCH_TERMS
    daily_run_hour: int = 6
    taxonomy_file: Optional[str] = None

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}

    @property
    def sources(self) -> List[SourceId]:
        """Enabled sources in declaration order; unknown names are rejected."""
        names = [name.lower() for name in _split(self.enabled_sources)]
        unknown = [name for name in names if name not in {s.value for s in SourceId}]
        if unknown:
            raise ValueError(f"Unknown source(s) in ENABLED_SOURCES: {', '.join(unknown)}")
        return [s for s in SourceId if s.value in names]

    @property
    def search_terms(self) -> List[str]:
        return _split(self.daily_search_terms)

    @property
    def has_persistence(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def validate_config(require_persistence: bool = False) -> Config:
    """Load and validate configuration from environment.

    Raises ValueError with descriptive message listing ALL missing
    required variables (not just the first one).
    """
    try:
        config = Config()
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc"))
        raise ValueError(f"Invalid configuration: {fields}") from exc

    missing = []
    if require_persistence:
        missing = [var for var in PERSISTENCE_VARS if not getattr(config, var.lower())]
    if missing:
        names = ", ".join(missing)
        raise ValueError(
            f"Missing required environment variable(s): {names}. "
            "Please set them in your .env file or environment."
        )

    # Surface bad source names at startup rather than on first search
    config.sources
    if not 0 <= config.daily_run_hour <= 23:
        raise ValueError(f"DAILY_RUN_HOUR must be between 0 and 23, got {config.daily_run_hour}")
    return config


def load_config(require_persistence: bool = False) -> Config:
    """Load configuration from environment (startup entry point)."""
    return validate_config(require_persistence)
