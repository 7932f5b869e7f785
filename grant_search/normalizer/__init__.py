"""Source record normalizer: raw per-source JSON -> NormalizedOpportunity."""

from .extract import normalize, normalize_records, parse_date
from .field_maps import SOURCE_MAPPINGS, SourceMapping
from .money import parse_money

__all__ = ["normalize", "normalize_records", "parse_date", "parse_money", "SOURCE_MAPPINGS", "SourceMapping"]
