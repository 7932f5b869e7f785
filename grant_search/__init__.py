"""Grant search: multi-source grant aggregation, normalization and profile matching."""

__version__ = "0.1.0"
