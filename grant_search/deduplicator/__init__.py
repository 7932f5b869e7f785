from .dedup import Deduplicator

__all__ = ["Deduplicator"]
