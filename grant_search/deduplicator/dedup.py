"""Deduplication of normalized opportunities on their identity key."""

import logging
from typing import Iterable, List, Optional, Set

from ..models.opportunity import NormalizedOpportunity

logger = logging.getLogger(__name__)


class Deduplicator:
    """Deduplicates opportunities by SHA256(source:source_record_id).

    Identity includes the source, so the same id from two sources is two
    records; no cross-source merge is performed. Keeps the first occurrence.
    """

    def __init__(self, existing_hashes: Optional[Set[str]] = None):
        """Initialize deduplicator.

        Args:
            existing_hashes: identity hashes already seen (e.g. an earlier batch)
        """
        self.existing_hashes = set(existing_hashes or ())

    def deduplicate(self, opportunities: Iterable[NormalizedOpportunity]) -> List[NormalizedOpportunity]:
        """Return opportunities not seen before, preserving input order."""
        new_opportunities = []
        duplicate_count = 0

        for opp in opportunities:
            if opp.identity_hash in self.existing_hashes:
                duplicate_count += 1
                logger.debug("Duplicate found: %s:%s", opp.source.value, opp.source_record_id)
            else:
                new_opportunities.append(opp)
                self.existing_hashes.add(opp.identity_hash)

        if duplicate_count:
            logger.info("Deduplication: %d new, %d duplicates", len(new_opportunities), duplicate_count)
        return new_opportunities

    def add_hashes(self, hashes: Iterable[str]):
        self.existing_hashes.update(hashes)
