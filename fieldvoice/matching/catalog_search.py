"""Fuzzy text search over shop and product records."""

import logging
from typing import Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.4

SHOP_KEYS = ("name", "address")
PRODUCT_KEYS = ("name", "category", "brand", "manufacturer")

RecordT = TypeVar("RecordT")


class CatalogSearch(Generic[RecordT]):
    """Fuzzy search across record fields.

    Scores are distances in [0, 1] where 0 is a perfect match; a record
    matches a query when its best field distance is at most ``threshold``.
    """

    def __init__(self, records: Sequence[RecordT], keys: Sequence[str],
                 threshold: float = DEFAULT_FUZZY_THRESHOLD):
        self.records = list(records)
        self.keys = tuple(keys)
        self.threshold = threshold

    def field_distance(self, record: RecordT, key: str, query: str) -> float:
        value = getattr(record, key, "") or ""
        if not value:
            return 1.0
        similarity = fuzz.partial_ratio(query, str(value), processor=default_process)
        return 1.0 - similarity / 100.0

    def record_distance(self, record: RecordT, query: str) -> float:
        return min(self.field_distance(record, key, query) for key in self.keys)

    def search(self, query: str) -> List[RecordT]:
        """Records matching ``query`` on any key, best first. Blank query returns all."""
        if not query or not query.strip():
            return list(self.records)
        return [record for record, _ in self.search_scored(query)]

    def search_scored(self, query: str) -> List[Tuple[RecordT, float]]:
        scored = [(record, self.record_distance(record, query)) for record in self.records]
        matches = [(record, d) for record, d in scored if d <= self.threshold]
        matches.sort(key=lambda pair: pair[1])
        logger.debug(f"Catalog search {query!r}: {len(matches)}/{len(self.records)} matches")
        return matches

    def search_fields(self, filters: Dict[str, Optional[str]]) -> List[RecordT]:
        """Records matching every non-blank field filter, in catalog order."""
        active = {key: value.strip() for key, value in filters.items() if value and value.strip()}
        if not active:
            return list(self.records)

        unknown = set(active) - set(self.keys)
        if unknown:
            raise ValueError(f"Unknown search keys: {sorted(unknown)}")

        return [
            record for record in self.records
            if all(self.field_distance(record, key, value) <= self.threshold
                   for key, value in active.items())
        ]


def shop_search(shops, threshold: float = DEFAULT_FUZZY_THRESHOLD) -> CatalogSearch:
    return CatalogSearch(shops, SHOP_KEYS, threshold)


def product_search(products, threshold: float = DEFAULT_FUZZY_THRESHOLD) -> CatalogSearch:
    return CatalogSearch(products, PRODUCT_KEYS, threshold)
