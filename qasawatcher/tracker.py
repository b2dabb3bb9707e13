"""In-memory record of listing identifiers that were already announced."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Set

from .diff import diff_listings
from .models import DiffResult, Listing


class ListingTracker:
    """Owns the seen-set for the lifetime of the process.

    Identifiers are only ever added. Callers must drive the tracker from a
    single polling loop; it does no locking of its own.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, listing_id: object) -> bool:
        return listing_id in self._seen

    @property
    def seen_ids(self) -> FrozenSet[str]:
        return frozenset(self._seen)

    def mark_seen(self, listings: Iterable[Listing]) -> None:
        for listing in listings:
            self._seen.add(listing.listing_id)

    def observe(self, listings: Iterable[Listing]) -> DiffResult[Listing]:
        """Diff a batch against the seen-set and record the unseen ids."""
        diff = diff_listings(listings, self._seen)
        self.mark_seen(diff.added)
        return diff
