"""Diff utilities for comparing a fetched batch with known identifiers."""

from __future__ import annotations

from typing import AbstractSet, Callable, Iterable, TypeVar

from .models import DiffResult, Listing

TNew = TypeVar("TNew")
KeyFunc = Callable[[TNew], str]


def _diff_items(
    new_items: Iterable[TNew],
    seen_keys: AbstractSet[str],
    key_fn: KeyFunc,
) -> DiffResult[TNew]:
    added = []
    unchanged = []
    batch_keys: set[str] = set()
    for item in new_items:
        item_id = key_fn(item)
        if item_id in batch_keys:
            continue
        batch_keys.add(item_id)
        if item_id not in seen_keys:
            added.append(item)
        else:
            unchanged.append(item)

    return DiffResult(added=added, unchanged=unchanged)


def diff_listings(
    new_listings: Iterable[Listing],
    seen_ids: AbstractSet[str],
) -> DiffResult[Listing]:
    """Split listings into unseen and already-seen, keeping source order."""
    return _diff_items(new_listings,
                       seen_ids,
                       key_fn=lambda item: item.listing_id)
