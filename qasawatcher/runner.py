"""Core execution workflow for QasaWatcher."""

from __future__ import annotations

import datetime as dt
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence

from .fetcher import FetchError
from .models import CycleSummary, Listing
from .notifications import Notifier, format_notification
from .tracker import ListingTracker

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass
class QasaWatcherRunner:
    """Coordinates fetch, diff, and delivery steps."""

    fetcher: Callable[[], List[Listing]]
    notifier: Notifier | None = None
    channel_id: str = ""
    tracker: ListingTracker = field(default_factory=ListingTracker)
    pacing_delay: float = 1.0
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], dt.datetime] = _utcnow

    def bootstrap(self) -> CycleSummary:
        """Seed the seen-set and announce every current listing once."""
        summary = CycleSummary(executed_at=self.clock().isoformat(),
                               phase="bootstrap",
                               status="success")
        try:
            listings = self.fetcher()
        except FetchError as exc:
            logger.error("Error getting initial listings: %s", exc)
            summary.status = "error"
            return summary

        summary.fetched = len(listings)
        logger.info("Initial scan found %d ads. Sending to channel...",
                    len(listings))
        diff = self.tracker.observe(listings)
        self._announce(diff.added, is_new=False, summary=summary,
                       paced=True)
        logger.info("Initial scan complete. Tracking %d ads.",
                    len(self.tracker))
        return summary

    def run_cycle(self) -> CycleSummary:
        """Execute a single polling cycle."""
        summary = CycleSummary(executed_at=self.clock().isoformat(),
                               phase="poll",
                               status="success")
        try:
            listings = self.fetcher()
        except FetchError as exc:
            logger.error("Error getting listings: %s", exc)
            summary.status = "error"
            return summary

        summary.fetched = len(listings)
        diff = self.tracker.observe(listings)
        for listing in diff.added:
            logger.info("New ad found: (%s) %s", listing.listing_id,
                        listing.title)
        self._announce(diff.added, is_new=True, summary=summary,
                       paced=False)
        logger.debug(
            "Cycle complete: %d fetched, %d new, tracking %d ads",
            summary.fetched,
            len(diff.added),
            len(self.tracker),
        )
        return summary

    def run(self, ticks: Iterable[object]) -> None:
        """Bootstrap, then run one cycle per tick until ticks run out."""
        self.bootstrap()
        for _ in ticks:
            self.run_cycle()
        logger.info("Polling loop stopped.")

    def _announce(
        self,
        listings: Sequence[Listing],
        *,
        is_new: bool,
        summary: CycleSummary,
        paced: bool,
    ) -> None:
        attempted = 0
        for listing in listings:
            summary.announced.append(listing)
            if self.notifier is None:
                logger.info("No notifier configured, skipping listing ID %s",
                            listing.listing_id)
                summary.skipped += 1
                continue
            if not self.channel_id:
                logger.info("Channel ID not set, skipping notification.")
                summary.skipped += 1
                continue

            if paced and attempted:
                self.sleep(self.pacing_delay)
            attempted += 1
            logger.info("Sending notification for listing ID %s",
                        listing.listing_id)
            try:
                message = format_notification(listing,
                                              is_new=is_new,
                                              now=self.clock())
                self.notifier.send(self.channel_id, message)
            except Exception:  # noqa: BLE001
                logger.exception("Error sending notification for listing %s",
                                 listing.listing_id)
                summary.failed += 1
            else:
                summary.delivered += 1
