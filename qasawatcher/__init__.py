"""QasaWatcher package initialization."""

from .config import SearchParams, Settings, load_search_params, load_settings
from .diff import diff_listings
from .fetcher import FetchError, QasaApiClient, fetch_listings
from .models import (
    CycleSummary,
    DiffResult,
    Embed,
    Listing,
    NotificationMessage,
)
from .notifications import DiscordNotifier, NotifierSetupError, format_notification
from .runner import QasaWatcherRunner
from .scheduler import IntervalTicker
from .tracker import ListingTracker

__all__ = [
    "CycleSummary",
    "DiffResult",
    "DiscordNotifier",
    "Embed",
    "FetchError",
    "IntervalTicker",
    "Listing",
    "ListingTracker",
    "NotificationMessage",
    "NotifierSetupError",
    "QasaApiClient",
    "QasaWatcherRunner",
    "SearchParams",
    "Settings",
    "diff_listings",
    "fetch_listings",
    "format_notification",
    "load_search_params",
    "load_settings",
]
