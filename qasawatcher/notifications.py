"""Message formatting and Discord delivery for listing announcements."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Protocol

import requests

from .models import Embed, Listing, NotificationMessage

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"
DISCORD_USER_AGENT = "DiscordBot (https://qasa.se, 1.0)"
EMBED_COLOR = 0x00FF00
DESCRIPTION_LIMIT = 500
NEW_PREFIX = "🏠 **NEW Apartment for rent!**"
EXISTING_PREFIX = "🏠 **Apartment for rent**"
DATE_PLACEHOLDER = "Not specified"
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)


class NotifierSetupError(Exception):
    """Raised when the chat backend rejects the bot credentials."""


class Notifier(Protocol):
    """Protocol defining the notifier contract."""

    def send(self, channel_id: str, message: NotificationMessage) -> None:
        ...


class DiscordNotifier:
    """Post messages to a Discord channel through the REST API."""

    def __init__(self,
                 token: str,
                 session: requests.Session | None = None,
                 timeout: int = 10):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bot {token}",
            "User-Agent": DISCORD_USER_AGENT,
        })

    def connect(self) -> str:
        """Validate the token and return the bot's username."""
        try:
            response = self.session.get(f"{DISCORD_API_BASE}/users/@me",
                                        timeout=self.timeout)
            response.raise_for_status()
            user = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise NotifierSetupError(
                f"error opening Discord session: {exc}") from exc
        username = user.get("username", "") if isinstance(user, dict) else ""
        logger.info("Connected to Discord as %s", username or "<unknown>")
        return username

    def send(self, channel_id: str, message: NotificationMessage) -> None:
        response = self.session.post(
            f"{DISCORD_API_BASE}/channels/{channel_id}/messages",
            json=message.to_payload(),
            timeout=self.timeout,
        )
        response.raise_for_status()

    def close(self) -> None:
        self.session.close()


def ordinal_suffix(day: int) -> str:
    if day % 100 in (11, 12, 13):
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_start_date(value: str) -> str:
    """Render an ISO-8601 date as e.g. '1st of March'."""
    if not value:
        return DATE_PLACEHOLDER
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = dt.datetime.fromisoformat(raw)
    except ValueError:
        return DATE_PLACEHOLDER
    return f"{parsed.day}{ordinal_suffix(parsed.day)} of {MONTH_NAMES[parsed.month - 1]}"


def truncate_description(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def format_notification(
    listing: Listing,
    *,
    is_new: bool,
    now: dt.datetime | None = None,
) -> NotificationMessage:
    """Render a listing into a prefix line plus one embed."""
    timestamp = (now or dt.datetime.now(dt.timezone.utc)).isoformat(
        timespec="seconds")
    body = "\n".join([
        f"**Rent:** {listing.rent} {listing.currency}/month",
        f"**Location:** {listing.location}",
        f"**Rooms:** {listing.room_count:.0f}",
        f"**Size:** {listing.square_meters} m²",
        f"**Available from:** {format_start_date(listing.start_date)}",
        "",
        truncate_description(listing.description),
    ])
    embed = Embed(
        title=listing.title,
        url=listing.link,
        description=body,
        color=EMBED_COLOR,
        image_url=listing.image_url,
        timestamp=timestamp,
    )
    return NotificationMessage(
        content=NEW_PREFIX if is_new else EXISTING_PREFIX,
        embed=embed,
    )


__all__ = [
    "DiscordNotifier",
    "Notifier",
    "NotifierSetupError",
    "format_notification",
    "format_start_date",
    "ordinal_suffix",
    "truncate_description",
]
