import datetime as dt
from types import SimpleNamespace

import pytest
import requests

from qasawatcher.models import Listing
from qasawatcher.notifications import (
    DATE_PLACEHOLDER,
    EXISTING_PREFIX,
    NEW_PREFIX,
    DiscordNotifier,
    NotifierSetupError,
    format_notification,
    format_start_date,
    ordinal_suffix,
    truncate_description,
)


class DummyResponse:

    def __init__(self, payload=None):
        self.payload = payload or {}

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeSession:

    def __init__(self, get_exc=None):
        self.headers = {}
        self.get_exc = get_exc
        self.posts = []
        self.closed = False

    def get(self, url, timeout=None):
        if self.get_exc:
            raise self.get_exc
        return DummyResponse({"id": "42", "username": "qasa-bot"})

    def post(self, url, json=None, timeout=None):
        self.posts.append(SimpleNamespace(url=url, json=json, timeout=timeout))
        return DummyResponse()

    def close(self):
        self.closed = True


def make_listing(**overrides) -> Listing:
    fields = dict(
        listing_id="1001",
        title="Bright flat near the park",
        description="Two bedrooms, balcony.",
        rent=15500,
        image_url="https://img.qasa.se/1.jpg",
        link="https://qasa.se/home/1001",
        location="Thereses gate, Oslo",
        room_count=2.6,
        start_date="2025-03-01T00:00:00Z",
        square_meters=62,
    )
    fields.update(overrides)
    return Listing(**fields)


@pytest.mark.parametrize(
    "day, expected",
    [
        (1, "st"),
        (2, "nd"),
        (3, "rd"),
        (4, "th"),
        (11, "th"),
        (12, "th"),
        (13, "th"),
        (21, "st"),
        (22, "nd"),
        (23, "rd"),
        (30, "th"),
        (31, "st"),
    ],
)
def test_ordinal_suffix(day, expected):
    assert ordinal_suffix(day) == expected


def test_format_start_date_renders_day_and_month():
    assert format_start_date("2025-03-01T00:00:00Z") == "1st of March"
    assert format_start_date("2024-11-22T00:00:00+01:00") == "22nd of November"
    assert format_start_date("2024-06-13") == "13th of June"


def test_format_start_date_falls_back_to_placeholder():
    assert format_start_date("") == DATE_PLACEHOLDER
    assert format_start_date("next month") == DATE_PLACEHOLDER
    assert DATE_PLACEHOLDER == "Not specified"


def test_truncate_description():
    long_text = "x" * 600
    truncated = truncate_description(long_text)
    assert len(truncated) == 503
    assert truncated.endswith("...")
    assert truncated[:500] == long_text[:500]

    exact = "y" * 500
    assert truncate_description(exact) == exact
    assert truncate_description("short") == "short"


def test_format_notification_builds_embed():
    now = dt.datetime(2025, 2, 10, 12, 0, tzinfo=dt.timezone.utc)

    message = format_notification(make_listing(), is_new=True, now=now)

    assert message.content == NEW_PREFIX
    embed = message.embed
    assert embed.title == "Bright flat near the park"
    assert embed.url == "https://qasa.se/home/1001"
    assert embed.color == 0x00FF00
    assert embed.image_url == "https://img.qasa.se/1.jpg"
    assert embed.timestamp == "2025-02-10T12:00:00+00:00"
    assert embed.description == (
        "**Rent:** 15500 NOK/month\n"
        "**Location:** Thereses gate, Oslo\n"
        "**Rooms:** 3\n"
        "**Size:** 62 m²\n"
        "**Available from:** 1st of March\n"
        "\n"
        "Two bedrooms, balcony."
    )


def test_format_notification_existing_framing_and_truncation():
    listing = make_listing(description="z" * 800, start_date="", image_url="")

    message = format_notification(listing, is_new=False)

    assert message.content == EXISTING_PREFIX
    assert "**Available from:** Not specified" in message.embed.description
    assert message.embed.description.endswith("z" * 500 + "...")
    payload = message.to_payload()
    assert "image" not in payload["embeds"][0]


def test_discord_notifier_posts_message():
    session = FakeSession()
    notifier = DiscordNotifier(token="secret", session=session)
    message = format_notification(make_listing(), is_new=False)

    notifier.send("123456", message)

    assert session.headers["Authorization"] == "Bot secret"
    assert len(session.posts) == 1
    call = session.posts[0]
    assert call.url == "https://discord.com/api/v10/channels/123456/messages"
    assert call.json["content"] == EXISTING_PREFIX
    assert call.json["embeds"][0]["image"] == {"url": "https://img.qasa.se/1.jpg"}


def test_discord_notifier_connect_returns_username():
    notifier = DiscordNotifier(token="secret", session=FakeSession())
    assert notifier.connect() == "qasa-bot"


def test_discord_notifier_connect_failure_is_setup_error():
    session = FakeSession(get_exc=requests.ConnectionError("no route to host"))
    notifier = DiscordNotifier(token="secret", session=session)

    with pytest.raises(NotifierSetupError):
        notifier.connect()


def test_discord_notifier_close_closes_session():
    session = FakeSession()
    DiscordNotifier(token="secret", session=session).close()
    assert session.closed is True
