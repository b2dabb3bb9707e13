"""Search filters and process settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Sequence, Tuple


@dataclass(frozen=True)
class SearchParams:
    """Filters sent with every HomeSearch query."""

    home_types: Sequence[str] = ("apartment", "loft")
    shared: bool = False
    max_monthly_cost: int = 20000
    currency: str = "NOK"
    area_identifiers: Sequence[str] = ("no/oslo",)
    rental_types: Sequence[str] = ("long_term",)
    markets: Sequence[str] = ("sweden", "norway", "finland")
    page_size: int = 60
    order_by: str = "published_or_bumped_at"
    order_direction: str = "descending"


@dataclass(frozen=True)
class Settings:
    """Everything the CLI needs to wire up a watcher."""

    token: str = ""
    channel_id: str = ""
    poll_interval: float = 60.0
    pacing_delay: float = 1.0
    search: SearchParams = field(default_factory=SearchParams)


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_search_params(env: Mapping[str, str] | None = None) -> SearchParams:
    """Build search filters, falling back to the Oslo defaults."""
    if env is None:
        env = os.environ
    defaults = SearchParams()
    home_types = _split_list(env.get("QASA_HOME_TYPES") or "")
    areas = _split_list(env.get("QASA_AREAS") or "")
    markets = _split_list(env.get("QASA_MARKETS") or "")
    page_size = _read_number(env, "QASA_PAGE_SIZE", defaults.page_size, int)
    if page_size <= 0:
        raise ValueError(f"QASA_PAGE_SIZE must be positive, got {page_size}")
    return SearchParams(
        home_types=home_types or defaults.home_types,
        max_monthly_cost=_read_number(env, "QASA_MAX_MONTHLY_COST",
                                      defaults.max_monthly_cost, int),
        currency=(env.get("QASA_CURRENCY") or "").strip() or defaults.currency,
        area_identifiers=areas or defaults.area_identifiers,
        markets=markets or defaults.markets,
        page_size=page_size,
    )


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Construct settings from environment configuration."""
    if env is None:
        env = os.environ
    return Settings(
        token=(env.get("DISCORD_TOKEN") or "").strip(),
        channel_id=(env.get("DISCORD_CHANNEL_ID") or "").strip(),
        poll_interval=_read_number(env, "POLL_INTERVAL_SECONDS", 60.0, float),
        pacing_delay=_read_number(env, "PACING_DELAY_SECONDS", 1.0, float),
        search=load_search_params(env),
    )


__all__ = ["SearchParams", "Settings", "load_search_params", "load_settings"]
