"""Client for the Qasa HomeSearch GraphQL endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import requests

from .config import SearchParams
from .models import Listing

logger = logging.getLogger(__name__)

API_URL = "https://api.qasa.se/graphql"
LISTING_URL_TEMPLATE = "https://qasa.se/home/{listing_id}"
USER_AGENT = "QasaWatcher/1.0"
DEFAULT_TIMEOUT = 20

HOME_SEARCH_QUERY = """\
query HomeSearch($order: HomeIndexSearchOrderInput, $offset: Int, $limit: Int, $params: HomeSearchParamsInput) {
  homeIndexSearch(order: $order, params: $params) {
    documents(offset: $offset, limit: $limit) {
      hasNextPage
      nodes {
        id
        title
        description
        rent
        currency
        roomCount
        squareMeters
        startDate
        publishedOrBumpedAt
        location {
          locality
          route
        }
        uploads {
          order
          url
        }
      }
      totalCount
    }
  }
}"""


class FetchError(Exception):
    """Raised when a search request cannot produce a list of listings."""


def build_query_payload(params: SearchParams) -> Dict[str, Any]:
    """Render the GraphQL request body for the first results page."""
    return {
        "operationName": "HomeSearch",
        "variables": {
            "limit": params.page_size,
            "offset": 0,
            "order": {
                "direction": params.order_direction,
                "orderBy": params.order_by,
            },
            "params": {
                "homeType": list(params.home_types),
                "shared": params.shared,
                "maxMonthlyCost": params.max_monthly_cost,
                "currency": params.currency,
                "areaIdentifier": list(params.area_identifiers),
                "rentalType": list(params.rental_types),
                "markets": list(params.markets),
            },
        },
        "query": HOME_SEARCH_QUERY,
    }


class QasaApiClient:
    """Lightweight wrapper around the Qasa search API."""

    def __init__(self,
                 params: SearchParams | None = None,
                 session: requests.Session | None = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.params = params or SearchParams()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def search(self) -> List[dict]:
        """Run one HomeSearch query and return the raw result nodes."""
        payload = build_query_payload(self.params)
        try:
            response = self.session.post(API_URL,
                                         json=payload,
                                         timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"error making request: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchError(f"error decoding response: {exc}") from exc

        return _extract_nodes(body)


def _extract_nodes(body: Any) -> List[dict]:
    current = body
    for key in ("data", "homeIndexSearch", "documents"):
        if not isinstance(current, dict) or not isinstance(
                current.get(key), dict):
            raise FetchError(f"unexpected response shape: missing {key!r}")
        current = current[key]

    nodes = current.get("nodes")
    if nodes is None:
        return []
    if not isinstance(nodes, list):
        raise FetchError(f"unexpected nodes payload: {nodes!r}")
    return nodes


def _str_field(mapping: dict, key: str) -> str:
    """Return a text field, treating null as empty and rejecting other types."""
    value = mapping.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise FetchError(f"field {key!r} should be a string, got {value!r}")
    return value


def select_image_url(uploads: Sequence[dict] | None) -> str:
    """Return the URL of the upload with the lowest order, first one wins ties."""
    best_url = ""
    best_order = None
    for upload in uploads or []:
        order = upload.get("order") or 0
        if best_order is None or order < best_order:
            best_order = order
            best_url = _str_field(upload, "url")
    return best_url


def format_location(location: dict | None) -> str:
    if not location:
        return ""
    locality = _str_field(location, "locality")
    route = _str_field(location, "route")
    if route:
        return f"{route}, {locality}"
    return locality


def build_listing(node: dict, default_currency: str = "NOK") -> Listing:
    """Map one search node onto a normalized listing."""
    if not isinstance(node, dict) or not node.get("id"):
        raise FetchError(f"unexpected listing node: {node!r}")
    listing_id = str(node["id"])
    try:
        return Listing(
            listing_id=listing_id,
            title=_str_field(node, "title"),
            description=_str_field(node, "description"),
            rent=int(node.get("rent") or 0),
            image_url=select_image_url(node.get("uploads")),
            link=LISTING_URL_TEMPLATE.format(listing_id=listing_id),
            location=format_location(node.get("location")),
            room_count=float(node.get("roomCount") or 0),
            start_date=_str_field(node, "startDate"),
            square_meters=int(node.get("squareMeters") or 0),
            currency=_str_field(node, "currency") or default_currency,
        )
    except (FetchError, AttributeError, TypeError, ValueError) as exc:
        raise FetchError(
            f"malformed listing node {listing_id}: {exc}") from exc


def fetch_listings(client: QasaApiClient) -> List[Listing]:
    """Fetch the newest listings; either every node maps or FetchError is raised."""
    nodes = client.search()
    listings = [
        build_listing(node, default_currency=client.params.currency)
        for node in nodes
    ]
    logger.debug("Fetched %d listings from %s", len(listings), API_URL)
    return listings


__all__ = [
    "FetchError",
    "QasaApiClient",
    "build_listing",
    "build_query_payload",
    "fetch_listings",
    "format_location",
    "select_image_url",
]
