from qasawatcher.diff import diff_listings
from qasawatcher.models import Listing


def make_listing(listing_id: str, title: str = "") -> Listing:
    return Listing(
        listing_id=listing_id,
        title=title or f"Listing {listing_id}",
        description="",
        rent=10000,
        image_url="",
        link=f"https://qasa.se/home/{listing_id}",
        location="Oslo",
        room_count=2.0,
        start_date="",
        square_meters=40,
    )


def test_diff_identifies_added_and_unchanged():
    new_listings = [make_listing("1"), make_listing("2"), make_listing("3")]

    diff = diff_listings(new_listings, {"2", "9"})

    assert [listing.listing_id for listing in diff.added] == ["1", "3"]
    assert [listing.listing_id for listing in diff.unchanged] == ["2"]


def test_diff_preserves_source_order():
    new_listings = [make_listing(str(idx)) for idx in (5, 1, 4, 2, 3)]

    diff = diff_listings(new_listings, set())

    assert [listing.listing_id for listing in diff.added] == ["5", "1", "4", "2", "3"]


def test_diff_collapses_duplicate_ids_first_wins():
    first = make_listing("A", title="first")
    second = make_listing("A", title="second")

    diff = diff_listings([first, second], set())

    assert diff.added == [first]
    assert diff.unchanged == []
