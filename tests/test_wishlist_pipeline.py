from __future__ import annotations

import pytest


class FakeSteam:
    def __init__(self, items=None, fail: bool = False):
        self.items = items or []
        self.fail = fail
        self.calls: list[str] = []

    def get_wishlist(self, steamid):
        from game_price_checker.errors import NetworkFailure

        self.calls.append(steamid)
        if self.fail:
            raise NetworkFailure("Steam GetWishlist is unreachable")
        return self.items


def _resolver():
    from game_price_checker.pipelines.resolvers import CatalogResolver
    from game_price_checker.schema import CatalogEntry

    return CatalogResolver(
        [CatalogEntry(1145360, "Hades"), CatalogEntry(504230, "Celeste"), CatalogEntry(620, "Portal 2")]
    )


def test_wishlist_flags_and_details() -> None:
    from game_price_checker.pipelines.wishlist_pipeline import run_wishlist_check
    from game_price_checker.schema import Status, WishlistItem

    steam = FakeSteam(
        [
            WishlistItem(appid=1145360, priority=3, date_added=1672617600),
            WishlistItem(appid=620, priority=0, date_added=0),
        ]
    )
    records = run_wishlist_check(
        ["Hades", "Celeste", "Portal 2", "Nope"], steamid=" 7656 ", resolver=_resolver(), steam=steam
    )

    assert steam.calls == ["7656"]
    hades, celeste, portal, nope = records
    assert (hades.on_wishlist, hades.date_added, hades.priority) == (True, "2023-01-02", 3)
    assert (celeste.on_wishlist, celeste.date_added, celeste.priority) == (False, None, None)
    assert (portal.on_wishlist, portal.priority) == (True, None)
    assert [r.status for r in records] == [
        Status.FOUND,
        Status.FOUND,
        Status.FOUND,
        Status.NOT_FOUND,
    ]


def test_wishlist_fetch_failure_marks_resolved_records_error() -> None:
    from game_price_checker.pipelines.wishlist_pipeline import run_wishlist_check
    from game_price_checker.schema import Status

    records = run_wishlist_check(
        ["Hades", "Nope"], steamid="1", resolver=_resolver(), steam=FakeSteam(fail=True)
    )
    assert [r.status for r in records] == [Status.ERROR, Status.NOT_FOUND]


def test_wishlist_requires_steamid_and_names() -> None:
    from game_price_checker.errors import ValidationFailure
    from game_price_checker.pipelines.wishlist_pipeline import run_wishlist_check

    steam = FakeSteam()
    with pytest.raises(ValidationFailure):
        run_wishlist_check(["Hades"], steamid="  ", resolver=_resolver(), steam=steam)
    with pytest.raises(ValidationFailure):
        run_wishlist_check([" "], steamid="1", resolver=_resolver(), steam=steam)
    assert steam.calls == []
