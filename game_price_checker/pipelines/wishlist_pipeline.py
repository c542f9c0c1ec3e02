from __future__ import annotations

import logging

from ..clients.parse import date_from_epoch_seconds
from ..clients.steam_client import SteamClient
from ..errors import NetworkFailure, ValidationFailure
from ..schema import Status, WishlistItem, WishlistRecord
from .resolvers import NameResolver


def run_wishlist_check(
    names: list[str],
    *,
    steamid: str,
    resolver: NameResolver,
    steam: SteamClient,
) -> list[WishlistRecord]:
    """
    Check which of `names` are on a Steam user's wishlist.

    Resolved names end up `found` (on the wishlist or not), unresolved names `not-found`. If the
    wishlist cannot be fetched, resolved records are marked `error`.
    """
    steamid = str(steamid or "").strip()
    if not steamid:
        raise ValidationFailure("Please enter a Steam ID64")
    names = [n.strip() for n in names if n and n.strip()]
    if not names:
        raise ValidationFailure("Please enter game names")

    records: list[WishlistRecord] = []
    for res in resolver.resolve(names):
        if not res.resolved:
            records.append(WishlistRecord(name=res.requested_name, status=Status.NOT_FOUND))
        else:
            records.append(WishlistRecord(name=res.requested_name, id=res.id))

    pending = [r for r in records if r.status is Status.PENDING]
    if not pending:
        logging.info("[WISHLIST] No names resolved; skipping wishlist fetch")
        return records

    try:
        items = steam.get_wishlist(steamid)
    except NetworkFailure as e:
        logging.error(f"[WISHLIST] Failed to fetch Steam wishlist: {e}")
        for r in pending:
            r.transition(Status.ERROR)
        return records

    by_appid: dict[int, WishlistItem] = {}
    for it in items:
        by_appid.setdefault(it.appid, it)

    for r in pending:
        item = by_appid.get(r.id)
        if item is not None:
            r.on_wishlist = True
            r.date_added = date_from_epoch_seconds(item.date_added)
            # Steam reports unranked wishlist entries with priority 0.
            r.priority = item.priority or None
        r.transition(Status.FOUND)

    wishlisted = sum(1 for r in records if r.on_wishlist)
    logging.info(f"[WISHLIST] {wishlisted}/{len(records)} games are on the wishlist")
    return records
