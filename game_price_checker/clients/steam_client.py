from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests

from ..config import CATALOG, REQUEST
from ..errors import CatalogUnavailable, NetworkFailure
from ..schema import CatalogEntry, WishlistItem
from ..utils.utilities import RateLimiter, load_json_cache, save_json_cache
from .http_client import ConfiguredHTTPJSONClient, HTTPJSONClient, HTTPRequestDefaults
from .parse import parse_int


class SteamClient:
    """
    Steam Web API: the full app list (the catalog) and per-user wishlists.

    The app list is cached for the lifetime of the client and on disk for `cache_ttl_s`;
    wishlists always hit the network since they reflect live user state.
    """

    def __init__(
        self,
        cache_path: str | Path | None = None,
        min_interval_s: float = CATALOG.min_interval_s,
        cache_ttl_s: float = CATALOG.cache_ttl_s,
    ):
        self._session = requests.Session()
        self.cache_path = Path(cache_path) if cache_path is not None else None
        self.cache_ttl_s = float(cache_ttl_s)
        self.stats: dict[str, int] = {
            "applist_hit": 0,
            "applist_disk_hit": 0,
            "applist_fetch": 0,
            # HTTP request counters.
            "http_applist": 0,
            "http_wishlist": 0,
        }
        base_http = HTTPJSONClient(self._session, stats=self.stats)
        self.ratelimiter = RateLimiter(min_interval_s=min_interval_s)
        headers = {"User-Agent": REQUEST.user_agent}
        self._applist_http = ConfiguredHTTPJSONClient(
            base_http,
            HTTPRequestDefaults(
                ratelimiter=self.ratelimiter,
                headers=headers,
                counter_key="http_applist",
                context_prefix="Steam GetAppList",
            ),
        )
        self._wishlist_http = ConfiguredHTTPJSONClient(
            base_http,
            HTTPRequestDefaults(
                ratelimiter=self.ratelimiter,
                headers=headers,
                counter_key="http_wishlist",
                context_prefix="Steam GetWishlist",
            ),
        )
        self._catalog: tuple[CatalogEntry, ...] | None = None

    # -------------------------------------------------
    # App list (catalog)
    # -------------------------------------------------
    @staticmethod
    def _parse_apps(raw: Any) -> tuple[CatalogEntry, ...]:
        apps = ((raw or {}).get("applist") or {}).get("apps") if isinstance(raw, dict) else None
        if not isinstance(apps, list):
            raise ValueError("payload has no applist.apps list")
        out: list[CatalogEntry] = []
        for app in apps:
            if not isinstance(app, dict):
                continue
            appid = parse_int(app.get("appid"))
            if appid is None or appid <= 0:
                continue
            out.append(CatalogEntry(id=appid, name=str(app.get("name", "") or "")))
        return tuple(out)

    def get_app_list(self) -> tuple[CatalogEntry, ...]:
        """
        Return the Steam catalog in the order the API lists it.

        Raises CatalogUnavailable if there is no fresh cache and the API cannot be reached.
        """
        if self._catalog is not None:
            self.stats["applist_hit"] += 1
            return self._catalog

        if self.cache_path is not None:
            cached = load_json_cache(self.cache_path, max_age_s=self.cache_ttl_s)
            if cached is not None:
                try:
                    self._catalog = self._parse_apps(cached)
                except ValueError:
                    logging.warning(
                        "Steam app list cache is in an incompatible format; ignoring it."
                    )
                else:
                    self.stats["applist_disk_hit"] += 1
                    logging.info(f"[CATALOG] Loaded {len(self._catalog)} apps from cache")
                    return self._catalog

        try:
            raw = self._applist_http.get_json(CATALOG.applist_url)
            catalog = self._parse_apps(raw)
        except (NetworkFailure, ValueError) as e:
            raise CatalogUnavailable(
                f"Failed to fetch Steam app list: {e}", context="Steam GetAppList"
            ) from e
        self.stats["applist_fetch"] += 1
        self._catalog = catalog
        if self.cache_path is not None:
            save_json_cache(raw, self.cache_path)
        logging.info(f"[CATALOG] Fetched {len(catalog)} apps from Steam")
        return catalog

    # -------------------------------------------------
    # Wishlist
    # -------------------------------------------------
    def get_wishlist(self, steamid: str) -> list[WishlistItem]:
        data = self._wishlist_http.get_json(
            CATALOG.wishlist_url,
            params={"steamid": steamid},
            context=f"steamid={steamid}",
        )
        response = data.get("response") if isinstance(data, dict) else None
        if not isinstance(response, dict):
            raise NetworkFailure(
                "Steam wishlist response is malformed", context=f"steamid={steamid}"
            )
        items: list[WishlistItem] = []
        # Private or empty wishlists come back without an items key.
        for it in response.get("items") or []:
            if not isinstance(it, dict):
                continue
            appid = parse_int(it.get("appid"))
            if appid is None:
                continue
            items.append(
                WishlistItem(
                    appid=appid,
                    priority=parse_int(it.get("priority")) or 0,
                    date_added=parse_int(it.get("date_added")) or 0,
                )
            )
        return items

    def format_cache_stats(self) -> str:
        s = self.stats
        return (
            f"applist hit={s['applist_hit']} disk={s['applist_disk_hit']} "
            f"fetch={s['applist_fetch']}, "
            f"{HTTPJSONClient.format_timing(s, key='http_applist')} "
            f"{HTTPJSONClient.format_timing(s, key='http_wishlist')}"
        )
