from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests

from ..config import CATALOG, REQUEST
from ..errors import NetworkFailure
from ..utils.utilities import load_json_cache, save_json_cache
from .http_client import ConfiguredHTTPJSONClient, HTTPJSONClient, HTTPRequestDefaults
from .parse import parse_int


class BadgesClient:
    """
    Community dataset of Steam trading-card counts per appid.

    Enrichment is optional: if the dataset cannot be loaded, a warning is logged and every
    lookup returns None.
    """

    def __init__(
        self,
        cache_path: str | Path | None = None,
        *,
        url: str = CATALOG.badges_url,
        cache_ttl_s: float = CATALOG.cache_ttl_s,
    ):
        self.url = url
        self.cache_path = Path(cache_path) if cache_path is not None else None
        self.cache_ttl_s = float(cache_ttl_s)
        self._session = requests.Session()
        self.stats: dict[str, int] = {"http_badges": 0}
        self._http = ConfiguredHTTPJSONClient(
            HTTPJSONClient(self._session, stats=self.stats),
            HTTPRequestDefaults(
                headers={"User-Agent": REQUEST.user_agent},
                counter_key="http_badges",
                context_prefix="Trading cards dataset",
            ),
        )
        self._cards: dict[int, int] | None = None

    @staticmethod
    def _parse(raw: Any) -> dict[int, int]:
        out: dict[int, int] = {}
        if not isinstance(raw, dict):
            return out
        for k, v in raw.items():
            appid = parse_int(k)
            if appid is None:
                continue
            # Slim entries are plain counts; tolerate {"cards": n} objects as well.
            count = parse_int(v.get("cards") if isinstance(v, dict) else v)
            if count:
                out[appid] = count
        return out

    def load(self) -> dict[int, int]:
        if self._cards is not None:
            return self._cards
        if self.cache_path is not None:
            cached = load_json_cache(self.cache_path, max_age_s=self.cache_ttl_s)
            if isinstance(cached, dict):
                self._cards = self._parse(cached)
                return self._cards
        try:
            raw = self._http.get_json(self.url)
        except NetworkFailure as e:
            logging.warning(f"Failed to fetch trading cards data: {e}")
            self._cards = {}
            return self._cards
        self._cards = self._parse(raw)
        if self.cache_path is not None and self._cards:
            save_json_cache(raw, self.cache_path)
        logging.info(f"[CARDS] Loaded trading card counts for {len(self._cards)} apps")
        return self._cards

    def cards_for(self, appid: int) -> int | None:
        return self.load().get(int(appid))
