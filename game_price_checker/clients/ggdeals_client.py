from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from ..config import PRICING, REQUEST
from ..errors import NetworkFailure, ValidationFailure
from .http_client import ConfiguredHTTPJSONClient, HTTPJSONClient, HTTPRequestDefaults


class GGDealsClient:
    """
    gg.deals prices by Steam appid.

    One call per chunk of at most `PRICING.batch_size` ids. Pacing between chunks is owned by
    the price pipeline, not by this client. Price data is never cached.
    """

    def __init__(self, api_key: str, *, url: str = PRICING.url):
        api_key = str(api_key or "").strip()
        if not api_key:
            raise ValidationFailure("Please enter your gg.deals API key")
        self._api_key = api_key
        self.url = url
        self._session = requests.Session()
        self.stats: dict[str, int] = {
            "chunks_ok": 0,
            "chunks_failed": 0,
            # HTTP request counters.
            "http_prices": 0,
        }
        base_http = HTTPJSONClient(self._session, stats=self.stats, secrets=(api_key,))
        self._http = ConfiguredHTTPJSONClient(
            base_http,
            HTTPRequestDefaults(
                headers={"User-Agent": REQUEST.user_agent},
                counter_key="http_prices",
                context_prefix="gg.deals prices",
            ),
        )

    def get_prices(self, appids: list[int]) -> dict[str, Any]:
        """
        Fetch prices for one chunk and return the `data` mapping (appid string -> item or None).

        Raises NetworkFailure for transport/status errors and for payloads whose `success` flag
        is not true.
        """
        if not appids:
            return {}
        if len(appids) > PRICING.batch_size:
            raise ValueError(f"at most {PRICING.batch_size} ids per request, got {len(appids)}")
        ids = ",".join(str(int(i)) for i in appids)
        # Keep the commas in `ids` literal; only the key needs escaping.
        url = f"{self.url}?key={quote(self._api_key, safe='')}&ids={ids}"
        context = f"{len(appids)} ids ({appids[0]}..{appids[-1]})"
        try:
            payload = self._http.get_json(url, context=context)
            if not isinstance(payload, dict) or payload.get("success") is not True:
                raise NetworkFailure(
                    "API returned unsuccessful response", context=f"gg.deals prices: {context}"
                )
        except NetworkFailure:
            self.stats["chunks_failed"] += 1
            raise
        self.stats["chunks_ok"] += 1
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    def format_cache_stats(self) -> str:
        s = self.stats
        return (
            f"chunks ok={s['chunks_ok']} failed={s['chunks_failed']}, "
            f"{HTTPJSONClient.format_timing(s, key='http_prices')}"
        )
