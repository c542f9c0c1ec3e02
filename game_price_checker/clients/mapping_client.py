from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests

from ..config import MAPPING, REQUEST
from ..errors import NetworkFailure
from .http_client import ConfiguredHTTPJSONClient, HTTPJSONClient, HTTPRequestDefaults
from .parse import as_str, get_list_of_dicts, parse_int


@dataclass(frozen=True)
class MappedItem:
    name: str
    foreign_id: int


@dataclass(frozen=True)
class MappingResponse:
    items: list[MappedItem] = field(default_factory=list)
    failed_to_map: list[str] = field(default_factory=list)


class MappingClient:
    """Remote name -> Steam appid mapping service (one POST per batch of names)."""

    def __init__(self, *, url: str = MAPPING.url, item_type: str = MAPPING.item_type):
        self.url = url
        self.item_type = item_type
        self._session = requests.Session()
        self.stats: dict[str, int] = {"http_map": 0}
        self._http = ConfiguredHTTPJSONClient(
            HTTPJSONClient(self._session, stats=self.stats),
            HTTPRequestDefaults(
                headers={"Content-Type": "application/json", "User-Agent": REQUEST.user_agent},
                counter_key="http_map",
                context_prefix="Name mapping",
            ),
        )

    def map_names(self, names: list[str]) -> MappingResponse:
        data = self._http.post_json(
            self.url,
            json_body={"type": self.item_type, "names": list(names)},
            context=f"{len(names)} names",
        )
        if not isinstance(data, dict):
            raise NetworkFailure("Name mapping response is malformed", context="Name mapping")

        items: list[MappedItem] = []
        for it in get_list_of_dicts(data.get("items")):
            foreign_id = parse_int(it.get("foreign_id"))
            if foreign_id is None or foreign_id <= 0:
                logging.warning(f"Name mapping returned an item without a usable id: {it!r}")
                continue
            items.append(MappedItem(name=as_str(it.get("name")), foreign_id=foreign_id))
        failed_raw = data.get("failedToMap")
        failed = [as_str(n) for n in failed_raw] if isinstance(failed_raw, list) else []
        return MappingResponse(items=items, failed_to_map=[n for n in failed if n])
