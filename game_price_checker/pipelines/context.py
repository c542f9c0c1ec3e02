from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..clients import BadgesClient, GGDealsClient, MappingClient, SteamClient
from ..config import MATCHING
from ..utils import load_credentials, resolve_api_key
from .resolvers import CatalogResolver, MappingServiceResolver, NameResolver


@dataclass(frozen=True)
class PipelineContext:
    cache_dir: Path
    credentials_path: Path | None = None
    strategy: str = "catalog"
    policy: str = MATCHING.policy

    def credentials(self) -> dict[str, Any]:
        return load_credentials(self.credentials_path)

    def steam_client(self) -> SteamClient:
        return SteamClient(cache_path=self.cache_dir / "steam_applist.json")

    def badges_client(self) -> BadgesClient:
        return BadgesClient(cache_path=self.cache_dir / "steam_badges.json")

    def pricing_client(self, api_key: str | None = None) -> GGDealsClient:
        return GGDealsClient(resolve_api_key(api_key, self.credentials()))

    def build_resolver(self, steam: SteamClient | None = None) -> NameResolver:
        """
        Resolver for the configured strategy. The catalog strategy loads the app list here, so
        an unavailable catalog fails before any record is created.
        """
        if self.strategy == "mapping":
            return MappingServiceResolver(MappingClient())
        if self.strategy == "catalog":
            steam = steam or self.steam_client()
            return CatalogResolver(steam.get_app_list(), policy=self.policy)
        raise ValueError(f"unknown resolver strategy: {self.strategy!r}")
