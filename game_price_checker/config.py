from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestConfig:
    timeout_s: int = 10
    user_agent: str = "Game Price Checker Tool"


@dataclass(frozen=True)
class PricingConfig:
    url: str = "https://api.gg.deals/v1/prices/by-steam-app-id/"
    # gg.deals accepts at most 100 ids per request and 100 requests per minute; one chunk per
    # minute keeps large lists comfortably below that.
    batch_size: int = 100
    batch_delay_s: float = 60.0
    default_currency: str = "USD"


@dataclass(frozen=True)
class CatalogConfig:
    applist_url: str = "https://api.steampowered.com/ISteamApps/GetAppList/v2/"
    wishlist_url: str = "https://api.steampowered.com/IWishlistService/GetWishlist/v1"
    badges_url: str = (
        "https://raw.githubusercontent.com/nolddor/steam-badges-db/refs/heads/main/data/"
        "badges.slim.json"
    )
    # The app list changes slowly; refetch it at most once a week.
    cache_ttl_s: float = 7 * 24 * 3600.0
    min_interval_s: float = 1.0


@dataclass(frozen=True)
class MappingConfig:
    url: str = "https://bunter.ejer.lol/api/items/map"
    item_type: str = "app"


@dataclass(frozen=True)
class MatchingConfig:
    # "first": first containing catalog entry in catalog order.
    # "best": highest rapidfuzz ratio among containing entries (ties keep catalog order).
    policy: str = "first"


@dataclass(frozen=True)
class CLIConfig:
    progress_every_n: int = 25
    progress_min_interval_s: float = 30.0


REQUEST = RequestConfig()
PRICING = PricingConfig()
CATALOG = CatalogConfig()
MAPPING = MappingConfig()
MATCHING = MatchingConfig()
CLI = CLIConfig()
