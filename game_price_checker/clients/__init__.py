"""API clients for catalog, wishlist, name-mapping and pricing sources."""

from .badges_client import BadgesClient
from .ggdeals_client import GGDealsClient
from .mapping_client import MappingClient, MappingResponse, MappedItem
from .steam_client import SteamClient

__all__ = [
    "BadgesClient",
    "GGDealsClient",
    "MappedItem",
    "MappingClient",
    "MappingResponse",
    "SteamClient",
]
