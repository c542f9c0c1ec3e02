"""Game Price Checker - cheapest gg.deals prices and Steam wishlist checks for lists of games."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("game-price-checker")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
