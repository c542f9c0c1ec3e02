from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------


class Status(str, Enum):
    PENDING = "pending"
    FOUND = "found"
    NOT_FOUND = "not-found"
    ERROR = "error"


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    name: str


@dataclass(frozen=True)
class ResolutionResult:
    requested_name: str
    id: int | None = None
    matched_name: str | None = None

    @property
    def resolved(self) -> bool:
        # Steam appids are positive; 0 is the "unresolved" marker on records.
        return bool(self.id)


@dataclass(frozen=True)
class WishlistItem:
    appid: int
    priority: int
    date_added: int


class _StatusMixin:
    status: Status

    def transition(self, status: Status) -> None:
        """
        Move a pending record to a terminal status.

        Records never go back to pending and terminal statuses are never overwritten.
        """
        if self.status is not Status.PENDING:
            raise ValueError(f"cannot move record from {self.status.value} to {status.value}")
        if status is Status.PENDING:
            raise ValueError("records cannot re-enter pending")
        self.status = status


@dataclass
class GameRecord(_StatusMixin):
    name: str
    id: int = 0
    price: Decimal | None = None
    currency: str = "USD"
    status: Status = Status.PENDING
    trading_cards: int | None = None
    matched_name: str | None = None


@dataclass
class WishlistRecord(_StatusMixin):
    name: str
    id: int = 0
    on_wishlist: bool = False
    date_added: str | None = None
    priority: int | None = None
    status: Status = Status.PENDING


# -----------------------------------------------------------------------------
# CSV schema / column sets
# -----------------------------------------------------------------------------

NA = "N/A"

PRICE_COLUMNS = ("Game Name", "Price", "Currency", "Status")
PRICE_COLUMNS_WITH_CARDS = ("Game Name", "Price", "Currency", "Trading Cards", "Status")
WISHLIST_COLUMNS = ("Game Name", "On Wishlist", "Date Added", "Priority", "Status")

# CLI strategy selection
STRATEGIES = {"catalog", "mapping"}
