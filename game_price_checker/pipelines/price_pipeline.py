from __future__ import annotations

import logging
import threading
from collections import deque
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Iterable

from ..clients.badges_client import BadgesClient
from ..clients.ggdeals_client import GGDealsClient
from ..clients.parse import as_str, parse_decimal
from ..config import PRICING
from ..errors import NetworkFailure, PriceCheckError, ValidationFailure
from ..schema import GameRecord, ResolutionResult, Status
from ..utils.utilities import CancellationToken, RateLimiter
from .resolvers import NameResolver

_CENTS = Decimal("0.01")


class PipelineState(str, Enum):
    IDLE = "idle"
    DRAINING = "draining"
    WAITING = "waiting"


# -------------------------------------------------
# Result aggregation
# -------------------------------------------------
def _to_cents(value: Decimal) -> Decimal | None:
    try:
        return value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Too many digits to represent in cents (e.g. "1E+30").
        return None


def cheapest_price(prices: dict[str, Any] | None) -> Decimal | None:
    """
    Lowest of the current retail and keyshop prices, rounded to cents for display.

    Non-numeric, missing or unrepresentably large values are ignored; comparison happens on the
    unrounded values.
    """
    if not isinstance(prices, dict):
        return None
    candidates = [
        d
        for d in (
            parse_decimal(prices.get("currentRetail")),
            parse_decimal(prices.get("currentKeyshops")),
        )
        if d is not None and _to_cents(d) is not None
    ]
    if not candidates:
        return None
    return _to_cents(min(candidates))


class ResultAggregator:
    """Fold chunk payloads (or chunk failures) into the session's pending records."""

    def __init__(
        self,
        records: list[GameRecord],
        *,
        on_update: Callable[[GameRecord], None] | None = None,
    ):
        self.records = records
        self._on_update = on_update

    def _pending_in(self, chunk_ids: Iterable[int]) -> list[GameRecord]:
        ids = set(chunk_ids)
        return [r for r in self.records if r.status is Status.PENDING and r.id in ids]

    def _emit(self, record: GameRecord) -> None:
        if self._on_update is not None:
            self._on_update(record)

    def apply_chunk(self, chunk_ids: list[int], data: dict[str, Any]) -> None:
        for record in self._pending_in(chunk_ids):
            item = data.get(str(record.id))
            if isinstance(item, dict):
                prices = item.get("prices")
                record.price = cheapest_price(prices)
                if isinstance(prices, dict):
                    record.currency = as_str(prices.get("currency")) or record.currency
                record.transition(Status.FOUND)
            else:
                record.transition(Status.NOT_FOUND)
            self._emit(record)

    def mark_error(self, chunk_ids: list[int]) -> None:
        for record in self._pending_in(chunk_ids):
            record.transition(Status.ERROR)
            self._emit(record)

    @property
    def completed_count(self) -> int:
        return sum(1 for r in self.records if r.status is not Status.PENDING)

    @property
    def is_complete(self) -> bool:
        return bool(self.records) and self.completed_count == len(self.records)


# -------------------------------------------------
# Queue + rate-limited fetcher
# -------------------------------------------------
class BatchQueue:
    """
    FIFO of appids awaiting a price lookup, drained in chunks of `batch_size`.

    Safe to `clear()` from another thread while the drain loop takes chunks.
    """

    def __init__(self, batch_size: int = PRICING.batch_size):
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self.batch_size = batch_size
        self._items: deque[int] = deque()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def extend(self, appids: Iterable[int]) -> None:
        ids = [int(a) for a in appids]
        with self._lock:
            self._items.extend(ids)

    def next_chunk(self) -> list[int]:
        chunk: list[int] = []
        with self._lock:
            while self._items and len(chunk) < self.batch_size:
                chunk.append(self._items.popleft())
        return chunk

    def clear(self) -> int:
        with self._lock:
            dropped = len(self._items)
            self._items.clear()
        return dropped


class PriceFetcher:
    """
    Drain the queue one chunk at a time: one request, then a pause before the next chunk.

    Only one drain loop runs at a time; a second `drain()` while one is active returns False
    immediately. `cancel()` empties the queue and interrupts the inter-chunk pause; a request
    that is already in flight completes and its results are still applied.
    """

    def __init__(
        self,
        client: GGDealsClient,
        aggregator: ResultAggregator,
        *,
        queue: BatchQueue | None = None,
        limiter: RateLimiter | None = None,
        cancel: CancellationToken | None = None,
        on_wait: Callable[[float], None] | None = None,
    ):
        self.client = client
        self.aggregator = aggregator
        self.queue = queue or BatchQueue()
        self.limiter = limiter or RateLimiter(min_interval_s=PRICING.batch_delay_s)
        self.cancel_token = cancel or CancellationToken()
        self._on_wait = on_wait
        self._lock = threading.Lock()
        self.state = PipelineState.IDLE
        self.requests_issued = 0

    @property
    def active(self) -> bool:
        return self._lock.locked()

    def enqueue(self, records: Iterable[GameRecord]) -> int:
        appids = [r.id for r in records if r.status is Status.PENDING and r.id]
        self.queue.extend(appids)
        return len(appids)

    def cancel(self) -> int:
        self.cancel_token.cancel()
        dropped = self.queue.clear()
        if dropped:
            logging.info(f"[PRICES] Cancelled; dropped {dropped} queued ids")
        return dropped

    def drain(self) -> bool:
        if not self._lock.acquire(blocking=False):
            logging.debug("[PRICES] Drain already in progress; ignoring")
            return False
        try:
            self.cancel_token.reset()
            while self.queue and not self.cancel_token.cancelled:
                chunk = self.queue.next_chunk()
                if not chunk:
                    break
                self.state = PipelineState.DRAINING
                self._fetch_chunk(chunk)
                # The pause is measured from the end of the chunk, not from the request.
                self.limiter.mark()
                if not self.queue or self.cancel_token.cancelled:
                    break
                self.state = PipelineState.WAITING
                wait_s = self.limiter.remaining()
                logging.info(
                    f"[PRICES] Waiting {wait_s:.0f}s before next batch "
                    f"({len(self.queue)} ids queued)"
                )
                if self._on_wait is not None:
                    self._on_wait(wait_s)
                if not self.limiter.wait(self.cancel_token):
                    break
        finally:
            self.state = PipelineState.IDLE
            self._lock.release()
        return True

    def _fetch_chunk(self, chunk: list[int]) -> None:
        self.requests_issued += 1
        logging.info(f"[PRICES] Request {self.requests_issued}: {len(chunk)} ids")
        try:
            data = self.client.get_prices(chunk)
        except NetworkFailure as e:
            logging.error(f"[PRICES] Marking {len(chunk)} ids as error: {e}")
            self.aggregator.mark_error(chunk)
            return
        self.aggregator.apply_chunk(chunk, data)


# -------------------------------------------------
# Session
# -------------------------------------------------
def build_game_records(
    results: list[ResolutionResult],
    *,
    cards: BadgesClient | None = None,
    default_currency: str = PRICING.default_currency,
) -> list[GameRecord]:
    records: list[GameRecord] = []
    for res in results:
        if not res.resolved:
            # Unresolved names are terminal from the start and never enqueued.
            records.append(
                GameRecord(
                    name=res.requested_name, currency=default_currency, status=Status.NOT_FOUND
                )
            )
            continue
        records.append(
            GameRecord(
                name=res.requested_name,
                id=res.id,
                currency=default_currency,
                trading_cards=cards.cards_for(res.id) if cards is not None else None,
                matched_name=res.matched_name,
            )
        )
    return records


class PriceCheckSession:
    """
    One price-check run: resolve names, enqueue resolved ids, drain prices.

    Records live for the session and are mutated in place; `on_update` sees each record as it
    reaches a terminal status.
    """

    def __init__(
        self,
        resolver: NameResolver,
        client: GGDealsClient,
        *,
        cards: BadgesClient | None = None,
        limiter: RateLimiter | None = None,
        batch_size: int = PRICING.batch_size,
        on_update: Callable[[GameRecord], None] | None = None,
        on_wait: Callable[[float], None] | None = None,
    ):
        if batch_size > PRICING.batch_size:
            raise ValueError(f"batch_size must be <= {PRICING.batch_size}, got {batch_size}")
        self.resolver = resolver
        self.cards = cards
        self.records: list[GameRecord] = []
        self.aggregator = ResultAggregator(self.records, on_update=on_update)
        self.fetcher = PriceFetcher(
            client,
            self.aggregator,
            queue=BatchQueue(batch_size),
            limiter=limiter,
            on_wait=on_wait,
        )
        self._on_update = on_update

    def submit(self, names: list[str]) -> list[GameRecord]:
        """Resolve `names` into fresh records and queue the resolved ones (does not drain)."""
        names = [n.strip() for n in names if n and n.strip()]
        if not names:
            raise ValidationFailure("Please enter game names")
        if self.fetcher.active:
            raise PriceCheckError("A price check is already running")

        results = self.resolver.resolve(names)
        records = build_game_records(results, cards=self.cards)
        self.records[:] = records
        self.fetcher.queue.clear()
        queued = self.fetcher.enqueue(self.records)
        unresolved = len(self.records) - queued
        logging.info(
            f"[PRICES] {len(self.records)} names: {queued} resolved via {self.resolver.label}, "
            f"{unresolved} not found"
        )
        if self._on_update is not None:
            for r in self.records:
                if r.status is Status.NOT_FOUND:
                    self._on_update(r)
        return self.records

    def run(self, names: list[str]) -> list[GameRecord]:
        self.submit(names)
        self.fetcher.drain()
        return self.records

    def cancel(self) -> int:
        return self.fetcher.cancel()

    @property
    def completed_count(self) -> int:
        return self.aggregator.completed_count

    @property
    def is_complete(self) -> bool:
        return self.aggregator.is_complete
