from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

import pandas as pd

from ..schema import (
    NA,
    PRICE_COLUMNS,
    PRICE_COLUMNS_WITH_CARDS,
    WISHLIST_COLUMNS,
    GameRecord,
    WishlistRecord,
)


def _render(rows: list[list[str]], columns: Sequence[str]) -> str:
    # Every cell is a string, so pandas never emits NaN tokens or reformats numbers.
    df = pd.DataFrame(rows, columns=list(columns), dtype=str)
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def price_rows(records: list[GameRecord], *, trading_cards: bool) -> list[list[str]]:
    rows: list[list[str]] = []
    for r in records:
        row = [r.name, str(r.price) if r.price is not None else NA, r.currency]
        if trading_cards:
            row.append(str(r.trading_cards) if r.trading_cards else "")
        row.append(r.status.value)
        rows.append(row)
    return rows


def price_csv(records: list[GameRecord], *, trading_cards: bool = False) -> str:
    """Render price-check records; the output depends only on the records."""
    columns = PRICE_COLUMNS_WITH_CARDS if trading_cards else PRICE_COLUMNS
    return _render(price_rows(records, trading_cards=trading_cards), columns)


def wishlist_csv(records: list[WishlistRecord]) -> str:
    rows = [
        [
            r.name,
            "Yes" if r.on_wishlist else "No",
            r.date_added or NA,
            str(r.priority) if r.priority is not None else NA,
            r.status.value,
        ]
        for r in records
    ]
    return _render(rows, WISHLIST_COLUMNS)


def write_text(content: str, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the "\n" line endings byte-for-byte on every platform.
    with p.open("w", encoding="utf-8", newline="") as f:
        f.write(content)
