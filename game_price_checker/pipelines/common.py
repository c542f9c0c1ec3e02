from __future__ import annotations

import logging


def log_cache_stats(clients: dict[str, object]) -> None:
    order: list[tuple[str, str]] = [
        ("steam", "[STEAM]"),
        ("badges", "[CARDS]"),
        ("ggdeals", "[PRICES]"),
    ]

    for key, label in order:
        client = clients.get(key)
        if client is None:
            continue
        fmt = getattr(client, "format_cache_stats", None)
        if not callable(fmt):
            continue
        logging.info(f"{label} Stats: {fmt()}")
