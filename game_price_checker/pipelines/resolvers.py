from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from ..clients.mapping_client import MappedItem, MappingClient
from ..config import MATCHING
from ..errors import CatalogUnavailable, NetworkFailure
from ..schema import CatalogEntry, ResolutionResult
from ..utils.utilities import fuzzy_score, normalize_game_name


class NameResolver:
    """Map free-text titles to Steam appids; one result per input name, in input order."""

    label = "resolver"

    def resolve(self, names: list[str]) -> list[ResolutionResult]:
        raise NotImplementedError


# -------------------------------------------------
# Local catalog matching
# -------------------------------------------------
class CatalogResolver(NameResolver):
    """
    Resolve names against a bulk catalog.

    Exact (case-insensitive, trimmed) equality wins; otherwise the first catalog entry where
    either name contains the other. "First" means catalog order as supplied, so reordering the
    catalog can change which entry a partial name resolves to. With policy="best", containing
    entries are ranked by fuzzy similarity instead (ties still keep catalog order).
    """

    label = "catalog"

    def __init__(self, catalog: Iterable[CatalogEntry], *, policy: str = MATCHING.policy):
        if policy not in {"first", "best"}:
            raise ValueError(f"unknown matching policy: {policy!r}")
        self.policy = policy
        # Blank catalog names would contain-match every query.
        self._entries: list[tuple[str, CatalogEntry]] = [
            (normalize_game_name(e.name), e) for e in catalog if normalize_game_name(e.name)
        ]
        self._exact: dict[str, CatalogEntry] = {}
        for norm, entry in self._entries:
            self._exact.setdefault(norm, entry)

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, name: str) -> CatalogEntry | None:
        query = normalize_game_name(name)
        if not query:
            return None
        exact = self._exact.get(query)
        if exact is not None:
            return exact

        if self.policy == "first":
            for norm, entry in self._entries:
                if query in norm or norm in query:
                    return entry
            return None

        best: CatalogEntry | None = None
        best_score = -1
        for norm, entry in self._entries:
            if query in norm or norm in query:
                score = fuzzy_score(query, norm)
                if score > best_score:
                    best, best_score = entry, score
        return best

    def resolve(self, names: list[str]) -> list[ResolutionResult]:
        out: list[ResolutionResult] = []
        for name in names:
            entry = self.find(name)
            if entry is None:
                logging.debug(f"[CATALOG] Not found: '{name}'")
                out.append(ResolutionResult(requested_name=name))
                continue
            if normalize_game_name(entry.name) != normalize_game_name(name):
                logging.debug(f"[CATALOG] Partial match for '{name}': '{entry.name}' ({entry.id})")
            out.append(ResolutionResult(requested_name=name, id=entry.id, matched_name=entry.name))
        return out


# -------------------------------------------------
# Remote mapping service
# -------------------------------------------------
class MappingServiceResolver(NameResolver):
    """
    Delegate matching to the remote mapping service (one request for the whole batch).

    The service answers with matched items and a list of names it could not map, without
    saying which input produced which item. Items are paired back to inputs by
    case-insensitive name first, explicit failures are honored next, and any leftover items
    are handed out in response order.
    """

    label = "mapping"

    def __init__(self, client: MappingClient):
        self.client = client

    def resolve(self, names: list[str]) -> list[ResolutionResult]:
        if not names:
            return []
        try:
            response = self.client.map_names(names)
        except NetworkFailure as e:
            raise CatalogUnavailable(
                "Failed to map game names. Please try again.", context=e.context, status=e.status
            ) from e

        by_name: dict[str, deque[MappedItem]] = {}
        for item in response.items:
            by_name.setdefault(normalize_game_name(item.name), deque()).append(item)
        failed = {normalize_game_name(n) for n in response.failed_to_map}

        assigned: list[MappedItem | None] = [None] * len(names)
        used: set[int] = set()
        # The service may collapse repeated names into one item; repeats share it.
        seen: dict[str, MappedItem] = {}
        for i, name in enumerate(names):
            norm = normalize_game_name(name)
            queue = by_name.get(norm)
            if queue:
                item = queue.popleft()
                used.add(id(item))
                seen[norm] = item
                assigned[i] = item
            elif norm in seen:
                assigned[i] = seen[norm]

        leftovers = deque(item for item in response.items if id(item) not in used)
        for i, name in enumerate(names):
            if assigned[i] is not None or normalize_game_name(name) in failed:
                continue
            if leftovers:
                assigned[i] = leftovers.popleft()

        if leftovers:
            logging.warning(
                f"Name mapping returned {len(leftovers)} item(s) that match no requested name"
            )

        return [
            ResolutionResult(requested_name=name)
            if item is None
            else ResolutionResult(requested_name=name, id=item.foreign_id, matched_name=item.name)
            for name, item in zip(names, assigned)
        ]
