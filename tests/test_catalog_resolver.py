from __future__ import annotations


def _catalog(*pairs):
    from game_price_checker.schema import CatalogEntry

    return [CatalogEntry(id=i, name=n) for i, n in pairs]


def test_exact_match_is_case_insensitive() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    resolver = CatalogResolver(_catalog((10, "Half-Life 2")))
    [res] = resolver.resolve(["half-life 2"])
    assert res.id == 10
    assert res.matched_name == "Half-Life 2"


def test_exact_match_preferred_over_earlier_partial_match() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    resolver = CatalogResolver(_catalog((1, "Portal 2 Soundtrack"), (2, "Portal 2")))
    assert resolver.find("  PORTAL 2 ").id == 2


def test_partial_match_takes_first_entry_in_catalog_order() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    catalog = _catalog((5, "Doom Eternal"), (6, "Doom 3"))
    assert CatalogResolver(catalog).find("doom").id == 5
    assert CatalogResolver(list(reversed(catalog))).find("doom").id == 6


def test_partial_match_works_in_both_directions() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    resolver = CatalogResolver(_catalog((7, "Celeste")))
    # Query longer than the catalog name.
    assert resolver.find("Celeste (2018)").id == 7


def test_blank_catalog_names_never_match() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    resolver = CatalogResolver(_catalog((1, ""), (2, "   "), (3, "Hades")))
    assert len(resolver) == 1
    assert resolver.find("Some Unknown Game") is None


def test_empty_catalog_resolves_nothing() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    results = CatalogResolver([]).resolve(["Hades", "Celeste"])
    assert [r.id for r in results] == [None, None]
    assert [r.requested_name for r in results] == ["Hades", "Celeste"]


def test_duplicate_names_resolve_independently() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    results = CatalogResolver(_catalog((3, "Hades"))).resolve(["Hades", "hades", "Hades"])
    assert len(results) == 3
    assert all(r.id == 3 for r in results)


def test_best_policy_ranks_containing_entries_by_similarity() -> None:
    from game_price_checker.pipelines.resolvers import CatalogResolver

    catalog = _catalog((1, "Doom Eternal: The Ancient Gods"), (2, "Doom II"))
    assert CatalogResolver(catalog, policy="first").find("doom").id == 1
    assert CatalogResolver(catalog, policy="best").find("doom").id == 2


def test_unknown_policy_is_rejected() -> None:
    import pytest

    from game_price_checker.pipelines.resolvers import CatalogResolver

    with pytest.raises(ValueError):
        CatalogResolver([], policy="closest")
