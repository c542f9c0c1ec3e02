from __future__ import annotations

from decimal import Decimal


def _records():
    from game_price_checker.schema import GameRecord, Status

    found = GameRecord(name="Portal 2", id=620, price=Decimal("7.49"), trading_cards=9)
    found.transition(Status.FOUND)
    missing = GameRecord(name='Game "X", Deluxe', status=Status.NOT_FOUND)
    return [found, missing]


def test_price_csv_quotes_every_field_and_uses_na() -> None:
    from game_price_checker.pipelines.export_pipeline import price_csv

    assert price_csv(_records()) == (
        '"Game Name","Price","Currency","Status"\n'
        '"Portal 2","7.49","USD","found"\n'
        '"Game ""X"", Deluxe","N/A","USD","not-found"\n'
    )


def test_price_csv_with_trading_cards_column() -> None:
    from game_price_checker.pipelines.export_pipeline import price_csv

    assert price_csv(_records(), trading_cards=True) == (
        '"Game Name","Price","Currency","Trading Cards","Status"\n'
        '"Portal 2","7.49","USD","9","found"\n'
        '"Game ""X"", Deluxe","N/A","USD","","not-found"\n'
    )


def test_price_csv_is_idempotent_and_header_only_when_empty() -> None:
    from game_price_checker.pipelines.export_pipeline import price_csv

    records = _records()
    assert price_csv(records) == price_csv(records)
    assert price_csv([]) == '"Game Name","Price","Currency","Status"\n'


def test_wishlist_csv() -> None:
    from game_price_checker.pipelines.export_pipeline import wishlist_csv
    from game_price_checker.schema import Status, WishlistRecord

    on = WishlistRecord(name="Hades", id=1145360)
    on.on_wishlist, on.date_added, on.priority = True, "2023-01-02", 3
    on.transition(Status.FOUND)
    off = WishlistRecord(name="Celeste", id=504230)
    off.transition(Status.FOUND)

    assert wishlist_csv([on, off]) == (
        '"Game Name","On Wishlist","Date Added","Priority","Status"\n'
        '"Hades","Yes","2023-01-02","3","found"\n'
        '"Celeste","No","N/A","N/A","found"\n'
    )


def test_write_text_keeps_line_endings(tmp_path) -> None:
    from game_price_checker.pipelines.export_pipeline import price_csv, write_text

    out = tmp_path / "nested" / "prices.csv"
    content = price_csv(_records())
    write_text(content, out)
    assert out.read_bytes() == content.encode("utf-8")
