"""Command-line interface for game price checker."""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from datetime import datetime
from pathlib import Path

from .errors import PriceCheckError
from .pipelines.common import log_cache_stats
from .pipelines.context import PipelineContext
from .pipelines.export_pipeline import price_csv, wishlist_csv, write_text
from .pipelines.price_pipeline import PriceCheckSession
from .pipelines.wishlist_pipeline import run_wishlist_check
from .schema import STRATEGIES, GameRecord, Status
from .utils import ProjectPaths, Progress, parse_name_lines, read_name_lines


def setup_logging(log_file: Path) -> None:
    """Configure logging to both console and file."""
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # File handler
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    # Console handler (stderr, so CSV on stdout stays clean)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Silence verbose HTTP debug logs by default
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    logging.info(f"Logging to file: {log_file}")


def _default_log_file(*, command_name: str, logs_dir: Path) -> Path:
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    return logs_dir / f"log-{ts}-{command_name}.log"


def _setup_logging_from_args(
    paths: ProjectPaths, log_file: Path | None, debug: bool, *, command_name: str
) -> None:
    setup_logging(log_file or _default_log_file(command_name=command_name, logs_dir=paths.data_logs))
    if debug:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.setLevel(logging.DEBUG)
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
    argv = " ".join(shlex.quote(a) for a in sys.argv)
    logging.info(f"Invocation: {argv}")


def _prepare_paths(args: argparse.Namespace) -> ProjectPaths:
    paths = ProjectPaths.from_root(args.run_dir)
    paths.ensure()
    return paths


def _read_names(source: str) -> list[str]:
    if source == "-":
        names = parse_name_lines(sys.stdin.read())
    else:
        p = Path(source)
        if not p.exists():
            raise SystemExit(f"Input file not found: {p}")
        names = read_name_lines(p)
    if not names:
        # Checked before any catalog or network work starts.
        raise SystemExit("Please enter game names")
    return names


def _emit_csv(content: str, out: Path | None) -> None:
    if out is None:
        sys.stdout.write(content)
        return
    write_text(content, out)
    logging.info(f"✔ CSV written: {out}")


def _command_prices(args: argparse.Namespace) -> None:
    paths = _prepare_paths(args)
    _setup_logging_from_args(paths, args.log_file, args.debug, command_name="prices")
    ctx = PipelineContext(
        cache_dir=args.cache or paths.data_cache,
        credentials_path=args.credentials or paths.root / "data" / "credentials.yaml",
        strategy=args.strategy,
        policy=args.policy,
    )
    names = _read_names(args.input)

    try:
        client = ctx.pricing_client(args.api_key)
        steam = ctx.steam_client() if args.strategy == "catalog" else None
        resolver = ctx.build_resolver(steam)
        cards = ctx.badges_client() if args.trading_cards else None
    except PriceCheckError as e:
        raise SystemExit(str(e)) from e

    progress = Progress("PRICES", total=len(names))

    def on_update(record: GameRecord) -> None:
        if record.status is Status.FOUND and record.price is not None:
            logging.debug(f"[PRICES] {record.name}: {record.price} {record.currency}")
        else:
            logging.debug(f"[PRICES] {record.name}: {record.status.value}")
        progress.maybe_log(session.completed_count)

    session = PriceCheckSession(resolver, client, cards=cards, on_update=on_update)
    try:
        session.run(names)
    except KeyboardInterrupt:
        session.cancel()
        pending = len(session.records) - session.completed_count
        logging.warning(f"[PRICES] Stopped by user; {pending} games left pending")
    except PriceCheckError as e:
        raise SystemExit(str(e)) from e

    logging.info(
        f"[PRICES] Done: {session.completed_count}/{len(session.records)} games processed"
    )
    log_cache_stats({"steam": steam, "badges": cards, "ggdeals": client})
    _emit_csv(price_csv(session.records, trading_cards=args.trading_cards), args.out)


def _command_wishlist(args: argparse.Namespace) -> None:
    paths = _prepare_paths(args)
    _setup_logging_from_args(paths, args.log_file, args.debug, command_name="wishlist")
    ctx = PipelineContext(cache_dir=args.cache or paths.data_cache, policy=args.policy)
    names = _read_names(args.input)

    steam = ctx.steam_client()
    try:
        resolver = ctx.build_resolver(steam)
        records = run_wishlist_check(names, steamid=args.steamid, resolver=resolver, steam=steam)
    except PriceCheckError as e:
        raise SystemExit(str(e)) from e

    log_cache_stats({"steam": steam})
    _emit_csv(wishlist_csv(records), args.out)


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        raise SystemExit(
            "Missing command. Use one of: prices, wishlist. "
            "Run `game-price-checker --help` for usage."
        )

    parser = argparse.ArgumentParser(
        description="Look up the cheapest prices (gg.deals) or Steam wishlist status for games"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_common = argparse.ArgumentParser(add_help=False)
    p_common.add_argument(
        "input", type=str, help="Text file with one game name per line ('-' reads stdin)"
    )
    p_common.add_argument(
        "--out", type=Path, help="Output CSV path (default: print the CSV to stdout)"
    )
    p_common.add_argument(
        "--run-dir",
        type=Path,
        default=Path("."),
        help="Directory holding data/cache and data/logs (default: current directory)",
    )
    p_common.add_argument("--cache", type=Path, help="Cache directory (default: data/cache)")
    p_common.add_argument(
        "--policy",
        choices=["first", "best"],
        default="first",
        help="Catalog partial-match policy: first in catalog order, or best fuzzy score",
    )
    p_common.add_argument(
        "--log-file",
        type=Path,
        help="Log file path (default: data/logs/log-<timestamp>-<command>.log)",
    )
    p_common.add_argument(
        "--debug", action="store_true", help="Enable DEBUG logging (default: INFO)"
    )

    p_prices = sub.add_parser(
        "prices",
        help="Find the cheapest current price for each game via gg.deals",
        parents=[p_common],
    )
    p_prices.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default="catalog",
        help="Name resolution: local Steam catalog or remote mapping service (default: catalog)",
    )
    p_prices.add_argument(
        "--api-key", type=str, help="gg.deals API key (default: $GGDEALS_API_KEY or credentials)"
    )
    p_prices.add_argument(
        "--credentials", type=Path, help="Credentials YAML (default: data/credentials.yaml)"
    )
    p_prices.add_argument(
        "--trading-cards",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Add a Trading Cards column from the Steam badges dataset (default: true)",
    )
    p_prices.set_defaults(_fn=_command_prices)

    p_wishlist = sub.add_parser(
        "wishlist",
        help="Check which games are on a Steam user's wishlist",
        parents=[p_common],
    )
    p_wishlist.add_argument("--steamid", type=str, required=True, help="Steam ID64 of the user")
    p_wishlist.set_defaults(_fn=_command_wishlist)

    ns = parser.parse_args(argv)
    ns._fn(ns)
    return


if __name__ == "__main__":
    main()
