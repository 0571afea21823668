import argparse
import json
import logging
import sys
from datetime import date
from typing import Optional

from src.universe.coarse import coarse_fundamental_universe, top_by_dollar_volume

from .config import Settings, load_settings
from .errors import AltDataError
from .fetch import SourceFetcher
from .pipeline import load_collection, run_universe_tick
from .source_registry import SourceLocator, build_locators
from .symbols import RecordKind, Symbol, kind_for_symbol


LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="altdata")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve")
    _ = resolve.add_argument("--symbol", required=True)
    _ = resolve.add_argument("--date", required=True)
    _ = resolve.add_argument("--live", action="store_true")

    load = subparsers.add_parser("load")
    _ = load.add_argument("--symbol", required=True)
    _ = load.add_argument("--date", required=True)
    _ = load.add_argument("--live", action="store_true")

    coarse_select = subparsers.add_parser("coarse-select")
    _ = coarse_select.add_argument("--date", required=True)
    _ = coarse_select.add_argument("--market", default="usa")
    _ = coarse_select.add_argument("--top", type=int, default=10)
    _ = coarse_select.add_argument("--min-price", type=float, default=5.0)

    return parser


def _parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as exc:
        raise ValueError("--date must be an ISO date (YYYY-MM-DD)") from exc


def _locator_for(symbol: Symbol, settings: Settings) -> SourceLocator:
    try:
        kind = kind_for_symbol(symbol)
    except ValueError as exc:
        raise ValueError(f"{symbol} has no recognised kind suffix (.E, .C or .U)") from exc
    return build_locators(settings.data_folder)[kind]


def _fetcher(settings: Settings) -> SourceFetcher:
    return SourceFetcher(
        max_retries=settings.fetch_max_retries,
        timeout_seconds=settings.request_timeout_seconds,
    )


def resolve_command(
    symbol: str, as_of: str, live: bool = False, settings: Optional[Settings] = None
) -> dict[str, object]:
    settings = settings or load_settings()
    parsed_symbol = Symbol(symbol)
    locator = _locator_for(parsed_symbol, settings)
    descriptor = locator.resolve(parsed_symbol, _parse_date(as_of), live)
    return descriptor.to_dict()


def load_command(
    symbol: str, as_of: str, live: bool = False, settings: Optional[Settings] = None
) -> dict[str, object]:
    settings = settings or load_settings()
    parsed_symbol = Symbol(symbol)
    locator = _locator_for(parsed_symbol, settings)
    result = load_collection(parsed_symbol, _parse_date(as_of), locator, _fetcher(settings), live)
    summary = result.collection.to_dict()
    summary["source"] = result.source.to_dict()
    summary["error"] = str(result.error) if result.error is not None else None
    return summary


def coarse_select_command(
    as_of: str,
    market: str = "usa",
    top: int = 10,
    min_price: float = 5.0,
    settings: Optional[Settings] = None,
) -> dict[str, object]:
    settings = settings or load_settings()
    universe = coarse_fundamental_universe(top_by_dollar_volume(top, min_price), market=market)
    locator = SourceLocator(RecordKind.COARSE_FUNDAMENTAL, settings.data_folder)
    as_of_date = _parse_date(as_of)
    tick = run_universe_tick(universe, as_of_date, locator, _fetcher(settings))
    error = tick.collection_result.error
    return {
        "universe": str(universe.symbol),
        "as_of_date": as_of_date.isoformat(),
        "selected": sorted(symbol.value for symbol in tick.selected),
        "error": str(error) if error is not None else None,
    }


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        if args.command == "resolve":
            output = resolve_command(args.symbol, args.date, args.live, settings=settings)
        elif args.command == "load":
            output = load_command(args.symbol, args.date, args.live, settings=settings)
        elif args.command == "coarse-select":
            output = coarse_select_command(
                args.date,
                market=args.market,
                top=args.top,
                min_price=args.min_price,
                settings=settings,
            )
        else:
            parser.print_help()
            return 1
    except (AltDataError, ValueError) as error:
        LOGGER.error("%s failed: %s", args.command, error)
        print(f"error: {error}", file=sys.stderr)
        return 2

    print(json.dumps(output, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
