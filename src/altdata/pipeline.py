import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from .collection import Collection, assemble, empty_collection
from .errors import EvaluationCancelled, ParseError
from .parsers import PARSERS
from .source_registry import SourceDescriptor, SourceLocator
from .symbols import Symbol


LOGGER = logging.getLogger(__name__)


class FetcherProtocol(Protocol):
    def fetch(self, descriptor: SourceDescriptor) -> Optional[str]: ...


class UniverseProtocol(Protocol):
    @property
    def symbol(self) -> Symbol: ...

    def select_symbols(self, collection: Collection) -> frozenset[Symbol]: ...


@dataclass(frozen=True)
class CollectionResult:
    collection: Collection
    source: SourceDescriptor
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class UniverseTickResult:
    collection_result: CollectionResult
    selected: frozenset[Symbol]


def load_collection(
    symbol: Symbol,
    as_of_date: date,
    locator: SourceLocator,
    fetcher: FetcherProtocol,
    is_live: bool = False,
) -> CollectionResult:
    source = locator.resolve(symbol, as_of_date, is_live)
    content = fetcher.fetch(source)
    if not content:
        LOGGER.debug("no content for %s on %s at %s", symbol, as_of_date, source.location)
        return CollectionResult(collection=empty_collection(symbol, as_of_date), source=source)

    parser = PARSERS[locator.kind]
    try:
        records = parser(content, symbol, as_of_date)
    except ParseError as error:
        LOGGER.warning("skipping %s on %s: %s", source.location, as_of_date, error)
        return CollectionResult(
            collection=empty_collection(symbol, as_of_date),
            source=source,
            error=error,
        )

    collection = assemble(symbol, as_of_date, records)
    LOGGER.debug("loaded %d records for %s on %s", len(collection), symbol, as_of_date)
    return CollectionResult(collection=collection, source=source)


def load_collections(
    symbols: Sequence[Symbol],
    as_of_date: date,
    locator: SourceLocator,
    fetcher: FetcherProtocol,
    max_workers: int = 4,
    is_live: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> list[CollectionResult]:
    if cancel_event is not None and cancel_event.is_set():
        raise EvaluationCancelled(f"load for {as_of_date} cancelled before start")

    # Resolve first so a bad suffix fails before anything is fetched.
    for symbol in symbols:
        locator.resolve(symbol, as_of_date, is_live)

    def load_one(symbol: Symbol) -> Optional[CollectionResult]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return load_collection(symbol, as_of_date, locator, fetcher, is_live)

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        # map() yields in submission order, not completion order.
        loaded = list(executor.map(load_one, symbols))

    if cancel_event is not None and cancel_event.is_set():
        raise EvaluationCancelled(f"load for {as_of_date} cancelled, discarding partial results")
    return [result for result in loaded if result is not None]


def run_universe_tick(
    universe: UniverseProtocol,
    as_of_date: date,
    locator: SourceLocator,
    fetcher: FetcherProtocol,
    is_live: bool = False,
) -> UniverseTickResult:
    collection_result = load_collection(universe.symbol, as_of_date, locator, fetcher, is_live)
    selected = universe.select_symbols(collection_result.collection)
    return UniverseTickResult(collection_result=collection_result, selected=selected)
