import threading
from collections.abc import Iterable, Sequence
from typing import Callable, Optional

from src.altdata.collection import Collection
from src.altdata.errors import SelectionError
from src.altdata.records import Record
from src.altdata.subscription import SubscriptionConfig, UniverseSettings
from src.altdata.symbols import RecordKind, Symbol


Selector = Callable[[Sequence[Record]], Iterable[Symbol]]


class Universe:
    """A dynamic symbol set driven by one data feed.

    The injected selector receives the feed's records for a single tick,
    already filtered to ``config.kind``, and returns the symbols that should
    make up the universe. Failures are raised as ``SelectionError``; there is
    no fallback membership.
    """

    def __init__(
        self,
        config: SubscriptionConfig,
        selector: Selector,
        universe_settings: Optional[UniverseSettings] = None,
    ) -> None:
        if not callable(selector):
            raise TypeError("selector must be callable")
        self.config = config
        self.universe_settings = universe_settings or UniverseSettings()
        self._selector = selector
        self._lock = threading.Lock()

    @property
    def symbol(self) -> Symbol:
        return self.config.symbol

    @property
    def kind(self) -> RecordKind:
        return self.config.kind

    def select_symbols(self, collection: Collection) -> frozenset[Symbol]:
        records = collection.of_kind(self.kind)
        with self._lock:
            try:
                selected = frozenset(self._selector(records))
            except SelectionError:
                raise
            except Exception as error:
                raise SelectionError(
                    f"selector for {self.symbol} failed on {collection.as_of_date}: {error}"
                ) from error

        invalid = [item for item in selected if not isinstance(item, Symbol)]
        if invalid:
            raise SelectionError(
                f"selector for {self.symbol} returned non-symbol values: {invalid!r}"
            )
        return selected
