from collections.abc import Sequence
from decimal import Decimal
from typing import Optional

from src.altdata.records import CoarseFundamentalRecord, Record
from src.altdata.subscription import UniverseSettings, coarse_universe_config
from src.altdata.symbols import Symbol

from .selection import Selector, Universe


def coarse_fundamental_universe(
    selector: Selector,
    market: str = "usa",
    universe_settings: Optional[UniverseSettings] = None,
) -> Universe:
    return Universe(
        config=coarse_universe_config(market),
        selector=selector,
        universe_settings=universe_settings,
    )


def _coarse_rows(records: Sequence[Record]) -> list[CoarseFundamentalRecord]:
    return [record for record in records if isinstance(record, CoarseFundamentalRecord)]


def top_by_dollar_volume(count: int, min_price: float = 0.0) -> Selector:
    """Selector keeping the ``count`` most traded equities priced at or above
    ``min_price``. Ties on dollar volume are broken by symbol value."""
    if count < 0:
        raise ValueError("count must not be negative")
    floor = Decimal(str(min_price))

    def select(records: Sequence[Record]) -> list[Symbol]:
        eligible = [row for row in _coarse_rows(records) if row.price >= floor]
        ranked = sorted(eligible, key=lambda row: (-row.dollar_volume, row.symbol.value))
        return [row.symbol for row in ranked[:count]]

    return select


def with_fundamental_data(records: Sequence[Record]) -> list[Symbol]:
    return [row.symbol for row in _coarse_rows(records) if row.has_fundamental_data]
