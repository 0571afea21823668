from dataclasses import dataclass, field
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .symbols import RecordKind, Symbol, symbol_for


NEW_YORK = "America/New_York"
UTC = "UTC"


class Resolution(Enum):
    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown time zone: {name!r}") from exc


@dataclass(frozen=True)
class UniverseSettings:
    resolution: Resolution = Resolution.DAILY
    data_time_zone: str = NEW_YORK
    exchange_time_zone: str = NEW_YORK
    fill_forward: bool = True
    extended_hours: bool = False
    is_internal_feed: bool = False
    is_custom_data: bool = False

    def __post_init__(self) -> None:
        _zone(self.data_time_zone)
        _zone(self.exchange_time_zone)

    @property
    def data_tz(self) -> ZoneInfo:
        return _zone(self.data_time_zone)

    @property
    def exchange_tz(self) -> ZoneInfo:
        return _zone(self.exchange_time_zone)


@dataclass(frozen=True)
class SubscriptionConfig:
    symbol: Symbol
    kind: RecordKind
    settings: UniverseSettings = field(default_factory=UniverseSettings)

    def __post_init__(self) -> None:
        if not self.symbol.has_kind(self.kind):
            raise ValueError(f"symbol {self.symbol} does not carry the {self.kind.value} suffix")


def custom_data_config(symbol: Symbol, kind: RecordKind) -> SubscriptionConfig:
    return SubscriptionConfig(
        symbol=symbol,
        kind=kind,
        settings=UniverseSettings(
            resolution=Resolution.DAILY,
            data_time_zone=UTC,
            exchange_time_zone=UTC,
            fill_forward=False,
            extended_hours=False,
            is_internal_feed=False,
            is_custom_data=True,
        ),
    )


def coarse_universe_symbol(market: str = "usa") -> Symbol:
    return symbol_for(f"coarse-{market.lower()}", RecordKind.COARSE_FUNDAMENTAL)


def coarse_universe_config(market: str = "usa") -> SubscriptionConfig:
    return SubscriptionConfig(
        symbol=coarse_universe_symbol(market),
        kind=RecordKind.COARSE_FUNDAMENTAL,
        settings=UniverseSettings(
            resolution=Resolution.DAILY,
            data_time_zone=NEW_YORK,
            exchange_time_zone=NEW_YORK,
            fill_forward=False,
            extended_hours=False,
            is_internal_feed=True,
            is_custom_data=False,
        ),
    )
