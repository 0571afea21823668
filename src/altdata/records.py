from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union

from .symbols import RecordKind, Symbol


_ZERO = Decimal(0)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _text(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


class CalendarImportance(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class EstimateRecord:
    """Analyst estimate for one fiscal quarter of a company."""

    kind: ClassVar[RecordKind] = RecordKind.ESTIMATE

    fiscal_year: int
    fiscal_quarter: int
    end_time: datetime
    id: Optional[str] = None
    ticker: Optional[str] = None
    created_at: Optional[datetime] = None
    eps: Optional[Decimal] = None
    revenue: Optional[Decimal] = None
    username: Optional[str] = None
    analyst_id: Optional[str] = None
    flagged: bool = False
    symbol: Optional[Symbol] = None

    @property
    def value(self) -> Decimal:
        return self.eps if self.eps is not None else _ZERO

    def with_symbol(self, symbol: Symbol) -> "EstimateRecord":
        return replace(self, symbol=symbol)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "symbol": str(self.symbol) if self.symbol is not None else None,
            "end_time": self.end_time.isoformat(),
            "value": str(self.value),
            "id": self.id,
            "ticker": self.ticker,
            "fiscal_year": self.fiscal_year,
            "fiscal_quarter": self.fiscal_quarter,
            "created_at": _iso(self.created_at),
            "eps": _text(self.eps),
            "revenue": _text(self.revenue),
            "username": self.username,
            "analyst_id": self.analyst_id,
            "flagged": self.flagged,
        }

    def __str__(self) -> str:
        return (
            f"{self.ticker}(Q{self.fiscal_quarter} {self.fiscal_year}) :: "
            f"EPS: {self.eps} Revenue: {self.revenue} on {self.end_time:%Y%m%d} "
            f"by {self.username}({self.analyst_id})"
        )


@dataclass(frozen=True)
class CalendarRecord:
    """Economic calendar event.

    ``end_time`` is the release time, or ``last_update`` when the event was
    revised after its release.
    """

    kind: ClassVar[RecordKind] = RecordKind.CALENDAR

    release_time: datetime
    end_time: datetime
    importance: CalendarImportance
    calendar_id: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = None
    event: Optional[str] = None
    reference: Optional[str] = None
    source: Optional[str] = None
    actual: Optional[str] = None
    previous: Optional[str] = None
    forecast: Optional[str] = None
    te_forecast: Optional[str] = None
    url: Optional[str] = None
    date_span: Optional[str] = None
    last_update: Optional[datetime] = None
    revised: Optional[str] = None
    original_country: Optional[str] = None
    original_category: Optional[str] = None
    ticker: Optional[str] = None
    vendor_symbol: Optional[str] = None
    actual_value: Optional[Decimal] = None
    symbol: Optional[Symbol] = None

    @property
    def value(self) -> Decimal:
        return self.actual_value if self.actual_value is not None else _ZERO

    def with_symbol(self, symbol: Symbol) -> "CalendarRecord":
        return replace(self, symbol=symbol)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "symbol": str(self.symbol) if self.symbol is not None else None,
            "end_time": self.end_time.isoformat(),
            "value": str(self.value),
            "calendar_id": self.calendar_id,
            "date": self.release_time.isoformat(),
            "country": self.country,
            "category": self.category,
            "event": self.event,
            "reference": self.reference,
            "source": self.source,
            "actual": self.actual,
            "previous": self.previous,
            "forecast": self.forecast,
            "te_forecast": self.te_forecast,
            "url": self.url,
            "date_span": self.date_span,
            "importance": self.importance.value,
            "last_update": _iso(self.last_update),
            "revised": self.revised,
            "original_country": self.original_country,
            "original_category": self.original_category,
            "ticker": self.ticker,
            "vendor_symbol": self.vendor_symbol,
        }

    def __str__(self) -> str:
        label = self.vendor_symbol or self.ticker
        return (
            f"{label} ({self.country} - {self.category}): {self.event} : "
            f"Importance.{self.importance.name.title()}"
        )


@dataclass(frozen=True)
class CoarseFundamentalRecord:
    """One equity row of the daily coarse universe file."""

    kind: ClassVar[RecordKind] = RecordKind.COARSE_FUNDAMENTAL

    symbol: Symbol
    end_time: datetime
    sid: str
    price: Decimal
    volume: int
    dollar_volume: Decimal
    has_fundamental_data: bool
    price_factor: Decimal = Decimal(1)
    split_factor: Decimal = Decimal(1)

    @property
    def value(self) -> Decimal:
        return self.price

    @property
    def adjusted_price(self) -> Decimal:
        return self.price * self.price_factor * self.split_factor

    def with_symbol(self, symbol: Symbol) -> "CoarseFundamentalRecord":
        return replace(self, symbol=symbol)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "symbol": str(self.symbol),
            "end_time": self.end_time.isoformat(),
            "value": str(self.value),
            "sid": self.sid,
            "price": str(self.price),
            "volume": self.volume,
            "dollar_volume": str(self.dollar_volume),
            "has_fundamental_data": self.has_fundamental_data,
            "price_factor": str(self.price_factor),
            "split_factor": str(self.split_factor),
        }


Record = Union[EstimateRecord, CalendarRecord, CoarseFundamentalRecord]
