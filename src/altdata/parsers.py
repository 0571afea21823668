import csv
import json
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from .errors import ParseError
from .records import (
    CalendarImportance,
    CalendarRecord,
    CoarseFundamentalRecord,
    EstimateRecord,
    Record,
)
from .symbols import RecordKind, Symbol


Parser = Callable[[str, Symbol, date], list[Record]]

_IMPORTANCE_CODES = {
    0: CalendarImportance.LOW,
    1: CalendarImportance.MEDIUM,
    2: CalendarImportance.HIGH,
}


def _parse_datetime(value: object) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _require_datetime(row: Mapping[str, object], key: str, symbol: Symbol) -> datetime:
    dt = _parse_datetime(row.get(key))
    if dt is None:
        raise ParseError(f"field {key!r} is missing or not a timestamp: {row.get(key)!r}", symbol)
    return dt


def _optional_datetime(row: Mapping[str, object], key: str, symbol: Symbol) -> Optional[datetime]:
    raw = row.get(key)
    if raw is None or raw == "":
        return None
    dt = _parse_datetime(raw)
    if dt is None:
        raise ParseError(f"field {key!r} is not a timestamp: {raw!r}", symbol)
    return dt


def _to_decimal(value: object) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        converted = Decimal(str(value))
        return converted if converted.is_finite() else None
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").rstrip("%").strip()
        if not cleaned or cleaned in {".", "NA", "NaN"}:
            return None
        try:
            parsed = Decimal(cleaned)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _optional_decimal(row: Mapping[str, object], key: str, symbol: Symbol) -> Optional[Decimal]:
    raw = row.get(key)
    if raw is None or raw == "":
        return None
    parsed = _to_decimal(raw)
    if parsed is None:
        raise ParseError(f"field {key!r} is not a number: {raw!r}", symbol)
    return parsed


def _require_int(row: Mapping[str, object], key: str, symbol: Symbol) -> int:
    raw = row.get(key)
    if isinstance(raw, bool):
        raise ParseError(f"field {key!r} is not an integer: {raw!r}", symbol)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            return int(raw.strip())
        except ValueError as exc:
            raise ParseError(f"field {key!r} is not an integer: {raw!r}", symbol) from exc
    raise ParseError(f"field {key!r} is missing or not an integer: {raw!r}", symbol)


def _optional_text(row: Mapping[str, object], key: str) -> Optional[str]:
    raw = row.get(key)
    if raw is None:
        return None
    return str(raw)


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return False


def _load_json_rows(content: str, symbol: Symbol) -> list[Mapping[str, object]]:
    try:
        decoded = json.loads(content, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise ParseError(f"payload is not valid JSON: {exc.msg}", symbol) from exc
    if not isinstance(decoded, list):
        raise ParseError("payload must be a JSON array", symbol)
    rows: list[Mapping[str, object]] = []
    for index, row in enumerate(decoded):
        if not isinstance(row, Mapping):
            raise ParseError(f"row {index} is not a JSON object", symbol)
        rows.append(row)
    return rows


def fiscal_period_start(fiscal_year: int, fiscal_quarter: int) -> datetime:
    return datetime(fiscal_year, fiscal_quarter * 3 - 2, 1, tzinfo=timezone.utc)


def parse_estimates(content: str, symbol: Symbol, as_of_date: date) -> list[Record]:
    if not content or not content.strip():
        return []

    records: list[Record] = []
    for row in _load_json_rows(content, symbol):
        fiscal_year = _require_int(row, "fiscal_year", symbol)
        fiscal_quarter = _require_int(row, "fiscal_quarter", symbol)
        if not 1 <= fiscal_quarter <= 4:
            raise ParseError(f"fiscal_quarter must be 1-4, got {fiscal_quarter}", symbol)
        try:
            end_time = fiscal_period_start(fiscal_year, fiscal_quarter)
        except (ValueError, OverflowError) as exc:
            raise ParseError(f"fiscal_year out of range: {fiscal_year}", symbol) from exc

        records.append(
            EstimateRecord(
                fiscal_year=fiscal_year,
                fiscal_quarter=fiscal_quarter,
                end_time=end_time,
                id=_optional_text(row, "id"),
                ticker=_optional_text(row, "ticker"),
                created_at=_optional_datetime(row, "created_at", symbol),
                eps=_optional_decimal(row, "eps", symbol),
                revenue=_optional_decimal(row, "revenue", symbol),
                username=_optional_text(row, "username"),
                analyst_id=_optional_text(row, "analyst_id"),
                flagged=_to_bool(row.get("flagged", False)),
            )
        )
    return records


# Wire keys are matched case-insensitively; the second spelling is the vendor's.
_CALENDAR_ALIASES: dict[str, tuple[str, ...]] = {
    "calendar_id": ("calendarid",),
    "date": ("date",),
    "country": ("country",),
    "category": ("category",),
    "event": ("event",),
    "reference": ("reference",),
    "source": ("source",),
    "actual": ("actual",),
    "previous": ("previous",),
    "forecast": ("forecast",),
    "te_forecast": ("teforecast",),
    "url": ("url",),
    "date_span": ("datespan",),
    "importance": ("importance",),
    "last_update": ("lastupdate",),
    "revised": ("revised",),
    "original_country": ("originalcountry", "ocountry"),
    "original_category": ("originalcategory", "ocategory"),
    "ticker": ("ticker",),
    "vendor_symbol": ("symbol",),
}


def _calendar_row(row: Mapping[str, object]) -> dict[str, object]:
    lowered = {str(key).lower(): value for key, value in row.items()}
    resolved: dict[str, object] = {}
    for field, aliases in _CALENDAR_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                resolved[field] = lowered[alias]
                break
    return resolved


def _parse_importance(value: object, symbol: Symbol) -> CalendarImportance:
    if value is None or value == "":
        return CalendarImportance.LOW
    if isinstance(value, int) and not isinstance(value, bool) and value in _IMPORTANCE_CODES:
        return _IMPORTANCE_CODES[value]
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {str(code) for code in _IMPORTANCE_CODES}:
            return _IMPORTANCE_CODES[int(text)]
        for importance in CalendarImportance:
            if importance.value == text:
                return importance
    raise ParseError(f"importance must be low, medium or high, got {value!r}", symbol)


def parse_calendar(content: str, symbol: Symbol, as_of_date: date) -> list[Record]:
    if not content or not content.strip():
        return []

    records: list[Record] = []
    for raw_row in _load_json_rows(content, symbol):
        row = _calendar_row(raw_row)
        release_time = _require_datetime(row, "date", symbol)
        last_update = _optional_datetime(row, "last_update", symbol)
        end_time = release_time
        if last_update is not None and last_update > release_time:
            end_time = last_update

        actual = _optional_text(row, "actual")
        records.append(
            CalendarRecord(
                release_time=release_time,
                end_time=end_time,
                importance=_parse_importance(row.get("importance"), symbol),
                calendar_id=_optional_text(row, "calendar_id"),
                country=_optional_text(row, "country"),
                category=_optional_text(row, "category"),
                event=_optional_text(row, "event"),
                reference=_optional_text(row, "reference"),
                source=_optional_text(row, "source"),
                actual=actual,
                previous=_optional_text(row, "previous"),
                forecast=_optional_text(row, "forecast"),
                te_forecast=_optional_text(row, "te_forecast"),
                url=_optional_text(row, "url"),
                date_span=_optional_text(row, "date_span"),
                last_update=last_update,
                revised=_optional_text(row, "revised"),
                original_country=_optional_text(row, "original_country"),
                original_category=_optional_text(row, "original_category"),
                ticker=_optional_text(row, "ticker"),
                vendor_symbol=_optional_text(row, "vendor_symbol"),
                actual_value=_to_decimal(actual),
            )
        )
    return records


def _coarse_decimal(raw: str, column: str, line_number: int, symbol: Symbol) -> Decimal:
    parsed = _to_decimal(raw)
    if parsed is None:
        raise ParseError(f"line {line_number}: {column} is not a number: {raw!r}", symbol)
    return parsed


def parse_coarse(content: str, symbol: Symbol, as_of_date: date) -> list[Record]:
    """Parse a daily coarse file: ``sid,symbol,close,volume,dollar_volume,
    has_fundamental_data[,price_factor,split_factor]`` per line."""
    if not content or not content.strip():
        return []

    end_time = datetime.combine(as_of_date, time(), tzinfo=timezone.utc) + timedelta(days=1)
    records: list[Record] = []
    for line_number, columns in enumerate(csv.reader(content.splitlines()), start=1):
        if not columns or all(not column.strip() for column in columns):
            continue
        if len(columns) not in (6, 8):
            raise ParseError(
                f"line {line_number}: expected 6 or 8 columns, got {len(columns)}", symbol
            )
        columns = [column.strip() for column in columns]
        volume = _to_decimal(columns[3])
        if volume is None or volume != volume.to_integral_value():
            raise ParseError(f"line {line_number}: volume is not an integer: {columns[3]!r}", symbol)
        try:
            row_symbol = Symbol(columns[1])
        except ValueError as exc:
            raise ParseError(f"line {line_number}: symbol is empty", symbol) from exc

        price_factor = Decimal(1)
        split_factor = Decimal(1)
        if len(columns) == 8:
            price_factor = _coarse_decimal(columns[6], "price_factor", line_number, symbol)
            split_factor = _coarse_decimal(columns[7], "split_factor", line_number, symbol)

        records.append(
            CoarseFundamentalRecord(
                symbol=row_symbol,
                end_time=end_time,
                sid=columns[0],
                price=_coarse_decimal(columns[2], "close", line_number, symbol),
                volume=int(volume),
                dollar_volume=_coarse_decimal(columns[4], "dollar_volume", line_number, symbol),
                has_fundamental_data=_to_bool(columns[5]),
                price_factor=price_factor,
                split_factor=split_factor,
            )
        )
    return records


PARSERS: dict[RecordKind, Parser] = {
    RecordKind.ESTIMATE: parse_estimates,
    RecordKind.CALENDAR: parse_calendar,
    RecordKind.COARSE_FUNDAMENTAL: parse_coarse,
}


def parse_payload(kind: RecordKind, content: str, symbol: Symbol, as_of_date: date) -> list[Record]:
    return PARSERS[kind](content, symbol, as_of_date)
