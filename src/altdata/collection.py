from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .records import Record
from .symbols import RecordKind, Symbol


@dataclass(frozen=True)
class Collection:
    as_of_date: date
    symbol: Symbol
    records: tuple[Record, ...]

    def __len__(self) -> int:
        return len(self.records)

    def of_kind(self, kind: RecordKind) -> tuple[Record, ...]:
        return tuple(record for record in self.records if record.kind is kind)

    def to_dict(self) -> dict[str, object]:
        return {
            "symbol": str(self.symbol),
            "as_of_date": self.as_of_date.isoformat(),
            "records": [record.to_dict() for record in self.records],
        }


def empty_collection(symbol: Symbol, as_of_date: date) -> Collection:
    return Collection(as_of_date=as_of_date, symbol=symbol, records=())


def assemble(symbol: Symbol, as_of_date: date, records: Iterable[Record]) -> Collection:
    stamped = [
        record if record.symbol is not None else record.with_symbol(symbol)
        for record in records
    ]
    # sorted() is stable: equal end_time keeps parse order.
    ordered = sorted(stamped, key=lambda record: record.end_time)
    return Collection(as_of_date=as_of_date, symbol=symbol, records=tuple(ordered))
