from dataclasses import dataclass
from enum import Enum


class RecordKind(Enum):
    ESTIMATE = "estimate"
    CALENDAR = "calendar"
    COARSE_FUNDAMENTAL = "coarse_fundamental"


KIND_SUFFIXES: dict[RecordKind, str] = {
    RecordKind.ESTIMATE: ".E",
    RecordKind.CALENDAR: ".C",
    RecordKind.COARSE_FUNDAMENTAL: ".U",
}


@dataclass(frozen=True)
class Symbol:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("symbol value must be a non-empty string")

    @property
    def suffix(self) -> str:
        head, dot, tail = self.value.rpartition(".")
        if not dot or not head or not tail:
            return ""
        return f".{tail}"

    @property
    def base(self) -> str:
        suffix = self.suffix
        if not suffix:
            return self.value
        return self.value[: -len(suffix)]

    def has_kind(self, kind: RecordKind) -> bool:
        return self.suffix == KIND_SUFFIXES[kind]

    def __str__(self) -> str:
        return self.value


def kind_for_symbol(symbol: Symbol) -> RecordKind:
    suffix = symbol.suffix
    for kind, kind_suffix in KIND_SUFFIXES.items():
        if kind_suffix == suffix:
            return kind
    raise ValueError(f"no record kind uses the suffix of {symbol.value!r}")


def symbol_for(base: str, kind: RecordKind) -> Symbol:
    return Symbol(f"{base}{KIND_SUFFIXES[kind]}")
