from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import PurePosixPath

from .errors import InvalidSymbolKind
from .symbols import KIND_SUFFIXES, RecordKind, Symbol


class TransportMedium(Enum):
    LOCAL_FILE = "local-file"
    REMOTE_FILE = "remote-file"
    REST = "rest"


class FileFormat(Enum):
    LINE_DELIMITED = "line-delimited"
    COLLECTION = "whole-file-collection"


@dataclass(frozen=True)
class SourceDescriptor:
    location: str
    transport: TransportMedium
    format: FileFormat

    def to_dict(self) -> dict[str, object]:
        return {
            "location": self.location,
            "transport": self.transport.value,
            "format": self.format.value,
        }


@dataclass(frozen=True)
class SourceLayout:
    sub_path: tuple[str, ...]
    file_template: str
    transport: TransportMedium
    format: FileFormat


# {base} is the lower-cased identifier, {market} the part after "coarse-",
# {date} the as-of date as yyyymmdd.
SOURCE_LAYOUTS: dict[RecordKind, SourceLayout] = {
    RecordKind.ESTIMATE: SourceLayout(
        sub_path=("alternative", "estimize", "estimate"),
        file_template="{base}.zip",
        transport=TransportMedium.LOCAL_FILE,
        format=FileFormat.COLLECTION,
    ),
    RecordKind.CALENDAR: SourceLayout(
        sub_path=("alternative", "trading-economics"),
        file_template="{base}_calendar.zip",
        transport=TransportMedium.LOCAL_FILE,
        format=FileFormat.COLLECTION,
    ),
    RecordKind.COARSE_FUNDAMENTAL: SourceLayout(
        sub_path=("equity", "{market}", "fundamental", "coarse"),
        file_template="{date}.csv",
        transport=TransportMedium.LOCAL_FILE,
        format=FileFormat.LINE_DELIMITED,
    ),
}


def _market_from_base(base: str) -> str:
    prefix = "coarse-"
    if base.startswith(prefix) and len(base) > len(prefix):
        return base[len(prefix):]
    return base


class SourceLocator:
    def __init__(self, kind: RecordKind, data_folder: str) -> None:
        self.kind = kind
        self.data_folder = data_folder
        self._layout = SOURCE_LAYOUTS[kind]

    @property
    def suffix(self) -> str:
        return KIND_SUFFIXES[self.kind]

    def resolve(
        self, symbol: Symbol, as_of_date: date, is_live: bool = False
    ) -> SourceDescriptor:
        if not symbol.has_kind(self.kind):
            raise InvalidSymbolKind(symbol, self.suffix, f"SourceLocator[{self.kind.value}]")

        base = symbol.base.lower()
        fields = {
            "base": base,
            "market": _market_from_base(base),
            "date": as_of_date.strftime("%Y%m%d"),
        }
        parts = [part.format(**fields) for part in self._layout.sub_path]
        file_name = self._layout.file_template.format(**fields)
        location = PurePosixPath(self.data_folder, *parts, file_name).as_posix()
        return SourceDescriptor(
            location=location,
            transport=self._layout.transport,
            format=self._layout.format,
        )


def build_locators(data_folder: str) -> dict[RecordKind, SourceLocator]:
    return {kind: SourceLocator(kind, data_folder) for kind in SOURCE_LAYOUTS}
