from typing import Optional


class AltDataError(Exception):
    pass


class InvalidSymbolKind(ValueError, AltDataError):
    def __init__(self, symbol: object, expected_suffix: str, locator_name: str) -> None:
        super().__init__(
            f"{locator_name}.resolve(): invalid symbol {symbol}, expected suffix {expected_suffix}"
        )
        self.symbol = symbol
        self.expected_suffix = expected_suffix


class ParseError(ValueError, AltDataError):
    def __init__(self, reason: str, symbol: Optional[object] = None) -> None:
        prefix = f"{symbol}: " if symbol is not None else ""
        super().__init__(f"{prefix}{reason}")
        self.reason = reason
        self.symbol = symbol


class SelectionError(RuntimeError, AltDataError):
    pass


class EvaluationCancelled(RuntimeError, AltDataError):
    pass
