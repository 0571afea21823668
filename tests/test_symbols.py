import importlib

import pytest


symbols = importlib.import_module("src.altdata.symbols")
Symbol = symbols.Symbol
RecordKind = symbols.RecordKind


def test_symbol_splits_suffix_from_base():
    symbol = Symbol("ABC.E")

    assert symbol.base == "ABC"
    assert symbol.suffix == ".E"
    assert symbol.has_kind(RecordKind.ESTIMATE) is True
    assert symbol.has_kind(RecordKind.CALENDAR) is False


def test_symbol_without_suffix_has_empty_suffix():
    symbol = Symbol("ABC")

    assert symbol.suffix == ""
    assert symbol.base == "ABC"
    assert symbol.has_kind(RecordKind.ESTIMATE) is False


def test_suffix_match_is_case_sensitive():
    assert Symbol("united-states.c").has_kind(RecordKind.CALENDAR) is False
    with pytest.raises(ValueError):
        symbols.kind_for_symbol(Symbol("abc.e"))


def test_kind_for_symbol_uses_suffix_table():
    assert symbols.kind_for_symbol(Symbol("coarse-usa.U")) is RecordKind.COARSE_FUNDAMENTAL
    with pytest.raises(ValueError):
        symbols.kind_for_symbol(Symbol("ABC.X"))


def test_symbols_are_hashable_values():
    assert {Symbol("ABC"), Symbol("ABC")} == {Symbol("ABC")}


def test_empty_symbol_is_rejected():
    with pytest.raises(ValueError):
        Symbol("  ")
