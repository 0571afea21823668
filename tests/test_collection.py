from datetime import date, datetime, timezone
import importlib
import json


collection_mod = importlib.import_module("src.altdata.collection")
parsers = importlib.import_module("src.altdata.parsers")
records = importlib.import_module("src.altdata.records")
symbols = importlib.import_module("src.altdata.symbols")

Symbol = symbols.Symbol
RecordKind = symbols.RecordKind
EstimateRecord = records.EstimateRecord
assemble = collection_mod.assemble


def _estimate(marker, year, quarter):
    return EstimateRecord(
        fiscal_year=year,
        fiscal_quarter=quarter,
        end_time=parsers.fiscal_period_start(year, quarter),
        id=marker,
    )


def test_assemble_sorts_by_end_time():
    result = assemble(
        Symbol("ABC"),
        date(2020, 6, 1),
        [_estimate("q3", 2020, 3), _estimate("q1", 2020, 1), _estimate("q2", 2020, 2)],
    )

    assert [r.id for r in result.records] == ["q1", "q2", "q3"]
    assert all(a.end_time <= b.end_time for a, b in zip(result.records, result.records[1:]))


def test_assemble_keeps_parse_order_for_equal_timestamps():
    result = assemble(
        Symbol("ABC"),
        date(2020, 6, 1),
        [
            _estimate("late", 2020, 2),
            _estimate("first", 2020, 1),
            _estimate("second", 2020, 1),
            _estimate("third", 2020, 1),
        ],
    )

    assert [r.id for r in result.records] == ["first", "second", "third", "late"]


def test_assemble_stamps_owning_symbol_on_symbolless_records():
    result = assemble(Symbol("ABC"), date(2020, 6, 1), [_estimate("q1", 2020, 1)])

    assert result.symbol == Symbol("ABC")
    assert result.records[0].symbol == Symbol("ABC")


def test_assemble_keeps_symbols_already_on_records():
    rows = parsers.parse_coarse(
        "A,AAPL,10,1,10,True\nB,SPY,20,1,20,True\n",
        Symbol("coarse-usa.U"),
        date(2020, 1, 2),
    )

    result = assemble(Symbol("coarse-usa.U"), date(2020, 1, 2), rows)

    assert [r.symbol for r in result.records] == [Symbol("AAPL"), Symbol("SPY")]


def test_assemble_does_not_touch_input_records():
    original = _estimate("q1", 2020, 1)
    assemble(Symbol("ABC"), date(2020, 6, 1), [original])

    assert original.symbol is None


def test_assemble_with_no_records_is_empty():
    result = assemble(Symbol("ABC"), date(2020, 6, 1), [])

    assert result.records == ()
    assert len(result) == 0


def test_of_kind_filters_heterogeneous_collection():
    calendar_payload = json.dumps([{"date": "2020-01-01T00:00:00", "importance": "low"}])
    calendar = parsers.parse_calendar(calendar_payload, Symbol("X.C"), date(2020, 1, 1))
    mixed = [_estimate("q1", 2020, 1), *calendar]

    result = assemble(Symbol("X"), date(2020, 1, 1), mixed)

    assert [r.kind for r in result.of_kind(RecordKind.CALENDAR)] == [RecordKind.CALENDAR]
    assert [r.id for r in result.of_kind(RecordKind.ESTIMATE)] == ["q1"]


def test_collection_to_dict_serialises_records():
    result = assemble(Symbol("ABC"), date(2020, 6, 1), [_estimate("q1", 2020, 1)])

    payload = result.to_dict()

    assert payload["symbol"] == "ABC"
    assert payload["as_of_date"] == "2020-06-01"
    assert payload["records"][0]["end_time"] == datetime(2020, 1, 1, tzinfo=timezone.utc).isoformat()
    assert payload["records"][0]["eps"] is None
    assert payload["records"][0]["value"] == "0"
