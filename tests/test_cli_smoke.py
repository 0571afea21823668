import importlib
import json
import zipfile


cli = importlib.import_module("src.altdata.cli")
config = importlib.import_module("src.altdata.config")


def _settings(tmp_path):
    return config.Settings(data_folder=str(tmp_path))


def test_cli_exposes_resolve_command():
    parser = cli.build_parser()
    args = parser.parse_args(["resolve", "--symbol", "ABC.E", "--date", "2020-01-01"])

    assert args.command == "resolve"
    assert args.symbol == "ABC.E"
    assert args.live is False


def test_cli_exposes_coarse_select_defaults():
    parser = cli.build_parser()
    args = parser.parse_args(["coarse-select", "--date", "2020-01-01"])

    assert args.market == "usa"
    assert args.top == 10
    assert args.min_price == 5.0


def test_resolve_command_returns_descriptor(tmp_path):
    result = cli.resolve_command("ABC.E", "2020-01-01", settings=_settings(tmp_path))

    assert result["location"] == f"{tmp_path}/alternative/estimize/estimate/abc.zip"
    assert result["transport"] == "local-file"


def test_load_command_reads_zipped_estimates(tmp_path):
    folder = tmp_path / "alternative" / "estimize" / "estimate"
    folder.mkdir(parents=True)
    with zipfile.ZipFile(folder / "abc.zip", "w") as archive:
        archive.writestr(
            "abc.json",
            json.dumps([{"fiscal_year": 2020, "fiscal_quarter": 4, "eps": 3.1}]),
        )

    result = cli.load_command("ABC.E", "2020-12-31", settings=_settings(tmp_path))

    assert result["error"] is None
    assert result["records"][0]["end_time"] == "2020-10-01T00:00:00+00:00"
    assert result["records"][0]["symbol"] == "ABC.E"


def test_coarse_select_command_ranks_symbols(tmp_path):
    folder = tmp_path / "equity" / "usa" / "fundamental" / "coarse"
    folder.mkdir(parents=True)
    (folder / "20200102.csv").write_text(
        "A,AAPL,300,100,30000,True\nB,SPY,320,200,64000,True\nC,PENNY,1,9999,9999,True\n",
        encoding="utf-8",
    )

    result = cli.coarse_select_command("2020-01-02", top=5, settings=_settings(tmp_path))

    assert result["selected"] == ["AAPL", "SPY"]
    assert result["universe"] == "coarse-usa.U"


def test_main_reports_invalid_suffix(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("ALTDATA_DATA_FOLDER", str(tmp_path))

    exit_code = cli.main(["resolve", "--symbol", "ABC", "--date", "2020-01-01"])

    assert exit_code == 2
    assert "suffix" in capsys.readouterr().err


def test_main_prints_json(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("ALTDATA_DATA_FOLDER", str(tmp_path))

    exit_code = cli.main(["resolve", "--symbol", "US.C", "--date", "2020-01-01"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["location"].endswith("alternative/trading-economics/us_calendar.zip")


def test_main_reports_invalid_settings(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("ALTDATA_DATA_FOLDER", str(tmp_path))
    monkeypatch.setenv("ALTDATA_MAX_WORKERS", "many")

    exit_code = cli.main(["resolve", "--symbol", "US.C", "--date", "2020-01-01"])

    assert exit_code == 2
    assert "ALTDATA_MAX_WORKERS" in capsys.readouterr().err
