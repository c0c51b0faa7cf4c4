from pathlib import Path

import pytest
from rich.console import Console

from kcat_portal import main as cli_main
from kcat_portal.interfaces import cli
from kcat_portal.interfaces.schemas import EnzymeRecord
from kcat_portal.services.aggregator import merge
from kcat_portal.services.session import SessionStore


def test_parser_accepts_predict_both() -> None:
    args = cli_main.build_parser().parse_args(
        ["predict", "both", "--smiles", "CCO", "--sequence", "MKT", "--temperature", "37", "--save"]
    )
    assert args.model == "both"
    assert args.temperature == 37.0
    assert args.save is True


def test_session_set_then_clear(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "session.json"
    monkeypatch.setattr(cli_main, "_session_store", lambda: SessionStore(path))

    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["session", "set", "--token", "t", "--user-id", "3", "--username", "lin"])
    assert excinfo.value.code == 0
    assert SessionStore(path).get_user().username == "lin"

    with pytest.raises(SystemExit):
        cli_main.main(["session", "clear"])
    assert SessionStore(path).get_token() is None


def test_session_set_requires_identity() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["session", "set", "--token", "t"])
    assert excinfo.value.code == 2


def test_render_records_prints_table(monkeypatch: pytest.MonkeyPatch) -> None:
    wide = Console(width=200)
    monkeypatch.setattr(cli, "console", wide)
    rows = merge([EnzymeRecord(ec_number="1.1.1.1", kcat_value=12.5, formatted_kcat="12.5000")])

    with wide.capture() as capture:
        cli.render_records(rows)

    output = capture.get()
    assert "1.1.1.1" in output
    assert "12.5000" in output
    assert "experimental" in output
