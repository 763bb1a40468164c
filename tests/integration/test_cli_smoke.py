import json
import zipfile
from pathlib import Path

import pytest
from openpyxl import Workbook

from rural_explorer.cli import main, parse_args, run_command
from rural_explorer.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS


def _write_snapshot(path: Path, rows: list[list]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Address", "Price", "Acres", "Latitude", "Longitude", "LLM Score", "Property URL Link"])
    for row in rows:
        sheet.append(row)
    workbook.save(path)


@pytest.mark.integration
def test_cli_view_model_writes_output(tmp_path: Path):
    _write_snapshot(
        tmp_path / "data" / "list" / "Feb012026.xlsx",
        [
            ["A", 300000, 10, 38.9, -77.4, 95, '=HYPERLINK("https://example.com/x","label")'],
            ["B", 0, 5, 38.8, -77.3, 99, None],
        ],
    )
    output = tmp_path / "out" / "view_model.json"
    args = parse_args(
        ["view-model", "--config-dir", "config", "--data-dir", str(tmp_path), "--output", str(output), "--run-id", "run-test"]
    )

    assert run_command(args) == EXIT_SUCCESS

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["listing_count_label"] == "1 Strategic Assets"
    assert payload["cards"][0]["url"] == "https://example.com/x"
    assert payload["sidebar"]["top_picks"][0]["trophy"] is True


@pytest.mark.integration
def test_cli_summary_prints_json(tmp_path: Path, capsys):
    _write_snapshot(tmp_path / "Jan152026.xlsx", [["A", 100000, 0, 38.9, -77.4, 50, None]])

    exit_code = main(["summary", "--snapshot", "Jan152026", "--config-dir", "config", "--data-dir", str(tmp_path)])

    assert exit_code == EXIT_SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["record_count"] == 1
    assert payload["average_price_per_unit_area"] == 0.0
    assert payload["ranked_ids"] == [0]


@pytest.mark.integration
def test_cli_reports_partial_when_no_rows_survive(tmp_path: Path, capsys):
    _write_snapshot(tmp_path / "Feb012026.xlsx", [["B", 0, 5, 38.8, -77.3, 99, None]])

    exit_code = main(["summary", "--config-dir", "config", "--data-dir", str(tmp_path)])

    assert exit_code == EXIT_PARTIAL
    assert json.loads(capsys.readouterr().out)["narrative_text"] is None


@pytest.mark.integration
def test_cli_hard_fails_on_missing_snapshot(tmp_path: Path):
    assert main(["summary", "--config-dir", "config", "--data-dir", str(tmp_path)]) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_hard_fails_on_missing_config(tmp_path: Path):
    assert main(["summary", "--config-dir", str(tmp_path)]) == EXIT_HARD_FAIL


def test_cli_lists_snapshots(capsys):
    assert main(["snapshots", "--config-dir", "config"]) == EXIT_SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["default"] == "Feb012026"


@pytest.mark.integration
def test_cli_hard_fails_on_truncated_worksheet(tmp_path: Path):
    path = tmp_path / "Feb012026.xlsx"
    _write_snapshot(path, [[f"Lot {i}", 100000 + i, 5, 38.9, -77.4, 50, None] for i in range(20)])
    with zipfile.ZipFile(path) as source:
        members = [(info, source.read(info.filename)) for info in source.infolist()]
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as target:
        for info, data in members:
            if info.filename == "xl/worksheets/sheet1.xml":
                data = data[: len(data) // 2]
            target.writestr(info, data)

    assert main(["summary", "--config-dir", "config", "--data-dir", str(tmp_path)]) == EXIT_HARD_FAIL
