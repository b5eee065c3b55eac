# tests/test_cli.py
import json

import pandas as pd
from typer.testing import CliRunner

from reloft.entrypoints.cli.screen import BATCH_COLUMNS, app, screen_frame

from fixtures.properties import midrise_office_payload

runner = CliRunner()


def test_screen_writes_record(tmp_path):
    src = tmp_path / "deal.json"
    out = tmp_path / "record.json"
    src.write_text(json.dumps(midrise_office_payload()), encoding="utf-8")

    result = runner.invoke(app, ["screen", str(src), "--out", str(out)])

    assert result.exit_code == 0, result.output
    record = json.loads(out.read_text(encoding="utf-8"))
    assert record["address"] == "6200 Sunset Blvd"
    assert record["unit_yield"]["total_units"] == 142


def test_screen_rejects_bad_json(tmp_path):
    src = tmp_path / "broken.json"
    src.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["screen", str(src)])
    assert result.exit_code != 0


def test_batch_writes_one_row_per_property(tmp_path):
    rows = [
        midrise_office_payload(),
        {"address": "12 Empty Lot"},
        {
            "address": "400 Spring St",
            "neighborhood": "Downtown LA",
            "useType": "Office",
            "yearBuilt": 1928,
            "totalBuildingSF": 90000,
            "stories": 10,
            "estimatedValue": 9000000,
            "studioRent": 2000,
        },
    ]
    src = tmp_path / "deals.csv"
    out = tmp_path / "out" / "results.csv"
    pd.DataFrame(rows).to_csv(src, index=False)

    result = runner.invoke(app, ["batch", str(src), "--out", str(out)])

    assert result.exit_code == 0, result.output
    df = pd.read_csv(out)
    assert list(df.columns) == BATCH_COLUMNS
    assert len(df) == 3
    assert df.loc[0, "total_units"] == 142
    assert df.loc[2, "eligibility"] == "conditional"
    assert df["deal_score"].between(0, 100).all()


def test_batch_missing_file_is_bad_parameter(tmp_path):
    result = runner.invoke(app, ["batch", str(tmp_path / "nope.csv")])
    assert result.exit_code != 0


def test_screen_frame_records_row_errors():
    df = pd.DataFrame([{"address": "ok"}, {"address": "bad", "neighborhood": {"nested": True}}])
    result = screen_frame(df)

    assert list(result["address"]) == ["ok", "bad"]
    assert result.loc[0, "error"] == ""
    assert "neighborhood" in result.loc[1, "error"]


def test_assumptions_dump():
    result = runner.invoke(app, ["assumptions"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["target_roc_pct"] == 6.5
