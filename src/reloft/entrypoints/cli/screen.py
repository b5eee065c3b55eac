# src/reloft/entrypoints/cli/screen.py
from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import typer

from reloft.adapters.logging_utils import get_logger
from reloft.domain.assumptions import build_assumptions
from reloft.services.screening import screen_property

app = typer.Typer(help="Adaptive-reuse conversion screening (single property, batch, rate tables).")
logger = get_logger(__name__)

BATCH_COLUMNS = [
    "address",
    "deal_score",
    "band",
    "eligibility",
    "physical_total",
    "total_units",
    "cost_per_unit_mid",
    "return_on_cost",
    "downside_roc",
    "risk_level",
    "subsidy_gap_per_unit",
    "error",
]


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise typer.BadParameter(f"No such file: {path}") from e
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{path} is not valid JSON: {e}") from e


def _clean_row(row: dict[str, Any]) -> dict[str, Any]:
    """Drop pandas NaN cells so they fall back to neutral defaults."""
    return {k: v for k, v in row.items() if not (isinstance(v, float) and math.isnan(v))}


def summarize(record: dict[str, Any]) -> dict[str, Any]:
    """One flat row per screened property."""
    cpu = record["costs"]["cost_per_unit"]
    gap = record["deal_score"].get("subsidy_gap") or {}
    return {
        "address": record["address"],
        "deal_score": record["deal_score"]["score"],
        "band": record["deal_score"]["band"],
        "eligibility": record["eligibility"]["status"],
        "physical_total": record["physical"]["total"],
        "total_units": record["unit_yield"]["total_units"],
        "cost_per_unit_mid": round((cpu["low"] + cpu["high"]) / 2),
        "return_on_cost": round(record["proforma"]["return_on_cost"], 2),
        "downside_roc": round(record["scenarios"]["downside"]["return_on_cost"], 2),
        "risk_level": record["scenarios"]["risk_level"],
        "subsidy_gap_per_unit": round(gap.get("per_unit", 0.0)),
        "error": "",
    }


def screen_frame(df: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for raw in df.to_dict(orient="records"):
        payload = _clean_row(raw)
        try:
            rows.append(summarize(screen_property(payload)))
        except ValueError as e:
            logger.warning("Batch row rejected", extra={"context": {"address": payload.get("address"), "error": str(e)}})
            rows.append({"address": payload.get("address", ""), "error": str(e)})
    return pd.DataFrame(rows, columns=BATCH_COLUMNS)


@app.command()
def screen(
    path: Path = typer.Argument(..., help="JSON file holding one screening payload"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the record here instead of stdout"),
) -> None:
    """
    Screen a single property and print the full nested record as JSON.
    """
    payload = _load_json(path)
    try:
        record = screen_property(payload)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    text = json.dumps(record, indent=2, default=str)
    if out:
        out.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {out}")
    else:
        typer.echo(text)


@app.command()
def batch(
    csv: Path = typer.Argument(..., help="CSV with one property per row"),
    out: Path = typer.Option(Path("screening_results.csv"), "--out", help="Output CSV path"),
) -> None:
    """
    Screen every row of a CSV and write a one-line summary per property.
    """
    if not csv.exists():
        raise typer.BadParameter(f"No such file: {csv}")
    df = pd.read_csv(csv)
    result = screen_frame(df)
    out.parent.mkdir(parents=True, exist_ok=True)
    result.to_csv(out, index=False)

    scored = result[result["error"] == ""]
    typer.echo(f"Screened {len(scored)}/{len(result)} properties -> {out}")
    if not scored.empty:
        typer.echo(scored["band"].value_counts().sort_index().to_string())


@app.command()
def assumptions() -> None:
    """
    Dump the active rate tables (after RELOFT_* environment overrides).
    """
    typer.echo(json.dumps(build_assumptions().model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    app()
