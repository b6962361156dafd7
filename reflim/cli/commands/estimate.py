"""Estimate CLI command wiring."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from reflim.config.loader import load_config_with_precedence
from reflim.data.loader import load_sample
from reflim.distributions.models import DistributionModel
from reflim.exceptions import ConfigValidationError, ReflimError
from reflim.pipeline import ReflimResult, reflim
from reflim.schema.run_config import ReflimConfig
from reflim.utils.logging import get_logger

console = Console()
log = get_logger(__name__, component="cli.estimate")


def _parse_model(raw: object) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    try:
        model = DistributionModel.coerce(str(raw))
    except ValueError as exc:
        raise ConfigValidationError(str(exc)) from exc
    return None if model is None else model.is_lognormal


def _parse_lognorm(raw: object) -> Optional[bool]:
    """``lognorm`` accepts true/false/null (or yes/no) in addition to model names."""
    if isinstance(raw, bool):
        return raw
    normalized = str(raw).strip().lower()
    if normalized in {"true", "yes", "on", "1"}:
        return True
    if normalized in {"false", "no", "off", "0"}:
        return False
    if normalized in {"null", "~"}:
        return None
    return _parse_model(raw)


def _resolve_lognorm(model: Optional[bool], lognorm: Optional[bool]) -> Optional[bool]:
    if model is not None and lognorm is not None and model != lognorm:
        raise ConfigValidationError("'model' and 'lognorm' disagree; set only one of them")
    return model if model is not None else lognorm


def _as_bool(value: object) -> bool:
    return str(value).lower() in {"1", "true", "yes", "on"}


def _render_table(results: dict[str, ReflimResult], failures: dict[str, str]) -> None:
    table = Table(title="Reference intervals")
    for name in ("Column", "Model", "n", "n trunc", "Lower", "CI lower", "Upper", "CI upper"):
        table.add_column(name)
    for column, result in results.items():
        table.add_row(
            column,
            result.model.value,
            str(result.n_total),
            str(result.n_trunc),
            f"{result.lower:g}",
            f"{result.low_low:g} - {result.low_high:g}",
            f"{result.upper:g}",
            f"{result.high_low:g} - {result.high_high:g}",
        )
    console.print(table)
    for column, result in results.items():
        if result.targets is not None:
            console.print(
                f"{column}: target lower {result.targets.lower} CI, target upper {result.targets.upper} CI"
            )
        for message in result.warnings:
            console.print(f"[yellow]{column}: {message}[/yellow]")
    for column, message in failures.items():
        console.print(f"[red]{column}: {message}[/red]")


def estimate(
    path: Path = typer.Argument(..., help="CSV or Parquet file with measurements"),
    column: List[str] = typer.Option(..., "--column", "-c", help="Column(s) to analyse"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional YAML/JSON config path"),
    model: Optional[str] = typer.Option(None, "--model", help="auto, normal or lognormal"),
    n_quantiles: Optional[int] = typer.Option(None, "--n-quantiles", help="Points in the q-q correspondence"),
    apply_rounding: Optional[bool] = typer.Option(None, "--round/--no-round", help="Round to display precision"),
    target_lower: Optional[float] = typer.Option(None, "--target-lower", help="Target lower limit"),
    target_upper: Optional[float] = typer.Option(None, "--target-upper", help="Target upper limit"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table"),
    include_qq: bool = typer.Option(False, "--include-qq", help="Include q-q pairs in JSON output"),
) -> None:
    """Estimate reference intervals for one or more columns of a data file."""
    defaults = {
        "model": "auto",
        "lognorm": None,
        "n_quantiles": 100,
        "apply_rounding": False,
        "target_lower": None,
        "target_upper": None,
    }
    cli_values = {
        "model": model,
        "n_quantiles": n_quantiles,
        "apply_rounding": apply_rounding,
        "target_lower": target_lower,
        "target_upper": target_upper,
    }
    casters = {
        "model": _parse_model,
        "lognorm": _parse_lognorm,
        "n_quantiles": int,
        "apply_rounding": _as_bool,
        "target_lower": float,
        "target_upper": float,
    }
    merged = load_config_with_precedence(
        config_path=config,
        env_prefix="REFLIM_",
        cli_values=cli_values,
        defaults=defaults,
        casters=casters,
    )
    if (merged["target_lower"] is None) != (merged["target_upper"] is None):
        raise ConfigValidationError("--target-lower and --target-upper must be given together")
    targets = None
    if merged["target_lower"] is not None:
        targets = (merged["target_lower"], merged["target_upper"])
    run_config = ReflimConfig(
        lognorm=_resolve_lognorm(merged["model"], merged["lognorm"]),
        n_quantiles=merged["n_quantiles"],
        apply_rounding=merged["apply_rounding"],
        targets=targets,
    )

    results: dict[str, ReflimResult] = {}
    failures: dict[str, str] = {}
    for name in column:
        try:
            values = load_sample(path, name)
            results[name] = reflim(values, config=run_config, analyte=name)
        except ReflimError as exc:
            log.error(f"Estimation failed for {name}: {exc}", extra={"analyte": name, "error": str(exc)})
            failures[name] = f"{type(exc).__name__}: {exc}"

    if as_json:
        payload = {name: res.to_dict(include_qq=include_qq) for name, res in results.items()}
        payload.update({name: {"error": message} for name, message in failures.items()})
        typer.echo(json.dumps(payload, indent=2))
    else:
        _render_table(results, failures)

    if failures:
        raise typer.Exit(code=2)


__all__ = ["estimate"]
