"""Typer CLI entrypoint with structured error handling."""

from __future__ import annotations

import sys

import typer

from reflim.cli.commands.estimate import estimate
from reflim.exceptions import (
    ConfigValidationError,
    DataSourceError,
    DomainError,
    InvalidRangeError,
)
from reflim.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Reference interval estimation CLI")


app.command()(estimate)


@app.callback()
def _root() -> None:
    """Estimate reference intervals from mixed healthy/pathological data."""


log = get_logger(__name__, component="cli")


def main() -> None:
    configure_logging(component="cli")
    try:
        app()
    except ConfigValidationError as exc:
        log.error(str(exc))
        raise typer.Exit(code=1)
    except DataSourceError as exc:
        log.error(f"Data validation failed: {exc}")
        raise typer.Exit(code=2)
    except (DomainError, InvalidRangeError) as exc:
        log.error(f"Estimation failed: {exc}")
        raise typer.Exit(code=3)
    except KeyboardInterrupt:
        log.info("Shutdown requested.")
        raise typer.Exit(code=130)
    except Exception:
        log.exception("Unhandled exception")
        raise typer.Exit(code=255)


if __name__ == "__main__":
    sys.exit(main())
