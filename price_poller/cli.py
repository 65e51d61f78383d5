import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger

from price_poller.conf import get_config
from price_poller.errors import PollerError
from price_poller.run import main as run_poller

app = typer.Typer(add_completion=False, help="Poll Coinbase BTC prices into InfluxDB")


def setup_logging(level: str):
    level = level.strip().upper()
    try:
        logger.level(level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc

    logger.remove()
    logger.add(sys.stderr, level=level)


@app.command()
def poll(
    currency: str = typer.Option(
        "GBP", "--currency", "-c", help="Fiat currency to quote BTC in.", show_default=True
    ),
    interval: int = typer.Option(
        30, "--interval", "-i", help="Seconds between polls, aligned within the minute.", show_default=True
    ),
    config: Path | None = typer.Option(
        None, "--config", help="TOML or JSON file with host, org, bucket and token of the InfluxDB sink."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print records to stdout instead of writing them."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level, defaults to the LOG_LEVEL setting."
    ),
):
    setup_logging(log_level or get_config().LOG_LEVEL)

    try:
        asyncio.run(
            run_poller(
                currency=currency,
                interval=interval,
                config_path=config,
                dry_run=dry_run,
            )
        )
    except PollerError as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
