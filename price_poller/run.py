import asyncio
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
from loguru import logger

from price_poller.conf import get_config, load_influx_config
from price_poller.errors import ConfigError, ParseError
from price_poller.exchanges.base import BaseExchange
from price_poller.exchanges.coinbase import Coinbase
from price_poller.scheduler import Ticker, make_ticker
from price_poller.schemas.common import PriceRecord, PriceType
from price_poller.sinks.influx import InfluxWriter

ASSET = "BTC"


def parse_amount(price_type: PriceType, amount: str) -> np.float32:
    # float() also takes padding and digit separators, amounts never carry them
    if amount != amount.strip() or "_" in amount:
        raise ParseError(f"{price_type} amount '{amount}' is not a number")

    try:
        return np.float32(amount)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"{price_type} amount '{amount}' is not a number") from exc


class PricePoller:
    def __init__(
        self,
        exchange: BaseExchange,
        currency: str,
        writer: InfluxWriter | None = None,
        dry_run: bool = False,
    ):
        if writer is None and not dry_run:
            raise ConfigError("a writer is required unless running dry")

        self.exchange = exchange
        self.currency = currency
        self.writer = writer
        self.dry_run = dry_run

    async def collect(self) -> PriceRecord:
        """
        Fetch buy, sell and spot prices concurrently, the first failure fails the whole tick
        """
        types = list(PriceType)
        amounts = await asyncio.gather(
            *(self.exchange.get_price(t, self.currency) for t in types)
        )
        prices = {
            t.value: parse_amount(t, amount) for t, amount in zip(types, amounts)
        }

        return PriceRecord(
            source=self.exchange.id,
            asset=ASSET,
            currency=self.currency,
            timestamp=datetime.now(timezone.utc),
            **prices,
        )

    async def publish(self, record: PriceRecord):
        if self.dry_run:
            print(record.to_line(), flush=True)
            return

        await self.writer.write(record)

    async def run_once(self) -> PriceRecord:
        record = await self.collect()
        await self.publish(record)
        return record

    async def run(self, ticker: Ticker):
        while True:
            await ticker.tick()
            record = await self.run_once()
            logger.debug(f"published {record.currency} prices at {record.timestamp:%H:%M:%S}")

    async def aclose(self):
        await self.exchange.aclose()
        if self.writer is not None:
            await self.writer.aclose()


async def main(
    currency: str = "GBP",
    interval: int = 30,
    config_path: Path | None = None,
    dry_run: bool = False,
):
    config = get_config()

    influx_config = None
    if not dry_run:
        if config_path is None:
            raise ConfigError("a config file is required unless running with --dry-run")

        influx_config = load_influx_config(config_path)
        logger.info(
            f"writing to {influx_config.host}, org '{influx_config.org}', bucket '{influx_config.bucket}'"
        )
    else:
        logger.info("dry run, printing records instead of writing them")

    ticker = make_ticker(interval)

    exchange = Coinbase(config.COINBASE_API_URL)
    writer = InfluxWriter(influx_config) if influx_config else None
    poller = PricePoller(exchange, currency, writer, dry_run)

    logger.info(f"polling {ASSET}/{currency} prices every {interval}s")
    try:
        await poller.run(ticker)
    finally:
        await poller.aclose()
