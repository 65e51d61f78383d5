import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import numpy as np


class PriceType(Enum):
    BUY = "buy"
    SELL = "sell"
    SPOT = "spot"

    def __str__(self) -> str:
        return self.value


def format_amount(amount: np.float32) -> str:
    """
    Shortest positional text that reads back as the same single precision value,
    e.g. 50010.0 -> '50010', 49950.25 -> '49950.25'
    """
    return np.format_float_positional(np.float32(amount), unique=True, trim="-")


@dataclass(slots=True, frozen=True)
class PriceRecord:
    source: str
    asset: str
    currency: str
    buy: np.float32
    sell: np.float32
    spot: np.float32
    timestamp: datetime

    def amount(self, price_type: PriceType) -> np.float32:
        return getattr(self, price_type.value)

    def to_line(self) -> str:
        """
        Render as one line-protocol measurement:

            BTC,source=Coinbase,currency=GBP buy=50000.5,sell=49950.25,spot=50010 1700000000

        tag values are written as is, without escaping
        """
        fields = ",".join(
            f"{t.value}={format_amount(self.amount(t))}" for t in PriceType
        )
        unix_seconds = math.floor(self.timestamp.timestamp())

        return (
            f"{self.asset},source={self.source},currency={self.currency} "
            f"{fields} {unix_seconds}"
        )

    def __str__(self) -> str:
        return self.to_line()
