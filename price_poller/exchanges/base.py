from abc import ABC, abstractmethod

import httpx

from price_poller.conf import check_https
from price_poller.schemas.common import PriceType


class BaseExchange(ABC):
    def __init__(self, id: str, base_url: str, client: httpx.AsyncClient):
        self.id = id
        self.base_url = check_https(base_url).rstrip("/")
        self.client = client

    @abstractmethod
    def _make_price_url(self, price_type: PriceType) -> str:
        """
        Return the url of the quote endpoint for a price type
        """
        raise NotImplementedError

    @abstractmethod
    async def get_price(self, price_type: PriceType, currency: str) -> str:
        """
        Return the quoted amount for a price type, as sent by the exchange
        """
        raise NotImplementedError

    async def aclose(self):
        await self.client.aclose()
