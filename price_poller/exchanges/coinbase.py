from typing_extensions import override

import httpx
from loguru import logger
from pydantic import ValidationError

from price_poller.errors import FetchError, ParseError
from price_poller.exchanges.base import BaseExchange
from price_poller.schemas.coinbase import PriceResponseSchema
from price_poller.schemas.common import PriceType


def make_client(**kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
        },
        **kwargs,
    )


class Coinbase(BaseExchange):
    """
    public price endpoints, no authentication:

        GET /v2/prices/{buy|sell|spot}?currency=GBP
        -> {"data": {"amount": "50000.51", "base": "BTC", "currency": "GBP"}}
    """

    def __init__(self, base_url, client: httpx.AsyncClient | None = None):
        super().__init__(
            id="Coinbase",
            base_url=base_url,
            client=client or make_client(),
        )

    @override
    def _make_price_url(self, price_type: PriceType) -> str:
        return f"{self.base_url}/v2/prices/{price_type.value}"

    @override
    async def get_price(self, price_type: PriceType, currency: str) -> str:
        url = self._make_price_url(price_type)

        try:
            response = await self.client.get(url, params={"currency": currency})
        except httpx.HTTPError as exc:
            raise FetchError(f"{price_type} price request failed: {exc!r}") from exc

        logger.debug(f"{price_type} price response {response.status_code}")

        # error responses fail validation, the status is not checked on its own
        try:
            body = PriceResponseSchema.model_validate_json(response.content)
        except ValidationError as exc:
            raise ParseError(
                f"unexpected {price_type} price response ({response.status_code}): {response.text[:200]}"
            ) from exc

        return body.data.amount
