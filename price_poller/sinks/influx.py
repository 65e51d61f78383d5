import httpx
from loguru import logger

from price_poller.conf import InfluxConfig
from price_poller.errors import SubmitError
from price_poller.schemas.common import PriceRecord


def make_client(config: InfluxConfig, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={
            "Accept": "application/json",
            "Content-Type": "text/plain; charset=utf-8",
            "Authorization": f"Token {config.token.get_secret_value()}",
        },
        **kwargs,
    )


class InfluxWriter:
    """
    Writes price records to the InfluxDB v2 write API, one line per record.

    The write endpoint answers 204 No Content on success, anything else is
    treated as a failure.
    """

    def __init__(self, config: InfluxConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self.client = client or make_client(config)

        self.params = {
            "bucket": config.bucket,
            "org": config.org,
            "precision": "s",
        }

    async def write(self, record: PriceRecord):
        line = record.to_line()
        logger.debug(f"writing '{line}' to bucket {self.config.bucket}")

        try:
            response = await self.client.post(
                self.config.write_url, params=self.params, content=line.encode("utf-8")
            )
        except httpx.HTTPError as exc:
            raise SubmitError(f"write request failed: {exc!r}") from exc

        if response.status_code != httpx.codes.NO_CONTENT:
            logger.error(f"incorrect status {response.status_code}: {response.text}")
            raise SubmitError(
                f"write rejected with status {response.status_code}",
                status_code=response.status_code,
            )

    async def aclose(self):
        await self.client.aclose()
