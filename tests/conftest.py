import httpx
import pytest

from price_poller.conf import InfluxConfig
from price_poller.exchanges import coinbase
from price_poller.sinks import influx

COINBASE_URL = "https://api.coinbase.com"


def price_response(amount: str, currency: str = "GBP") -> httpx.Response:
    return httpx.Response(
        200, json={"data": {"amount": amount, "base": "BTC", "currency": currency}}
    )


@pytest.fixture
def quotes() -> dict[str, str]:
    return {"buy": "50000.5", "sell": "49950.25", "spot": "50010.00"}


@pytest.fixture
def make_coinbase():
    """Build a Coinbase exchange whose requests are answered by `handler`."""

    def factory(handler) -> coinbase.Coinbase:
        client = coinbase.make_client(transport=httpx.MockTransport(handler))
        return coinbase.Coinbase(COINBASE_URL, client=client)

    return factory


@pytest.fixture
def quote_handler(quotes):
    """Answer every price endpoint from the `quotes` fixture and record requests."""

    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        price_type = request.url.path.rsplit("/", 1)[-1]
        return price_response(quotes[price_type], request.url.params["currency"])

    handler.requests = requests
    return handler


@pytest.fixture
def influx_config() -> InfluxConfig:
    return InfluxConfig(
        host="http://localhost:8086/",
        org="home",
        bucket="prices",
        token="s3cr3t",
    )


@pytest.fixture
def make_writer(influx_config):
    """Build an InfluxWriter whose requests are answered by `handler`."""

    def factory(handler) -> influx.InfluxWriter:
        client = influx.make_client(influx_config, transport=httpx.MockTransport(handler))
        return influx.InfluxWriter(influx_config, client=client)

    return factory
