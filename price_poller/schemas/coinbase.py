from pydantic import BaseModel, ConfigDict


class PriceSchema(BaseModel):
    """
    example:
    {
        "amount": "50000.51",
        "base": "BTC",
        "currency": "GBP"
    }
    """

    model_config = ConfigDict(extra="ignore")

    # kept as text, parsed into a float by the poller
    amount: str


class PriceResponseSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: PriceSchema
