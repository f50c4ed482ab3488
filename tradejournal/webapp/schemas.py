from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthRequest(_Body):
    init_data: str = ""


class TradeCreate(_Body):
    amount: float = Field(allow_inf_nan=False)
    note: str | None = Field(default=None, max_length=1000)
    date: datetime

    @field_validator("date")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        # DateTime columns are naive, stored as UTC
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class CapitalCreate(_Body):
    amount_birr: float = Field(gt=0, allow_inf_nan=False)
    amount_usd: float = Field(gt=0, allow_inf_nan=False)
    exchange_rate: float = Field(gt=0, allow_inf_nan=False)
