from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import AfterValidator, Field


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without their timezone, they are stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]

# Same limits as the operations columns
CryptoAmount = Optional[Annotated[Decimal, Field(max_digits=20, decimal_places=8)]]
FiatAmount = Optional[Annotated[Decimal, Field(max_digits=20, decimal_places=2)]]
Code = Optional[Annotated[str, Field(max_length=50)]]
PaymentMethod = Optional[Annotated[str, Field(max_length=100)]]
WalletAddress = Optional[Annotated[str, Field(max_length=255)]]
