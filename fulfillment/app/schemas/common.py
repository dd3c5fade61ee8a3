from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

CENTS = Decimal("0.01")

# Exposed as a fixed two-decimal string ("5000.00") so amounts round-trip exactly
Money = Annotated[Decimal, PlainSerializer(lambda v: str(v.quantize(CENTS)), return_type=str, when_used="json")]


class APIModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )
