from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def _decimal_to_float(value: Decimal) -> float:
    return float(value)


# Fixed-point on the way in, JSON number on the way out
Money = Annotated[
    Decimal,
    PlainSerializer(_decimal_to_float, return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FieldError(CamelModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    detail: str
    errors: list[FieldError] = []
