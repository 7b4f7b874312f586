from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer


def reject_bool(value: Any) -> Any:
    # bool is an int subclass, True would otherwise pass as 1
    if isinstance(value, bool):
        raise ValueError("Expected a number, got a boolean")
    return value


# Decimal in memory, JSON number on the wire and in JSON columns
Money = Annotated[
    Decimal,
    BeforeValidator(reject_bool),
    PlainSerializer(float, return_type=float, when_used="json"),
]
