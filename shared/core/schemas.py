from pydantic import BaseModel
from typing import Generic, Optional, TypeVar, Union
from uuid import UUID

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

# Shared properties
T = TypeVar("T")


class CommonQueryParams(EmptyStringModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = None


class Lookup(BaseModel):
    id: Union[str, UUID]  # accepts both UUID and str
    name: str

    class Config:
        from_attributes = True


class JsonOutResult(EmptyStringModel, Generic[T]):
    """Envelope every JSON response is wrapped in."""
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
