from datetime import date
import re
import types
from uuid import UUID
from pydantic import BaseModel, model_validator
from typing import Any, Union, get_args, get_origin

from shared.helpers.date_helper import parse_iso_date

INVISIBLE_CHARS_PATTERN = re.compile(
    r'[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]')


def deep_clean(value: Any):
    """Recursively convert empty strings to None, clean invisible chars, and handle nested models."""

    # 1️⃣ Handle Pydantic models
    if isinstance(value, BaseModel):
        data = value.model_dump()
        cleaned = deep_clean(data)
        return type(value)(**cleaned)

    # 2️⃣ Handle dictionaries
    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    # 3️⃣ Handle lists
    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    # 4️⃣ Handle strings
    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    # 5️⃣ If the value is UUID but empty string passed somehow
    if isinstance(value, UUID):
        return value  # valid UUID stays UUID

    # Default return
    return value


def is_date_annotation(annotation: Any) -> bool:
    origin = get_origin(annotation)
    args = get_args(annotation)
    return (
        annotation is date
        or (origin in (Union, types.UnionType) and any(a is date for a in args))
    )


class EmptyStringModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    # STEP 1: Pre-clean input
    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if isinstance(values, dict):
            return deep_clean(values)
        return values

    # STEP 2: Parse date strings strictly, malformed ones raise
    @model_validator(mode="before")
    @classmethod
    def fix_dates(cls, values):
        if not isinstance(values, dict):
            return values

        for field_name, field in cls.model_fields.items():
            if field_name not in values:
                continue
            annotation = field.annotation
            raw_value = values.get(field_name)

            if is_date_annotation(annotation):
                values[field_name] = parse_iso_date(raw_value)

        return values
