"""Decode JSON values into pydantic models"""

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from galynx.shared.exceptions import InvalidResponseError

M = TypeVar("M", bound=BaseModel)


def decode_model(model: type[M], value: Any) -> M:
    """Validate a decoded JSON value as ``model``

    Raises:
        InvalidResponseError: If the value does not match the model
    """
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise InvalidResponseError(str(e)) from e


def decode_list(model: type[M], value: Any) -> list[M]:
    """Validate a decoded JSON array as a list of ``model``"""
    try:
        return TypeAdapter(list[model]).validate_python(value)
    except ValidationError as e:
        raise InvalidResponseError(str(e)) from e
