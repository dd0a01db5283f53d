"""JSON encoding of the parameters of remote calls."""

from typing import Any, List

from .pydantic import WitnessBaseModel


def to_json(input: WitnessBaseModel | List[Any] | Any) -> Any:
    """
    Convert a call parameter to its JSON value: models to objects, lists element-wise,
    booleans and None unchanged, and anything else (numbers, hashes, addresses) to its string
    representation.
    """
    if isinstance(input, list):
        return [to_json(item) for item in input]
    elif isinstance(input, WitnessBaseModel):
        return input.serialize(mode="json", by_alias=True)
    elif isinstance(input, (bool, type(None))):
        return input
    else:
        return str(input)
