"""Base pydantic classes used to define the wire and witness models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WitnessBaseModel(BaseModel):
    """Base model for all the models of the witness extractor."""

    def serialize(
        self,
        mode: Literal["json", "python"],
        by_alias: bool,
        exclude_none: bool = True,
    ) -> dict[str, Any]:
        """
        Serialize the model, leaving out unset optional fields by default.

        :param mode: `json` to only produce JSON serializable values, `python` to keep the
            value types.
        :param by_alias: Whether to use the wire spelling of the field names.
        :param exclude_none: Whether to exclude fields with None values, default is True.
        """
        return self.model_dump(mode=mode, by_alias=by_alias, exclude_none=exclude_none)


class CamelModel(WitnessBaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `parent_hash` in a Python model will be represented
    as `parentHash` when it is serialized to json, which is the spelling used by the
    JSON-RPC API of the node.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )
