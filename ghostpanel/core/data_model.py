__all__ = ["DataModel", "DataModelField"]

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class DataModel(BaseModel):
    """Data model.

    Fields may declare a wire alias; both the alias and the field name are
    accepted on input, and `to_dict`/`to_json` emit the field name unless
    `by_alias` is set.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="ignore",
        populate_by_name=True,
    )

    def to_dict(self, by_alias: bool = False, exclude_none: bool = False):
        return self.model_dump(
            mode="json", by_alias=by_alias, exclude_none=exclude_none
        )

    def to_json(self, indent: int | None = None, by_alias: bool = False):
        return self.model_dump_json(indent=indent, by_alias=by_alias)

    def copy(self, deep: bool = False, **kwargs):
        return self.model_copy(deep=deep, **kwargs)

    @classmethod
    def from_dict(cls, obj: dict | None) -> Self:
        return cls.model_validate(obj)


def DataModelField(
    alias: str | None = None,
    exclude: bool | None = None,
    repr: bool = True,
    **kwargs,
) -> Any:
    return Field(
        alias=alias,
        exclude=exclude,
        repr=repr,
        **kwargs,
    )
