from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FieldKind(str, Enum):
    text = "text"
    textarea = "textarea"
    select = "select"
    radio = "radio"
    checkbox = "checkbox"

    @property
    def has_options(self) -> bool:
        return self in (FieldKind.select, FieldKind.radio, FieldKind.checkbox)


class FieldOption(BaseModel):
    label: str
    value: str


class AttributeFieldDef(BaseModel):
    """One dynamic input of a category/subcategory schema."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    label: str
    kind: FieldKind = Field(alias="type")
    required: bool = False
    options: list[FieldOption] | None = None
    placeholder: str | None = None

    @model_validator(mode="after")
    def _check_options(self) -> "AttributeFieldDef":
        if self.kind.has_options and not self.options:
            raise ValueError(f"field '{self.name}' of kind {self.kind.value} needs at least one option")
        if self.kind is FieldKind.checkbox and any("," in o.value for o in self.options or []):
            raise ValueError(f"checkbox field '{self.name}' has an option value containing a comma")
        return self

    def option_label(self, value: str) -> str:
        for option in self.options or []:
            if option.value == value: return option.label
        return value


class Subcategory(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    attribute_schema: list[AttributeFieldDef] = Field(default_factory=list, alias="product_details")

    @field_validator("attribute_schema", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []


class Category(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    subcategories: list[Subcategory] = Field(default_factory=list)
    # only meaningful when there are no subcategories
    attribute_schema: list[AttributeFieldDef] = Field(default_factory=list, alias="product_details")

    @field_validator("attribute_schema", "subcategories", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    def get_subcategory(self, subcategory_id: int) -> Subcategory | None:
        for sub in self.subcategories:
            if sub.id == subcategory_id: return sub
        return None
