from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from authoring.helpers import parse_json_field
from authoring.schemas.media import MediaRecord


class TypeTag(str, Enum):
    new = "new"
    used = "used"
    rental = "rental"
    attachments = "attachments"


# tags that can never be selected together
EXCLUSIVE_TAGS = {TypeTag.new: TypeTag.used, TypeTag.used: TypeTag.new}


# Shared fields
class ProductBase(BaseModel):
    category: int
    subcategory: int | None = None
    name: str
    description: str = ""
    meta_title: str = ""
    meta_description: str = ""
    manufacturer: str = ""
    model: str = ""
    price: Decimal | None = None
    type: list[TypeTag] = Field(default_factory=list)
    direct_sale: bool = True
    hide_price: bool = False
    online_payment: bool = False
    stock_quantity: int = 1

    @field_validator("description", "meta_title", "meta_description", "manufacturer", "model", mode="before")
    @classmethod
    def _none_as_blank(cls, v):
        return "" if v is None else v


# Body of POST /products/ and PATCH /products/{id}/
class ProductWrite(ProductBase):
    user: int
    product_details: str = "{}"
    videos: list[str] = Field(default_factory=list)


# Server record (includes id and media)
class ProductRead(ProductBase):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    product_details: dict[str, str] = Field(default_factory=dict)
    brochure: str | None = None
    media: list[MediaRecord] = Field(default_factory=list, validation_alias=AliasChoices("media", "images"))

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any):
        tags = parse_json_field(v, [])
        if isinstance(tags, str): tags = [tags]
        known = {t.value for t in TypeTag}
        return [t for t in tags if t in known]

    @field_validator("product_details", mode="before")
    @classmethod
    def _parse_details(cls, v: Any):
        details = parse_json_field(v, {})
        if not isinstance(details, dict):
            return {}
        out: dict[str, str] = {}
        for key, value in details.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                out[str(key)] = ",".join(str(x) for x in value)
            elif isinstance(value, bool):
                out[str(key)] = "true" if value else "false"
            else:
                out[str(key)] = str(value)
        return out


class ProductDraft(BaseModel):
    """
    Client-side record being authored.
    id is None while the product is a Draft and holds the server id once the base record was saved.
    """
    id: int | None = None
    category: int | None = None
    subcategory: int | None = None
    name: str = ""
    description: str = ""
    meta_title: str = ""
    meta_description: str = ""
    manufacturer: str = ""
    model: str = ""
    price: Decimal | None = None
    type: list[TypeTag] = Field(default_factory=lambda: [TypeTag.new])
    direct_sale: bool = True
    hide_price: bool = False
    online_payment: bool = False
    stock_quantity: int = 1

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def toggle_type(self, tag: TypeTag | str, checked: bool) -> list[TypeTag]:
        tag = TypeTag(tag)
        tags = [t for t in self.type if t != tag]
        if checked:
            rival = EXCLUSIVE_TAGS.get(tag)
            tags = [t for t in tags if t != rival]
            tags.append(tag)
        self.type = tags
        return list(self.type)

    def to_write(self, *, owner_id: int, product_details: str, videos: list[str]) -> ProductWrite:
        return ProductWrite(
            **self.model_dump(exclude={"id"}),
            user=owner_id,
            product_details=product_details,
            videos=videos,
        )

    @classmethod
    def from_read(cls, product: ProductRead) -> "ProductDraft":
        draft = cls(**product.model_dump(include=set(ProductBase.model_fields) - {"type"}), id=product.id, type=[])
        for tag in product.type:
            draft.toggle_type(tag, True)
        return draft
