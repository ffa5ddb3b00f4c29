from __future__ import annotations

import json
from typing import Iterable

from authoring.schemas import AttributeFieldDef, ProductRead


class AttributeValueStore:
    """
    name -> string value for the dynamic attribute fields.

    Values are opaque strings. Checkbox fields keep their selection as a comma-joined list.
    Keys that are not part of the current schema stay in the store but are never serialized.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    @classmethod
    def from_product(cls, product: ProductRead) -> "AttributeValueStore":
        return cls(product.product_details)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def values(self) -> dict[str, str]:
        return dict(self._values)

    def selected_options(self, name: str) -> list[str]:
        return [v for v in (self._values.get(name) or "").split(",") if v]

    def toggle_checkbox_option(self, name: str, option: str, checked: bool) -> str:
        selected = self.selected_options(name)
        if checked and option not in selected:
            selected.append(option)
        elif not checked:
            selected = [v for v in selected if v != option]

        if selected:
            self._values[name] = ",".join(selected)
        else:
            self._values.pop(name, None)
        return self._values.get(name, "")

    def serialize(self, fields: Iterable[AttributeFieldDef]) -> str:
        names = [f.name for f in fields]
        return json.dumps({n: self._values[n] for n in names if n in self._values}, ensure_ascii=False)

    def missing_required(self, fields: Iterable[AttributeFieldDef]) -> list[AttributeFieldDef]:
        return [f for f in fields if f.required and not (self._values.get(f.name) or "").strip()]

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)
