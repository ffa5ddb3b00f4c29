from __future__ import annotations

from dataclasses import dataclass, field

from authoring.engine.directory import CategoryDirectory
from authoring.errors import SchemaError
from authoring.schemas import AttributeFieldDef

NO_CATEGORY_DETAILS = "No product details defined in this category."
NO_SUBCATEGORY_DETAILS = "No product details defined in this subcategory."
SELECT_SUBCATEGORY = "Select a subcategory to load product details."


@dataclass
class ResolvedSchema:
    fields: list[AttributeFieldDef] = field(default_factory=list)
    notice: str | None = None
    awaiting_subcategory: bool = False

    @property
    def names(self) -> set[str]:
        return {f.name for f in self.fields}

    def get(self, name: str) -> AttributeFieldDef | None:
        for f in self.fields:
            if f.name == name: return f
        return None


class AttributeSchemaResolver:
    def __init__(self, directory: CategoryDirectory):
        self.directory = directory

    def requires_subcategory(self, category_id: int) -> bool:
        return bool(self._category(category_id).subcategories)

    def resolve(self, category_id: int, subcategory_id: int | None = None) -> ResolvedSchema:
        """
        Schema lives on the subcategory when the category has any, otherwise on the category.
        An empty result always carries a notice for the user.
        """
        category = self._category(category_id)

        if not category.subcategories:
            if subcategory_id is not None:
                raise SchemaError(f"Category '{category.name}' has no subcategories")
            fields = list(category.attribute_schema)
            return ResolvedSchema(fields=fields, notice=None if fields else NO_CATEGORY_DETAILS)

        if subcategory_id is None:
            return ResolvedSchema(notice=SELECT_SUBCATEGORY, awaiting_subcategory=True)

        sub = category.get_subcategory(subcategory_id)
        if sub is None:
            raise SchemaError(f"Subcategory {subcategory_id} does not belong to category '{category.name}'")
        fields = list(sub.attribute_schema)
        return ResolvedSchema(fields=fields, notice=None if fields else NO_SUBCATEGORY_DETAILS)

    def _category(self, category_id: int):
        category = self.directory.get(category_id)
        if category is None:
            raise SchemaError(f"Unknown category {category_id}")
        return category
