from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from authoring.engine.directory import CategoryDirectory
from authoring.engine.media import MediaChannelManager
from authoring.engine.orchestrator import SubmissionOrchestrator, SubmissionOutcome, submit_label
from authoring.engine.preview import display_title, live_preview_url
from authoring.engine.schema import AttributeSchemaResolver, ResolvedSchema
from authoring.engine.values import AttributeValueStore
from authoring.errors import SchemaError, ValidationError
from authoring.schemas import AttributeFieldDef, FieldKind, ProductDraft, TypeTag

if TYPE_CHECKING:
    from authoring.api import MarketplaceClient

TEXT_FIELDS = ("name", "description", "meta_title", "meta_description", "manufacturer", "model")
FLAG_FIELDS = ("direct_sale", "hide_price", "online_payment")
TRUE_WORDS = {"1", "true", "yes", "y", "on", "да"}
FALSE_WORDS = {"0", "false", "no", "n", "off", "нет"}


class AuthoringSession:
    """
    One create/edit surface: draft + attribute values + media channels, sharing a category directory.
    """

    def __init__(self, client: MarketplaceClient, directory: CategoryDirectory, draft: ProductDraft | None = None):
        self.client = client
        self.directory = directory
        self.draft = draft or ProductDraft()
        self.values = AttributeValueStore()
        self.media = MediaChannelManager()
        self.resolver = AttributeSchemaResolver(directory)
        self.orchestrator = SubmissionOrchestrator(client, directory)
        self.schema = ResolvedSchema()
        self.log = logging.getLogger(self.__class__.__name__)

    async def start(self) -> "AuthoringSession":
        await self.directory.load(self.client)
        if self.draft.category is not None:
            self._reresolve()
        return self

    @classmethod
    async def for_product(cls, client: MarketplaceClient, directory: CategoryDirectory, product_id: int) -> "AuthoringSession":
        """Edit mode: seed everything from the server record."""
        product = await client.get_product(product_id)
        session = cls(client, directory, ProductDraft.from_read(product))
        session.values = AttributeValueStore.from_product(product)
        session.media.load_persisted(product)
        return await session.start()

    # ===================== category & schema =====================

    def select_category(self, category_id: int) -> ResolvedSchema:
        if self.directory.get(category_id) is None:
            raise SchemaError(f"Unknown category {category_id}")
        self.draft.category = category_id
        self.draft.subcategory = None
        return self._reresolve()

    def select_subcategory(self, subcategory_id: int) -> ResolvedSchema:
        if self.draft.category is None:
            raise SchemaError("Select a category first")
        self.schema = self.resolver.resolve(self.draft.category, subcategory_id)
        self.draft.subcategory = subcategory_id
        return self.schema

    def _reresolve(self) -> ResolvedSchema:
        self.schema = self.resolver.resolve(self.draft.category, self.draft.subcategory)
        return self.schema

    @property
    def ready(self) -> bool:
        return self.draft.category is not None and not self.schema.awaiting_subcategory

    # ===================== fields =====================

    def set_field(self, name: str, raw: str) -> None:
        raw = (raw or "").strip()
        if name in TEXT_FIELDS:
            setattr(self.draft, name, raw)
        elif name == "price":
            try:
                self.draft.price = Decimal(raw.replace(",", ".")) if raw else None
            except InvalidOperation:
                raise ValidationError(f"'{raw}' is not a valid price")
        elif name == "stock_quantity":
            try:
                self.draft.stock_quantity = int(raw)
            except ValueError:
                raise ValidationError(f"'{raw}' is not a whole number")
        elif name in FLAG_FIELDS:
            word = raw.lower()
            if word not in TRUE_WORDS | FALSE_WORDS:
                raise ValidationError(f"'{raw}' is not yes/no")
            setattr(self.draft, name, word in TRUE_WORDS)
        else:
            raise ValidationError(f"Unknown field '{name}'")

    def attribute(self, name: str) -> AttributeFieldDef:
        field = self.schema.get(name)
        if field is None:
            raise ValidationError(f"'{name}' is not a product detail of this category")
        return field

    def set_attribute(self, name: str, value: str) -> str:
        field = self.attribute(name)
        if field.kind in (FieldKind.select, FieldKind.radio) and value not in {o.value for o in field.options or []}:
            raise ValidationError(f"'{value}' is not an option of {field.label}")
        if field.kind is FieldKind.checkbox:
            raise ValidationError(f"{field.label} is a checkbox field, toggle its options instead")
        self.values.set(name, value)
        return value

    def toggle_checkbox(self, name: str, option: str, checked: bool | None = None) -> str:
        field = self.attribute(name)
        if field.kind is not FieldKind.checkbox:
            raise ValidationError(f"{field.label} is not a checkbox field")
        if option not in {o.value for o in field.options or []}:
            raise ValidationError(f"'{option}' is not an option of {field.label}")
        if checked is None:
            checked = option not in self.values.selected_options(name)
        return self.values.toggle_checkbox_option(name, option, checked)

    def toggle_type(self, tag: TypeTag | str, checked: bool | None = None) -> list[TypeTag]:
        tag = TypeTag(tag)
        if checked is None:
            checked = tag not in self.draft.type
        return self.draft.toggle_type(tag, checked)

    # ===================== preview & submit =====================

    def preview(self) -> tuple[str, str]:
        return (
            display_title(self.draft.manufacturer, self.draft.name, self.draft.model),
            live_preview_url(self.draft.name),
        )

    @property
    def submit_label(self) -> str:
        return submit_label(self.draft)

    @property
    def submitting(self) -> bool:
        return self.orchestrator.running

    async def submit(self, owner_id: int | None) -> SubmissionOutcome:
        outcome = await self.orchestrator.submit(self.draft, self.values, self.media, owner_id)
        self.log.info("Submission finished: %s (product %s)", outcome.status.value, outcome.product_id)
        return outcome
