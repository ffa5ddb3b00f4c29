from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from authoring.schemas import AttributeFieldDef, Category, FieldKind, MediaItem, TypeTag

TYPE_LABELS = {
    TypeTag.new: "New",
    TypeTag.used: "Used",
    TypeTag.rental: "Rental",
    TypeTag.attachments: "Attachments",
}


def _rows(buttons: list[InlineKeyboardButton], width: int = 2) -> list[list[InlineKeyboardButton]]:
    return [buttons[i: i + width] for i in range(0, len(buttons), width)]


class CategoryChoice(InlineKeyboardMarkup):
    def __init__(self, categories: list[Category]):
        buttons = [InlineKeyboardButton(text=c.name, callback_data=f"category:{c.id}") for c in categories]
        super().__init__(inline_keyboard=_rows(buttons))


class SubcategoryChoice(InlineKeyboardMarkup):
    def __init__(self, category: Category):
        buttons = [InlineKeyboardButton(text=s.name, callback_data=f"subcategory:{s.id}") for s in category.subcategories]
        super().__init__(inline_keyboard=_rows(buttons))


class TypeTags(InlineKeyboardMarkup):
    def __init__(self, selected: list[TypeTag]):
        buttons = [
            InlineKeyboardButton(text=f"{'✅ ' if tag in selected else ''}{label}", callback_data=f"type:{tag.value}")
            for tag, label in TYPE_LABELS.items()
        ]
        super().__init__(inline_keyboard=_rows(buttons))


class FieldOptions(InlineKeyboardMarkup):
    """
    Options of a select/radio/checkbox detail.
    Callback data carries indexes, names and values can exceed Telegram's 64 byte limit.
    """
    def __init__(self, field_index: int, field: AttributeFieldDef, selected: list[str]):
        mark = "☑️ " if field.kind is FieldKind.checkbox else "🔘 "
        buttons = [
            InlineKeyboardButton(text=f"{mark if o.value in selected else ''}{o.label}", callback_data=f"attr:{field_index}:{i}")
            for i, o in enumerate(field.options or [])
        ]
        super().__init__(inline_keyboard=_rows(buttons))


class MediaActions(InlineKeyboardMarkup):
    def __init__(self, items: list[tuple[str, MediaItem]]):
        buttons = [
            InlineKeyboardButton(text=f"🗑️ {item.title[-30:]}", callback_data=f"media_del:{key}")
            for key, item in items
        ]
        super().__init__(inline_keyboard=_rows(buttons, width=1))


class ConfirmDelete(InlineKeyboardMarkup):
    def __init__(self, key: str):
        super().__init__(inline_keyboard=[[
            InlineKeyboardButton(text="🗑️ Delete", callback_data=f"media_confirm:{key}"),
            InlineKeyboardButton(text="Cancel", callback_data="media_cancel"),
        ]])
