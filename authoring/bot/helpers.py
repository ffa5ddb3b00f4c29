from __future__ import annotations

import html

from aiogram.types import Message

from config import VENDOR_USER_IDS
from authoring.api import MarketplaceClient
from authoring.engine import AuthoringSession, CategoryDirectory, Notification, NotificationLevel
from authoring.schemas import MediaItem, StagedFile

client = MarketplaceClient()
directory = CategoryDirectory()

# one open form per vendor
SESSIONS: dict[int, AuthoringSession] = {}

LEVEL_ICONS = {
    NotificationLevel.success: "✅",
    NotificationLevel.info: "ℹ️",
    NotificationLevel.warning: "⚠️",
    NotificationLevel.error: "❌",
}


def owner_id_for(tg_id: int) -> int | None:
    return VENDOR_USER_IDS.get(tg_id)


def media_key(item: MediaItem) -> str:
    return f"p{item.id}" if item.id is not None else item.handle


async def download_staged(message: Message) -> StagedFile | None:
    if message.photo:
        photo = message.photo[-1]
        file = await message.bot.get_file(photo.file_id)
        buffer = await message.bot.download(file)
        return StagedFile(filename=f"{photo.file_unique_id}.jpg", content=buffer.getvalue(), content_type="image/jpeg")
    if message.document:
        doc = message.document
        file = await message.bot.get_file(doc.file_id)
        buffer = await message.bot.download(file)
        return StagedFile(
            filename=doc.file_name or doc.file_unique_id,
            content=buffer.getvalue(),
            content_type=doc.mime_type or "application/octet-stream",
        )
    return None


def render_notification(n: Notification) -> str:
    text = f"{LEVEL_ICONS[n.level]} <b>{html.escape(n.title)}</b>"
    if n.description: text += f"\n{html.escape(n.description)}"
    return text


def render_session(session: AuthoringSession) -> str:
    draft = session.draft
    category = session.directory.get(draft.category) if draft.category is not None else None
    lines = [f"<b>{session.submit_label}</b>"]
    if category is not None:
        sub = category.get_subcategory(draft.subcategory) if draft.subcategory is not None else None
        lines.append(f"Category: {html.escape(category.name)}" + (f" / {html.escape(sub.name)}" if sub else ""))
    if draft.name: lines.append(f"Name: {html.escape(draft.name)}")
    if draft.price is not None: lines.append(f"Price: {draft.price}")
    lines.append(f"Type: {', '.join(t.value for t in draft.type) or '—'}")

    if session.schema.fields:
        lines.append("\n<b>Product details</b>")
        for field in session.schema.fields:
            value = session.values.get(field.name)
            shown = ", ".join(field.option_label(v) for v in value.split(",")) if value and field.options else value
            star = "*" if field.required else ""
            lines.append(f"• {html.escape(field.label)}{star} (<code>{html.escape(field.name)}</code>): {html.escape(shown or '—')}")
    if session.schema.notice:
        lines.append(f"\n⚠️ {html.escape(session.schema.notice)}")
    return "\n".join(lines)


def render_media(session: AuthoringSession) -> tuple[str, list[tuple[str, MediaItem]]]:
    media = session.media
    lines: list[str] = []
    items: list[tuple[str, MediaItem]] = []

    def add(section: str, entries: list[MediaItem]):
        if not entries:
            return
        lines.append(f"<b>{section}</b>")
        for item in entries:
            star = " ⭐" if item is media.primary_image else ""
            lines.append(f"• {html.escape(item.title)}{star}")
            items.append((media_key(item), item))

    add("Brochure (saved)", [media.persisted_brochure] if media.persisted_brochure else [])
    add("Brochure (staged)", [media.staged_brochure] if media.staged_brochure else [])
    add("Primary image (staged)", [media.staged_primary] if media.staged_primary else [])
    add("Images (saved)", media.persisted_images)
    add("Videos (saved)", media.persisted_videos)
    add("Images (staged)", media.staged_images)
    add("Videos (staged)", media.staged_videos)
    return "\n".join(lines), items
