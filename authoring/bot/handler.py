import html
import logging

from aiogram import Router
from aiogram.enums import ChatType
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from config import VENDOR_TG_IDS
from authoring.bot import keyboards, states, texts
from authoring.bot.helpers import (
    SESSIONS,
    client,
    directory,
    download_staged,
    owner_id_for,
    render_media,
    render_notification,
    render_session,
)
from authoring.engine import AuthoringSession
from authoring.errors import AuthoringError, MediaValidationError, SubmissionInProgress
from authoring.schemas import FieldKind

logger = logging.getLogger(__name__)
router = Router()

vendor_filter = lambda obj: obj.from_user and obj.from_user.id in VENDOR_TG_IDS and obj.chat.type == ChatType.PRIVATE
vendor_call_filter = lambda obj: obj.from_user and obj.from_user.id in VENDOR_TG_IDS and obj.message and obj.message.chat.type == ChatType.PRIVATE

router.message.filter(vendor_filter)
router.callback_query.filter(vendor_call_filter)


async def _session_or_hint(message: Message) -> AuthoringSession | None:
    session = SESSIONS.get(message.from_user.id)
    if session is None: await message.answer(texts.no_session)
    return session


async def _show_schema(message: Message, session: AuthoringSession):
    await message.answer(render_session(session))


# =========================
# OPEN / CLOSE
# =========================

@router.message(CommandStart())
@router.message(Command("help"))
async def handle_help(message: Message):
    await message.answer(texts.help_text)


@router.message(Command("new"))
async def handle_new(message: Message, state: FSMContext):
    session = AuthoringSession(client, directory)
    try:
        await session.start()
    except AuthoringError as e:
        logger.error("Category directory load failed: %s", e)
        return await message.answer(texts.categories_failed.format(error=html.escape(str(e))))

    SESSIONS[message.from_user.id] = session
    await state.set_state(states.ProductForm.editing)
    if not directory.categories:
        return await message.answer(texts.no_categories)
    await message.answer(texts.select_category, reply_markup=keyboards.CategoryChoice(directory.categories))


@router.message(Command("edit"))
async def handle_edit(message: Message, command: CommandObject, state: FSMContext):
    raw = (command.args or "").strip()
    if not raw.isdigit():
        return await message.answer(texts.edit_usage)

    try:
        session = await AuthoringSession.for_product(client, directory, int(raw))
    except AuthoringError as e:
        logger.error("Product %s load failed: %s", raw, e)
        return await message.answer(texts.product_failed.format(error=html.escape(str(e))))

    SESSIONS[message.from_user.id] = session
    await state.set_state(states.ProductForm.editing)
    await _show_schema(message, session)


@router.message(Command("cancel"))
async def handle_cancel(message: Message, state: FSMContext):
    SESSIONS.pop(message.from_user.id, None)
    await state.clear()
    await message.answer(texts.form_cancelled)


# =========================
# FIELDS
# =========================

@router.message(Command("set"))
async def handle_set(message: Message, command: CommandObject):
    if not (session := await _session_or_hint(message)): return
    args = (command.args or "").split(maxsplit=1)
    if not args:
        return await message.answer(texts.set_usage)

    field, value = args[0], args[1] if len(args) > 1 else ""
    try:
        session.set_field(field, value)
    except AuthoringError as e:
        return await message.answer(f"❌ {html.escape(str(e))}")
    await message.answer(texts.saved_field.format(field=html.escape(field)))


@router.message(Command("attr"))
async def handle_attr(message: Message, command: CommandObject):
    if not (session := await _session_or_hint(message)): return
    if not session.ready:
        return await message.answer(texts.not_ready)
    args = (command.args or "").split(maxsplit=1)
    if not args:
        return await message.answer(texts.attr_usage)

    name = args[0]
    try:
        field = session.attribute(name)
        if len(args) == 1:
            if not field.kind.has_options:
                return await message.answer(texts.attr_usage)
            index = session.schema.fields.index(field)
            selected = session.values.selected_options(field.name) if field.kind is FieldKind.checkbox else [session.values.get(field.name)]
            return await message.answer(
                texts.choose_option.format(label=html.escape(field.label)),
                reply_markup=keyboards.FieldOptions(index, field, selected),
            )
        if field.kind is FieldKind.checkbox:
            session.toggle_checkbox(name, args[1])
        else:
            session.set_attribute(name, args[1])
    except AuthoringError as e:
        return await message.answer(f"❌ {html.escape(str(e))}")
    await message.answer(texts.saved_field.format(field=html.escape(field.label)))


@router.message(Command("type"))
async def handle_type(message: Message):
    if not (session := await _session_or_hint(message)): return
    await message.answer(texts.choose_types, reply_markup=keyboards.TypeTags(session.draft.type))


@router.message(Command("preview"))
async def handle_preview(message: Message):
    if not (session := await _session_or_hint(message)): return
    title, url = session.preview()
    await message.answer(
        f"<b>Live Product Name:</b> {html.escape(title) or 'Enter product details to see a preview'}\n"
        f"<b>Live URL:</b> {html.escape(url) or '—'}"
    )


# =========================
# MEDIA
# =========================

@router.message(Command("brochure"))
async def handle_brochure_cmd(message: Message, state: FSMContext):
    if not await _session_or_hint(message): return
    await state.set_state(states.ProductForm.waiting_brochure)
    await message.answer(texts.send_brochure)


@router.message(Command("primary"))
async def handle_primary_cmd(message: Message, state: FSMContext):
    if not await _session_or_hint(message): return
    await state.set_state(states.ProductForm.waiting_primary)
    await message.answer(texts.send_primary)


@router.message(Command("gallery"))
async def handle_gallery_cmd(message: Message, state: FSMContext):
    if not await _session_or_hint(message): return
    await state.set_state(states.ProductForm.waiting_gallery)
    await message.answer(texts.send_gallery)


@router.message(Command("done"))
async def handle_done(message: Message, state: FSMContext):
    if not (session := await _session_or_hint(message)): return
    await state.set_state(states.ProductForm.editing)
    await message.answer(texts.gallery_done.format(count=len(session.media.staged_images)))


@router.message(Command("video"))
async def handle_video(message: Message, command: CommandObject):
    if not (session := await _session_or_hint(message)): return
    url = (command.args or "").strip()
    if not url:
        return await message.answer(texts.video_usage)
    try:
        item = session.media.stage_video_link(url)
    except MediaValidationError as e:
        return await message.answer(f"❌ {html.escape(str(e))}")
    await message.answer(texts.staged_item.format(title=html.escape(item.title)))


@router.message(lambda message: message.document, states.ProductForm.waiting_brochure)
async def handle_brochure_file(message: Message, state: FSMContext):
    if not (session := await _session_or_hint(message)): return
    file = await download_staged(message)
    try:
        item = session.media.stage_brochure(file)
    except MediaValidationError as e:
        return await message.answer(f"❌ {html.escape(str(e))}")
    await state.set_state(states.ProductForm.editing)
    await message.answer(texts.staged_item.format(title=html.escape(item.title)))


@router.message(lambda message: message.photo or message.document, states.ProductForm.waiting_primary)
async def handle_primary_file(message: Message, state: FSMContext):
    if not (session := await _session_or_hint(message)): return
    file = await download_staged(message)
    try:
        item = session.media.stage_primary_image(file)
    except MediaValidationError as e:
        return await message.answer(f"❌ {html.escape(str(e))}")
    await state.set_state(states.ProductForm.editing)
    await message.answer(texts.staged_item.format(title=html.escape(item.title)))


@router.message(lambda message: message.photo or message.document, states.ProductForm.waiting_gallery)
async def handle_gallery_file(message: Message):
    if not (session := await _session_or_hint(message)): return
    file = await download_staged(message)
    accepted, rejections = session.media.stage_gallery_images([file])
    for problem in rejections:
        await message.answer(f"❌ {html.escape(problem)}")
    for item in accepted:
        await message.answer(texts.staged_item.format(title=html.escape(item.title)))


@router.message(Command("media"))
async def handle_media(message: Message):
    if not (session := await _session_or_hint(message)): return
    text, items = render_media(session)
    if not items:
        return await message.answer(texts.no_media)
    await message.answer(text, reply_markup=keyboards.MediaActions(items))


# =========================
# SUBMIT
# =========================

@router.message(Command("submit"))
async def handle_submit(message: Message, state: FSMContext):
    if not (session := await _session_or_hint(message)): return
    if session.submitting:
        return await message.answer(texts.already_submitting)

    await message.answer(texts.submitting.format(label=session.submit_label))
    try:
        outcome = await session.submit(owner_id_for(message.from_user.id))
    except SubmissionInProgress:
        return await message.answer(texts.already_submitting)

    for notification in outcome.notifications:
        await message.answer(render_notification(notification))
    if outcome.should_close:
        SESSIONS.pop(message.from_user.id, None)
        await state.clear()


# =========================
# CALLBACKS
# =========================

@router.callback_query()
async def handle_callback(call: CallbackQuery):
    parts = (call.data or "").split(":")
    session = SESSIONS.get(call.from_user.id)
    if session is None:
        return await call.answer(texts.no_session.split(".")[0], show_alert=True)

    try:
        if parts[0] == "category":
            session.select_category(int(parts[1]))
            category = session.directory.get(session.draft.category)
            if session.schema.awaiting_subcategory:
                await call.message.edit_text(texts.select_subcategory, reply_markup=keyboards.SubcategoryChoice(category))
            else:
                await call.message.edit_text(render_session(session), reply_markup=None)

        elif parts[0] == "subcategory":
            session.select_subcategory(int(parts[1]))
            await call.message.edit_text(render_session(session), reply_markup=None)

        elif parts[0] == "type":
            session.toggle_type(parts[1])
            await call.message.edit_reply_markup(reply_markup=keyboards.TypeTags(session.draft.type))

        elif parts[0] == "attr":
            index, option_index = int(parts[1]), int(parts[2])
            field = session.schema.fields[index]
            option = (field.options or [])[option_index]
            if field.kind is FieldKind.checkbox:
                session.toggle_checkbox(field.name, option.value)
                selected = session.values.selected_options(field.name)
            else:
                session.set_attribute(field.name, option.value)
                selected = [option.value]
            await call.message.edit_reply_markup(reply_markup=keyboards.FieldOptions(index, field, selected))

        elif parts[0] == "media_del":
            item = session.media.find(parts[1])
            if item is None:
                return await call.answer(texts.media_missing, show_alert=True)
            if not item.is_persisted:
                session.media.remove_staged(item.handle)
                await call.message.edit_text(f"🗑️ {html.escape(item.title)} removed", reply_markup=None)
            else:
                await call.message.answer(texts.confirm_delete.format(title=html.escape(item.title)), reply_markup=keyboards.ConfirmDelete(parts[1]))

        elif parts[0] == "media_confirm":
            item = session.media.find(parts[1])
            if item is None:
                return await call.answer(texts.media_missing, show_alert=True)

            async def confirmed(_item):
                return True

            notification = await session.media.delete_persisted(client, session.draft.id, item, confirmed)
            await call.message.edit_text(render_notification(notification), reply_markup=None)

        elif parts[0] == "media_cancel":
            await call.message.edit_text(texts.deletion_cancelled, reply_markup=None)

    except (AuthoringError, IndexError, ValueError) as e:
        logger.warning("Callback %s rejected: %s", call.data, e)
        return await call.answer(str(e)[:200], show_alert=True)

    await call.answer()
