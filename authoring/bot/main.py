from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from config import VENDOR_BOT_TOKEN
from authoring.bot.handler import router

dp = Dispatcher(storage=MemoryStorage())
dp.include_router(router)

async def run_vendor_bot():
    bot = Bot(VENDOR_BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    await bot.delete_webhook(drop_pending_updates=False)
    await dp.start_polling(bot)
