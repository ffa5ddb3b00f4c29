from aiogram.fsm.state import State, StatesGroup

class ProductForm(StatesGroup):
    editing = State()
    waiting_brochure = State()
    waiting_primary = State()
    waiting_gallery = State()
