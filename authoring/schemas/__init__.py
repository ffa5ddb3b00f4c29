from .category import *
from .media import *
from .product import *

__all__ = [
    'FieldKind', 'FieldOption', 'AttributeFieldDef', 'Subcategory', 'Category',
    'MediaKind', 'MediaOrigin', 'StagedFile', 'MediaRecord', 'MediaItem',
    'TypeTag', 'ProductBase', 'ProductWrite', 'ProductRead', 'ProductDraft',
]
