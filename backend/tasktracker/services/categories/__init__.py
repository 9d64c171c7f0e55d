from .counter import CategoryCounter
from .dto import CategoryCreateIn, CategoryOut, CategoryUpdateIn
from .service import CategoryService, category_to_out

__all__ = [
    "CategoryCounter",
    "CategoryCreateIn",
    "CategoryOut",
    "CategoryService",
    "CategoryUpdateIn",
    "category_to_out",
]
