from .books import BooksRepository
from .categories import CategoriesRepository
from .authors import AuthorsRepository
from .series import SeriesRepository
from .users import UsersRepository
from .favorites import FavoritesRepository
from .reading_history import ReadingHistoryRepository
from .comments import CommentsRepository
from .site_settings import SiteSettingsRepository
from . import models

__all__ = [
    "BooksRepository",
    "CategoriesRepository",
    "AuthorsRepository",
    "SeriesRepository",
    "UsersRepository",
    "FavoritesRepository",
    "ReadingHistoryRepository",
    "CommentsRepository",
    "SiteSettingsRepository",
    "models",
]
