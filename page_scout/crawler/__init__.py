# File: page_scout/crawler/__init__.py
"""page_scout.crawler: Загрузка основной страницы и вспомогательных ресурсов."""

from .ancillary import gather_ancillary
from .fetcher import Fetcher
from .models import AncillaryData, FetchResult

__all__ = ["Fetcher", "FetchResult", "AncillaryData", "gather_ancillary"]
