# File: page_scout/errors.py
"""page_scout.errors: Иерархия исключений верхнего уровня.

Наружу (CLI, HTTP API) выходит только один из этих типов; каждый знает свой
HTTP-статус. Ошибки вспомогательных проб и отдельных правил сюда не
попадают: они превращаются в значения или вердикты на месте.
"""

from __future__ import annotations

__all__ = [
    "AnalysisError",
    "InvalidUrlError",
    "FetchError",
    "FetchTimeoutError",
    "NetworkError",
    "HttpStatusError",
]


class AnalysisError(Exception):
    """Базовая ошибка анализа; неожиданные сбои отдаются как 500."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidUrlError(AnalysisError):
    """Пустой или нераспознаваемый адрес."""

    status_code = 400


class FetchError(AnalysisError):
    """Основную страницу получить не удалось."""

    status_code = 422


class FetchTimeoutError(FetchError):
    def __init__(self, url: str, timeout: float) -> None:
        super().__init__("Request timed out. The website took too long to respond.")
        self.url = url
        self.timeout = timeout


class NetworkError(FetchError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not reach the website: {reason}")
        self.url = url
        self.reason = reason


class HttpStatusError(FetchError):
    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"Failed to fetch URL: HTTP {status}")
        self.url = url
        self.status = status
