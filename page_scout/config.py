"""
Модуль для загрузки и валидации конфигурации анализатора PageScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from page_scout.logger import logger

PAGESPEED_KEY_ENV = "PAGESPEED_API_KEY"
PAGESPEED_KEY_NAME = "pagespeed_api_key"


class AnalyzerConfig(BaseModel):
    """Конфигурация одного запуска анализа страницы."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field(
        "Mozilla/5.0 (compatible; PageScout/1.0; +https://github.com/page-scout)",
        min_length=1,
        description="User-Agent для основной страницы.",
    )
    probe_user_agent: str = Field(
        "PageScout/1.0", min_length=1, description="User-Agent для вспомогательных проб."
    )

    fetch_timeout: float = Field(15.0, gt=0, description="Таймаут основной страницы (секунд).")
    sitemap_timeout: float = Field(5.0, gt=0, description="Таймаут HEAD /sitemap.xml.")
    robots_timeout: float = Field(5.0, gt=0, description="Таймаут GET /robots.txt.")
    llms_timeout: float = Field(5.0, gt=0, description="Таймаут каждого llms-файла.")
    https_probe_timeout: float = Field(6.0, gt=0, description="Таймаут проверки http→https.")

    pagespeed_enabled: bool = Field(True, description="Вызывать ли PageSpeed Insights.")
    pagespeed_endpoint: str = Field(
        "https://www.googleapis.com/pagespeedonline/v5/runPagespeed",
        min_length=1,
        description="Адрес API оценки производительности.",
    )
    pagespeed_strategy: str = Field("mobile", description="Стратегия Lighthouse.")
    pagespeed_categories: Tuple[str, ...] = Field(
        ("performance", "accessibility", "best-practices", "seo"),
        description="Запрашиваемые категории Lighthouse.",
    )
    pagespeed_timeout: float = Field(90.0, gt=0, description="Таймаут одной попытки (секунд).")
    pagespeed_max_attempts: int = Field(2, ge=1, description="Максимум попыток.")
    pagespeed_rate_limit_backoff: float = Field(3.0, ge=0, description="Пауза после HTTP 429.")
    pagespeed_retry_backoff: float = Field(2.0, ge=0, description="Пауза после сбоя транспорта.")

    secrets_file: Union[str, None] = Field(
        None, description="YAML/JSON-файл с ключом pagespeed_api_key."
    )
    rule_workers: int = Field(1, ge=1, description="Потоков для запуска правил (1 = по очереди).")

    @field_validator("pagespeed_categories", mode="before")
    def _categories_as_tuple(cls, v: Any) -> Any:
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        if isinstance(v, list):
            return tuple(v)
        return v

    @field_validator("pagespeed_strategy")
    def _known_strategy(cls, v: str) -> str:
        if v not in ("mobile", "desktop"):
            raise ValueError(f"стратегия должна быть mobile или desktop, получено {v!r}")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _read_mapping(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path)
    if suffix == ".json":
        return _read_json(path)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None) -> AnalyzerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект AnalyzerConfig.
    Без пути берёт configs/default.yaml, а если его нет, то значения по умолчанию.
    Явно указанный, но отсутствующий файл даёт FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            logger.debug("No %s, using built-in defaults", _DEFAULT_CFG)
            return AnalyzerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    data = _read_mapping(path_obj)
    try:
        return AnalyzerConfig(**data)
    except ValidationError:
        logger.error("Invalid configuration in %s", path_obj)
        raise


def resolve_api_key(config: AnalyzerConfig) -> str:
    """
    Ключ PageSpeed: сначала secrets-файл, затем переменная окружения,
    иначе пустая строка (запрос без ключа).
    """
    if config.secrets_file:
        secrets_path = Path(config.secrets_file).expanduser()
        if secrets_path.is_file():
            try:
                secrets = _read_mapping(secrets_path)
            except (ValueError, TypeError) as exc:
                logger.warning("Ignoring unreadable secrets file %s: %s", secrets_path, exc)
            else:
                value = secrets.get(PAGESPEED_KEY_NAME)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        else:
            logger.debug("Secrets file %s not found", secrets_path)
    return os.environ.get(PAGESPEED_KEY_ENV, "").strip()


__all__ = ["AnalyzerConfig", "load_config", "resolve_api_key", "PAGESPEED_KEY_ENV"]
