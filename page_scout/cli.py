# === FILE: page_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска анализатора PageScout через командную строку.

Команды:
  analyze URL   Проанализировать страницу и вывести/сохранить отчёт
  config        Показать текущую конфигурацию
  serve         Запустить HTTP API (POST /api/analyze)

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)

Команда analyze опции:
  --json PATH         Сохранить JSON-отчёт в файл
  --pretty            Преформатировать JSON-вывод (отступ 2)

Пример:
  page-scout analyze example.com --pretty
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from page_scout import __version__
from page_scout.api import run_server
from page_scout.config import load_config
from page_scout.errors import AnalysisError
from page_scout.logger import init_logging
from page_scout.report.json_report import render_json
from page_scout.scanner import start_analysis

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="PageScout, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Путь к файлу конфигурации YAML/JSON.",
)
@click.option(
    "--log-level", "log_level",
    default="WARNING", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Уровень логирования",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Путь к файлу логов (stderr, если не указан)",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file):
    """Группа команд PageScout CLI."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f"Ошибка загрузки конфигурации: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("analyze", context_settings=CONTEXT_SETTINGS)
@click.argument("url")
@click.option(
    "--json", "-j", "json_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Сохранить JSON-отчёт в файл",
)
@click.option("--pretty", is_flag=True, help="Преформатировать JSON-вывод (отступ 2)")
@click.pass_context
def analyze(ctx, url, json_output, pretty):
    """Проанализировать одну страницу и вывести отчёт."""
    cfg = ctx.obj["config"]
    try:
        report = asyncio.run(start_analysis(url, cfg))
    except AnalysisError as e:
        print_error(f"Ошибка анализа: {e.message}")

    if not json_output:
        click.echo(report.json(pretty=pretty))
        return

    try:
        saved = render_json(report, json_output, pretty=pretty)
    except OSError as e:
        print_error(f"Ошибка при сохранении JSON: {e}")
    click.echo(f"JSON report: {saved}")
    counts = report.counts
    click.echo(
        f"Score: {report.overall_score}/100 "
        f"(pass {counts['pass']}, warning {counts['warning']}, fail {counts['fail']})"
    )


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj["config"]
    click.echo(cfg.model_dump_json(indent=2))


@cli.command("serve", context_settings=CONTEXT_SETTINGS)
@click.option("--host", default="127.0.0.1", show_default=True, help="Адрес для прослушивания")
@click.option("--port", default=8080, show_default=True, type=int, help="Порт")
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP API анализатора."""
    run_server(ctx.obj["config"], host=host, port=port)


if __name__ == "__main__":
    cli()
