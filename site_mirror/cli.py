# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteMirror через командную строку.

Команды:
  mirror URL [OUTPUT_DIR]   Зеркалировать сайт в локальный каталог
  config                    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (необязательно)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только консоль, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда mirror опции:
  --concurrency INT   Число одновременных загрузок (default: 5)
  --timeout SEC       Таймаут одного запроса
  --user-agent STR    Заголовок User-Agent
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблонами для HTML-отчёта
  --run-timeout SEC   Таймаут всего запуска (секунд)

Дополнительно:
  --version, -v       Показать версию SiteMirror

Пример:
  site-mirror mirror https://example.com ./example --concurrency 8 --json report.json
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_mirror import __version__
from site_mirror.config import MirrorConfig, load_config
from site_mirror.engine import start_mirror
from site_mirror.logger import init_logging
from site_mirror.report.html_report import render_html
from site_mirror.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def build_config(config_path, **overrides) -> MirrorConfig:
    """Собирает MirrorConfig из файла (если задан) и аргументов CLI."""
    if config_path is not None:
        return load_config(config_path, **overrides)
    return MirrorConfig(**{k: v for k, v in overrides.items() if v is not None})


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMirror, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только консоль, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteMirror CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('mirror', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False)
@click.argument('output_dir', required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option('--concurrency', '-n', type=int, default=None, help='Число одновременных загрузок')
@click.option('--timeout', type=float, default=None, help='Таймаут одного запроса (секунд)')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами (по умолчанию встроенный шаблон)'
)
@click.option(
    '--run-timeout', 'run_timeout',
    type=float,
    default=None,
    help='Таймаут всего запуска (секунд)'
)
@click.pass_context
def mirror(ctx, url, output_dir, concurrency, timeout, user_agent,
           json_output, html_output, template_dir, run_timeout):
    """Зеркалировать сайт URL в каталог OUTPUT_DIR."""
    config_path = ctx.obj['config_path']
    if url is None and config_path is None:
        print_error('Укажите URL или --config с base_url')
    try:
        cfg = build_config(
            config_path,
            base_url=url,
            output_dir=output_dir,
            concurrency=concurrency,
            timeout=timeout,
            user_agent=user_agent,
        )
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    click.echo(f'Mirroring {cfg.seed_url} to {cfg.output_dir}')
    try:
        if run_timeout:
            report = asyncio.run(
                asyncio.wait_for(start_mirror(cfg), timeout=run_timeout)
            )
        else:
            report = asyncio.run(start_mirror(cfg))
    except asyncio.TimeoutError:
        print_error(f'Зеркалирование не завершено за {run_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при зеркалировании: {e}')

    summary = report.summary()
    click.echo(
        f"Mirror complete: {summary['saved']} saved, {summary['failed']} failed "
        f"in {summary['duration']} s"
    )

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False)
@click.pass_context
def show_config(ctx, url):
    """Показать итоговую конфигурацию в JSON."""
    config_path = ctx.obj['config_path']
    if url is None and config_path is None:
        print_error('Укажите URL или --config с base_url')
    try:
        cfg = build_config(config_path, base_url=url)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
