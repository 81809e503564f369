# File: tests/test_cli.py
"""Тесты для CLI (`site_mirror.cli`) с использованием click.testing.CliRunner.
Проверяют команды `mirror`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import site_mirror.cli as cli_module
from site_mirror.aggregator import MirrorReport
from site_mirror.cli import cli
from site_mirror.crawler.models import ResourceKind
from site_mirror.logger import configure


@pytest.fixture(autouse=True)
def fake_mirror(monkeypatch):
    """Патчим start_mirror: возвращаем фиктивный отчёт без сети."""
    seen = {}

    async def fake_start_mirror(cfg):
        seen["config"] = cfg
        report = MirrorReport(seed_url=cfg.seed_url, output_dir=str(cfg.output_dir))
        report.add_resource(cfg.seed_url, "index.html", ResourceKind.PAGE, 12)
        report.add_failure(cfg.seed_url + "gone.png", Exception("HTTP 404"))
        report.finish(0.5)
        return report

    monkeypatch.setattr(cli_module, "start_mirror", fake_start_mirror)
    yield seen
    # CliRunner swaps stderr; rebind the handlers to the real stream
    configure(level="INFO")


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteMirror" in result.output


def test_mirror_with_arguments(tmp_path, fake_mirror):
    out = tmp_path / "site"
    result = CliRunner().invoke(
        cli, ["mirror", "http://example.com", str(out), "--concurrency", "7", "--timeout", "3"]
    )
    assert result.exit_code == 0, result.output
    assert "Mirror complete: 1 saved, 1 failed" in result.output
    cfg = fake_mirror["config"]
    assert cfg.concurrency == 7
    assert cfg.timeout == 3.0
    assert cfg.output_dir == out


def test_mirror_from_config_file(tmp_path, fake_mirror):
    cfg_file = tmp_path / "mirror.json"
    cfg_file.write_text(
        json.dumps({"base_url": "https://example.com", "concurrency": 2, "user_agent": "Agent/1.0"}),
        encoding="utf-8",
    )
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "mirror"])
    assert result.exit_code == 0, result.output
    assert fake_mirror["config"].concurrency == 2
    assert fake_mirror["config"].user_agent == "Agent/1.0"


def test_mirror_json_report(tmp_path):
    out = tmp_path / "report.json"
    result = CliRunner().invoke(cli, ["mirror", "http://example.com", "--json", str(out)])
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["resources"][0]["path"] == "index.html"
    assert data["failures"][0]["reason"] == "HTTP 404"


def test_mirror_html_report(tmp_path):
    out = tmp_path / "report.html"
    result = CliRunner().invoke(cli, ["mirror", "http://example.com", "--html", str(out)])
    assert result.exit_code == 0, result.output
    page = out.read_text(encoding="utf-8")
    assert "Mirror of http://example.com/" in page
    assert "gone.png" in page


def test_mirror_requires_url_or_config():
    result = CliRunner().invoke(cli, ["mirror"])
    assert result.exit_code == 1


def test_mirror_invalid_concurrency():
    result = CliRunner().invoke(cli, ["mirror", "http://example.com", "--concurrency", "0"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_mirror_run_timeout(monkeypatch):
    async def slow(cfg):
        await asyncio.sleep(2)

    monkeypatch.setattr(cli_module, "start_mirror", slow)
    result = CliRunner().invoke(cli, ["mirror", "http://example.com", "--run-timeout", "0.2"])
    assert result.exit_code != 0
    assert "не завершено" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "default.yaml"
    cfg_file.write_text("base_url: https://example.com\nconcurrency: 3\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["base_url"] == "https://example.com/"
    assert data["concurrency"] == 3
