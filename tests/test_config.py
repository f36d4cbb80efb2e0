# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from sitemap_monitor.config import MonitorConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("user_agent: Bot/2.0\ntitle_timeout: 1.5", ".yaml", None),
        (json.dumps({"user_agent": "Bot/2.0", "title_timeout": 1.5}), ".json", None),
        ("user_agent: Bot/2.0\ntitle_timeout: 1.5", ".yml", None),
        ("not: a: mapping", ".yaml", ValueError),
        ("- a\n- b", ".yaml", TypeError),
        ("[1, 2]", ".json", TypeError),
        ("{broken", ".json", ValueError),
        ("unknown_option: 1", ".yaml", ValidationError),
        ("title_timeout: -1", ".yaml", ValidationError),
        ("enrich_concurrency: 0", ".yaml", ValidationError),
        ("user_agent = 'x'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, MonitorConfig)
        assert cfg.user_agent == "Bot/2.0"
        assert cfg.title_timeout == 1.5
        assert cfg.fetch_urls_timeout == 15.0


def test_empty_file_gives_defaults(tmp_path):
    cfg = load_config(write_file(tmp_path, "", ".yaml"))
    assert cfg == MonitorConfig()


def test_defaults():
    cfg = MonitorConfig()
    assert cfg.data_dir == Path("data")
    assert cfg.user_agent == "GameSitemapMonitor/1.0"
    assert cfg.relay_url is None
    assert (cfg.robots_timeout, cfg.sitemap_timeout, cfg.fetch_urls_timeout, cfg.title_timeout) == (5, 10, 15, 3)
    assert cfg.title_max_bytes == 500 * 1024
    assert cfg.sample_size == 5


def test_relay_url_trailing_slash_stripped():
    cfg = MonitorConfig(relay_url="https://relay.example.com/api/proxy/")
    assert str(cfg.relay_url) == "https://relay.example.com/api/proxy"


def test_config_is_frozen():
    cfg = MonitorConfig()
    with pytest.raises(ValidationError):
        cfg.retry_times = 3


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == MonitorConfig()


def test_load_config_default_present(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("retry_times: 2\n", encoding="utf-8")
    assert load_config(None).retry_times == 2


def test_load_config_explicit_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")
