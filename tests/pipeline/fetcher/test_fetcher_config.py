"""Tests for ``PlatformConfig`` environment loading and validation."""

import pytest

from submission_report.config import CHUNK_SIZE, DEFAULT_BASE_URL, PAGE_SIZE
from submission_report.exceptions import ConfigError
from submission_report.pipeline.fetcher.config import PlatformConfig


def test_defaults_without_environment(platform_env):
    cfg = PlatformConfig()
    assert cfg.base_url == DEFAULT_BASE_URL
    assert cfg.tenant == "uob"
    assert cfg.page_size == PAGE_SIZE
    assert cfg.chunk_size == CHUNK_SIZE
    assert cfg.session_cookie == ""
    assert cfg.default_group_serial == ""


def test_headers_include_fixed_set_and_cookie(platform_env, monkeypatch):
    monkeypatch.setenv("PLATFORM_SESSION_COOKIE", "sid=abc")
    headers = PlatformConfig().headers()
    assert headers == {
        "content-type": "application/json",
        "tenantname": "uob",
        "country": "id",
        "platform": "Web",
        "with-auth": "true",
        "Cookie": "sid=abc",
    }


def test_headers_omit_cookie_when_unset(platform_env):
    assert "Cookie" not in PlatformConfig().headers()


def test_env_overrides_and_trailing_slash(platform_env, monkeypatch):
    monkeypatch.setenv("PLATFORM_BASE_URL", "https://staging.example.test/")
    monkeypatch.setenv("CHUNK_SIZE", "5")
    monkeypatch.setenv("DEFAULT_STRUCTURE_SERIAL", "Node-7")
    cfg = PlatformConfig()
    assert cfg.base_url == "https://staging.example.test"
    assert cfg.chunk_size == 5
    assert cfg.default_structure_serial == "Node-7"


def test_dotenv_file_is_loaded(platform_env):
    (platform_env / ".env").write_text(
        "DEFAULT_GROUP_SERIAL=GRP-ENV\nPAGE_SIZE=25\n", encoding="utf-8"
    )
    cfg = PlatformConfig()
    assert cfg.default_group_serial == "GRP-ENV"
    assert cfg.page_size == 25


@pytest.mark.parametrize("value", ["abc", "0", "-4"])
def test_invalid_numeric_setting_raises(platform_env, monkeypatch, value):
    monkeypatch.setenv("PAGE_SIZE", value)
    with pytest.raises(ConfigError) as excinfo:
        PlatformConfig()
    assert excinfo.value.context == {"variable": "PAGE_SIZE"}


def test_non_http_base_url_raises(platform_env, monkeypatch):
    monkeypatch.setenv("PLATFORM_BASE_URL", "ftp://example.test")
    with pytest.raises(ConfigError):
        PlatformConfig()
