import pytest

from imapbridge.config import (
    BridgeSettings,
    IMAPConfig,
    account_env_prefix,
    discover_account_ids,
    parse_bool_env,
    validate_account_id,
    validate_environment,
)
from imapbridge.errors import ConfigError


def test_account_env_prefix():
    assert account_env_prefix("default") == "MAIL_IMAP_DEFAULT_"
    assert account_env_prefix("my-work.acct") == "MAIL_IMAP_MY_WORK_ACCT_"


def test_imap_config_from_env_defaults():
    env = {
        "MAIL_IMAP_WORK_HOST": "imap.example.com",
        "MAIL_IMAP_WORK_USER": "me",
        "MAIL_IMAP_WORK_PASS": "s3cret",
    }
    cfg = IMAPConfig.from_env("work", env)
    assert cfg.host == "imap.example.com"
    assert cfg.port == 993
    assert cfg.use_ssl is True
    assert "s3cret" not in repr(cfg)


def test_imap_config_overrides():
    env = {
        "MAIL_IMAP_WORK_HOST": "imap.example.com",
        "MAIL_IMAP_WORK_USER": "me",
        "MAIL_IMAP_WORK_PASS": "pw",
        "MAIL_IMAP_WORK_PORT": "143",
        "MAIL_IMAP_WORK_SECURE": "false",
    }
    cfg = IMAPConfig.from_env("work", env)
    assert cfg.port == 143
    assert cfg.use_ssl is False


def test_imap_config_missing_required():
    assert IMAPConfig.from_env("work", {"MAIL_IMAP_WORK_HOST": "h"}) is None


def test_settings_defaults():
    s = BridgeSettings.from_env({})
    assert s.write_enabled is False
    assert s.cursor_ttl_ms == 600_000
    assert s.cursor_max_entries == 200
    assert s.max_search_matches_for_pagination == 5000
    assert s.log_level == "INFO"


def test_settings_from_env():
    s = BridgeSettings.from_env(
        {
            "MAIL_IMAP_WRITE_ENABLED": "yes",
            "MAIL_IMAP_CURSOR_TTL_MS": "1000",
            "MAIL_IMAP_CURSOR_MAX_ENTRIES": "5",
            "MAIL_IMAP_MAX_SEARCH_MATCHES": "50",
            "LOG_LEVEL": "debug",
        }
    )
    assert s == BridgeSettings(
        write_enabled=True,
        cursor_ttl_ms=1000,
        cursor_max_entries=5,
        max_search_matches_for_pagination=50,
        log_level="DEBUG",
    )


@pytest.mark.parametrize("raw,expected", [("1", True), ("TRUE", True), ("off", False), ("maybe", True), (None, True)])
def test_parse_bool_env(raw, expected):
    assert parse_bool_env(raw, True) is expected


def test_discover_account_ids():
    env = {
        "MAIL_IMAP_DEFAULT_HOST": "a",
        "MAIL_IMAP_WORK_HOST": "b",
        "MAIL_IMAP_WORK_USER": "u",
        "MAIL_IMAP_WRITE_ENABLED": "true",
    }
    assert discover_account_ids(env) == ["default", "work"]


@pytest.mark.parametrize("bad", ["", "a:b", "has space", "x" * 65])
def test_validate_account_id_rejects(bad):
    with pytest.raises(ConfigError):
        validate_account_id(bad)


def test_validate_environment():
    env = {"MAIL_IMAP_WORK_HOST": "h", "MAIL_IMAP_WORK_USER": "u"}
    problems = validate_environment(env)
    assert problems == ["Account 'work' is missing required env vars: MAIL_IMAP_WORK_PASS"]
    assert validate_environment({}) == [
        "Account 'default' is missing required env vars: "
        "MAIL_IMAP_DEFAULT_HOST, MAIL_IMAP_DEFAULT_USER, MAIL_IMAP_DEFAULT_PASS"
    ]
