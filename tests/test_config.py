import logging

import pytest
from pydantic import ValidationError

from finai.config import AppConfig, LoggingConfig, load_config
from finai.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FINAI_STORE_PATH", "FINAI_LOG_LEVEL", "FINAI_DEBUG"):
        monkeypatch.delenv(name, raising=False)


def test_default_config():
    config = load_config()

    assert config.storage.finance_key == "finai-finance"
    assert config.storage.users_key == "finai-users"
    assert config.advisor.default_age == 30
    assert config.advisor.default_risk == "medium"
    assert config.debug is False


def test_explicit_config_and_local_override(tmp_path):
    path = tmp_path / "app.toml"
    path.write_text('[storage]\npath = "x.json"\n[logging]\nlevel = "debug"\n', encoding="utf-8")
    (tmp_path / "local.toml").write_text('[storage]\npath = "y.json"\n', encoding="utf-8")

    config = load_config(path)

    assert config.storage.path == "y.json"
    assert config.storage.finance_key == "finai-finance"
    assert config.logging.level == "DEBUG"


def test_missing_explicit_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("FINAI_STORE_PATH", "/tmp/finai.json")
    monkeypatch.setenv("FINAI_LOG_LEVEL", "warning")
    monkeypatch.setenv("FINAI_DEBUG", "true")

    config = load_config()

    assert config.storage.path == "/tmp/finai.json"
    assert config.logging.level == "WARNING"
    assert config.debug is True


def test_invalid_values(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text('[advisor]\ndefault_risk = "extreme"\n', encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(path)
    with pytest.raises(ValidationError):
        LoggingConfig(level="LOUD")


def test_config_is_frozen():
    config = AppConfig()
    with pytest.raises(ValidationError):
        config.debug = True


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "finai.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))

    logging.getLogger("finai.test").info("hello")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert '"msg": "hello"' in log_file.read_text(encoding="utf-8")
    logging.basicConfig(force=True)
