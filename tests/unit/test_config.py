from __future__ import annotations

from pathlib import Path

import pytest

from my_expenses.config import Settings, SettingsError, load_settings


def test_defaults_without_file_or_environment() -> None:
    settings = load_settings(environ={})
    assert settings == Settings()
    assert settings.port == 4000
    assert settings.database_url == "sqlite:///expenses.db"
    assert settings.cors_origin == "http://localhost:3000"
    assert settings.echo_sql is True


def test_environment_overrides(tmp_path: Path) -> None:
    settings = load_settings(
        environ={
            "MY_EXPENSES_ENVIRONMENT": "Production",
            "MY_EXPENSES_PORT": "8080",
            "MY_EXPENSES_DATABASE_URL": "postgresql+psycopg://u:p@db/expenses",
            "MY_EXPENSES_LOG_LEVEL": "debug",
            "MY_EXPENSES_JSON_LOGS": "on",
        }
    )
    assert settings.environment == "production"
    assert settings.is_production
    assert settings.port == 8080
    assert settings.database_url.startswith("postgresql")
    assert settings.log_level == "DEBUG"
    assert settings.json_logs is True
    assert settings.echo_sql is False


def test_yaml_file_then_environment(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text(
        "environment: test\nport: 5000\ncors_origin: https://example.org\nsql_echo: yes\n",
        encoding="utf-8",
    )

    settings = load_settings(config, environ={"MY_EXPENSES_PORT": "6000"})

    assert settings.environment == "test"
    assert settings.cors_origin == "https://example.org"
    assert settings.port == 6000
    assert settings.echo_sql is True


def test_config_path_from_environment(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("host: 0.0.0.0\n", encoding="utf-8")
    settings = load_settings(environ={"MY_EXPENSES_CONFIG": str(config)})
    assert settings.host == "0.0.0.0"


def test_empty_yaml_file_keeps_defaults(tmp_path: Path) -> None:
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")
    assert load_settings(config, environ={}) == Settings()


@pytest.mark.parametrize(
    "environ",
    [
        {"MY_EXPENSES_PORT": "abc"},
        {"MY_EXPENSES_PORT": "70000"},
        {"MY_EXPENSES_ENVIRONMENT": "staging"},
        {"MY_EXPENSES_SQL_ECHO": "maybe"},
        {"MY_EXPENSES_JSON_LOGS": "sometimes"},
    ],
)
def test_invalid_values_raise(environ: dict[str, str]) -> None:
    with pytest.raises(SettingsError):
        load_settings(environ=environ)


def test_unknown_file_keys_raise(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("jwt_secret: nope\n", encoding="utf-8")
    with pytest.raises(SettingsError, match="jwt_secret"):
        load_settings(config, environ={})


def test_non_mapping_file_raises(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(config, environ={})


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SettingsError, match="not found"):
        load_settings(tmp_path / "absent.yaml", environ={})
