"""
Settings loading from YAML and environment.
"""
import pytest

from kawogo_api.config import Settings, load_settings

ENV_VARS = [
    "ROBOFLOW_API", "GEMINI_API_KEY", "GEMINI_MODEL", "PORT",
    "APP_ENV", "MAX_UPLOAD_MB", "LOG_LEVEL", "KAWOGO_CONFIG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "api.yaml"
    path.write_text(
        "api:\n"
        "  title: Test API\n"
        "  max_upload_mb: 2\n"
        "  advice_timeout: 5\n"
        "  cors:\n"
        "    enabled: false\n"
        "  logging:\n"
        "    level: DEBUG\n",
        encoding="utf-8",
    )
    return str(path)


def test_defaults_without_config_file(tmp_path):
    settings = load_settings(str(tmp_path / "missing.yaml"))

    assert settings.port == 5000
    assert settings.max_upload_bytes == 10 * 1024 * 1024
    assert settings.classification_timeout == 30.0
    assert settings.advice_timeout == 15.0
    assert settings.is_production
    assert not settings.roboflow_configured
    assert not settings.gemini_configured


def test_yaml_values_are_applied(config_file):
    settings = load_settings(config_file)

    assert settings.title == "Test API"
    assert settings.max_upload_bytes == 2 * 1024 * 1024
    assert settings.advice_timeout == 5
    assert settings.cors.enabled is False
    assert settings.logging.level == "DEBUG"


def test_environment_overrides(config_file, monkeypatch):
    monkeypatch.setenv("ROBOFLOW_API", "https://classify.example.test/m/1?api_key=k")
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("MAX_UPLOAD_MB", "1")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    settings = load_settings(config_file)

    assert settings.roboflow_api == "https://classify.example.test/m/1?api_key=k"
    assert settings.gemini_api_key == "g-key"
    assert settings.port == 8080
    assert not settings.is_production
    assert settings.max_upload_bytes == 1024 * 1024
    assert settings.logging.level == "WARNING"


def test_blank_credentials_count_as_missing(monkeypatch, tmp_path):
    monkeypatch.setenv("ROBOFLOW_API", "   ")
    monkeypatch.setenv("GEMINI_API_KEY", "")

    settings = load_settings(str(tmp_path / "missing.yaml"))

    assert settings.roboflow_api is None
    assert settings.gemini_api_key is None


def test_settings_are_immutable():
    settings = Settings()

    with pytest.raises(Exception):
        settings.port = 1


def test_config_path_from_environment(config_file, monkeypatch):
    monkeypatch.setenv("KAWOGO_CONFIG", config_file)

    settings = load_settings()

    assert settings.title == "Test API"
    assert settings.max_upload_bytes == 2 * 1024 * 1024


def test_explicit_config_path_beats_environment(config_file, monkeypatch, tmp_path):
    monkeypatch.setenv("KAWOGO_CONFIG", str(tmp_path / "missing.yaml"))

    assert load_settings(config_file).title == "Test API"
