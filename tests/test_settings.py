import pytest

from core.settings import DEFAULT_SETTINGS_PATH, SETTINGS_ENV_VAR, Settings, load_settings
from search_select import ConfigError


def test_bundled_settings_load():
    settings = load_settings(DEFAULT_SETTINGS_PATH)
    assert settings.search.debounce_ms == 300
    assert settings.search.min_query_length == 2
    assert settings.search.result_limit == 10
    assert settings.logging.level == "INFO"


def test_missing_sections_fall_back_to_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("search:\n  debounce_ms: 50\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings.search.debounce_ms == 50
    assert settings.search.result_limit == 10
    assert settings.db == Settings().db


def test_env_var_points_at_settings(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("db:\n  url: sqlite://\n", encoding="utf-8")
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))

    assert load_settings().db.url == "sqlite://"


def test_explicit_path_beats_env_var(tmp_path, monkeypatch):
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "does-not-exist.yaml"))
    assert load_settings(DEFAULT_SETTINGS_PATH).search.debounce_ms == 300


@pytest.mark.parametrize(
    "content, message",
    [
        ("search: [unclosed", "not valid YAML"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("search:\n  debounce_ms: -5\n", "Invalid settings"),
        ("search:\n  result_limit: 0\n", "Invalid settings"),
    ],
)
def test_bad_settings_raise_config_error(tmp_path, content, message):
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_settings(path)


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "missing.yaml")


def test_empty_file_is_all_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")
    assert load_settings(path) == Settings()
