import pytest
import yaml

from ffiii_tui import config
from ffiii_tui.config import ENV_API_KEY, ENV_API_URL, Settings, find_config, load_settings, write_settings
from ffiii_tui.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "USER_CONFIG", tmp_path / "home" / "config.yaml")
    monkeypatch.delenv(ENV_API_KEY, raising=False)
    monkeypatch.delenv(ENV_API_URL, raising=False)
    return tmp_path


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_local_file_wins_over_user_file(isolated):
    write_yaml(isolated / "config.yaml", {"firefly": {"api_key": "local", "api_url": "http://local"}})
    write_yaml(config.USER_CONFIG, {"firefly": {"api_key": "user", "api_url": "http://user"}})

    settings = load_settings()

    assert settings == Settings(api_url="http://local", api_key="local")


def test_user_file_is_fallback():
    write_yaml(config.USER_CONFIG, {"firefly": {"api_key": "user", "api_url": "http://user"}, "ui": {"full_view": True}})

    settings = load_settings()

    assert settings.api_key == "user"
    assert settings.full_view is True


def test_environment_overrides_file(isolated, monkeypatch):
    path = write_yaml(isolated / "custom.yaml", {"firefly": {"api_key": "file", "api_url": "http://file"}})
    monkeypatch.setenv(ENV_API_KEY, "env-key")

    settings = load_settings(path)

    assert settings.api_key == "env-key"
    assert settings.api_url == "http://file"


def test_environment_alone_is_enough(monkeypatch):
    monkeypatch.setenv(ENV_API_KEY, "k")
    monkeypatch.setenv(ENV_API_URL, "http://env")

    assert find_config() is None
    assert load_settings() == Settings(api_url="http://env", api_key="k")


def test_missing_key_is_reported(isolated):
    write_yaml(isolated / "config.yaml", {"firefly": {"api_url": "http://x"}})

    with pytest.raises(ConfigError, match="API key"):
        load_settings()


def test_missing_url_is_reported(monkeypatch):
    monkeypatch.setenv(ENV_API_KEY, "k")

    with pytest.raises(ConfigError, match="API URL"):
        load_settings()


def test_explicit_path_must_exist(isolated):
    with pytest.raises(ConfigError, match="Config file not found"):
        load_settings(isolated / "nope.yaml")


@pytest.mark.parametrize("text", ["firefly: [unclosed", "- just\n- a list\n"])
def test_malformed_file(isolated, text):
    (isolated / "config.yaml").write_text(text, encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid config file"):
        load_settings()


def test_write_settings_round_trip(isolated):
    path = write_settings(Settings(api_url="http://x", api_key="secret"), isolated / "out" / "config.yaml")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data == {"firefly": {"api_key": "secret", "api_url": "http://x"}, "ui": {"full_view": False}}


def test_write_settings_refuses_overwrite(isolated):
    target = isolated / "config.yaml"
    target.write_text("keep", encoding="utf-8")

    with pytest.raises(ConfigError, match="already exists"):
        write_settings(Settings(api_url="http://x", api_key="k"), target)
    assert target.read_text(encoding="utf-8") == "keep"
