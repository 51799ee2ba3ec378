"""
Tests for configuration loading (core/config.py).
"""

from pathlib import Path

import pytest

from letterboxd_sync.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_CONCURRENCY,
    LetterboxdConfig,
    load_config,
)
from letterboxd_sync.core.exceptions import ConfigError


@pytest.fixture
def write_config(tmp_path):
    """Write a config.yaml into tmp_path and return its path"""
    def _write(content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content, encoding="utf-8")
        return path
    return _write


class TestLoadConfig:
    """Tests for load_config()"""

    def test_defaults_from_environment_only(self, tmp_path, monkeypatch, credentials_env):
        monkeypatch.chdir(tmp_path)

        config = load_config(environ=credentials_env)

        assert config.letterboxd.api_key == "key-123"
        assert config.letterboxd.api_secret == "secret-456"
        assert config.letterboxd.username == "cinephile"
        assert config.letterboxd.password == "hunter2"
        assert config.letterboxd.base_url == DEFAULT_BASE_URL
        assert config.sync.concurrency == DEFAULT_CONCURRENCY
        assert config.sync.page_size == 100
        assert config.sync.cache_file == Path(".movies.json")
        assert config.logging.directory is None
        assert config.logging.level == "INFO"

    def test_missing_credentials(self, tmp_path, monkeypatch, credentials_env):
        monkeypatch.chdir(tmp_path)
        del credentials_env["LETTERBOXD_SECRET"]
        credentials_env["LETTERBOXD_PASSWORD"] = "  "

        with pytest.raises(ConfigError) as exc_info:
            load_config(environ=credentials_env)

        assert exc_info.value.details["missing"] == ["LETTERBOXD_SECRET", "LETTERBOXD_PASSWORD"]

    def test_credentials_from_file(self, write_config):
        path = write_config(
            "letterboxd:\n"
            "  api_key: file-key\n"
            "  api_secret: file-secret\n"
            "  username: someone\n"
            "  password: pw\n"
        )

        config = load_config(path, environ={})

        assert config.letterboxd.api_key == "file-key"

    def test_environment_overrides_file(self, write_config, credentials_env):
        path = write_config("letterboxd:\n  api_key: file-key\n")

        config = load_config(path, environ=credentials_env)

        assert config.letterboxd.api_key == "key-123"

    def test_sync_and_logging_sections(self, write_config, credentials_env, tmp_path):
        path = write_config(
            "letterboxd:\n"
            "  base_url: https://example.test/api/\n"
            "sync:\n"
            "  concurrency: 4\n"
            "  page_size: 50\n"
            "  max_pages: 10\n"
            "  cache_file: cache.json\n"
            "  request_timeout: 5\n"
            "logging:\n"
            f"  directory: {tmp_path / 'logs'}\n"
            "  level: debug\n"
        )

        config = load_config(path, environ=credentials_env)

        assert config.letterboxd.base_url == "https://example.test/api"
        assert config.sync.concurrency == 4
        assert config.sync.page_size == 50
        assert config.sync.max_pages == 10
        assert config.sync.cache_file == Path("cache.json")
        assert config.sync.request_timeout == 5.0
        assert config.logging.directory == (tmp_path / "logs").resolve()
        assert config.logging.level == "DEBUG"

    def test_empty_file_uses_defaults(self, write_config, credentials_env):
        config = load_config(write_config(""), environ=credentials_env)

        assert config.sync.concurrency == DEFAULT_CONCURRENCY

    def test_explicit_missing_file_raises(self, tmp_path, credentials_env):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml", environ=credentials_env)

    def test_invalid_yaml_raises(self, write_config, credentials_env):
        with pytest.raises(ConfigError):
            load_config(write_config("sync: [unclosed"), environ=credentials_env)

    def test_non_dict_document_raises(self, write_config, credentials_env):
        with pytest.raises(ConfigError):
            load_config(write_config("- a\n- b\n"), environ=credentials_env)

    def test_non_dict_section_raises(self, write_config, credentials_env):
        with pytest.raises(ConfigError):
            load_config(write_config("sync: 3\n"), environ=credentials_env)

    @pytest.mark.parametrize("line", [
        "concurrency: 0",
        "concurrency: -2",
        "concurrency: true",
        "concurrency: many",
        "page_size: 101",
        "max_pages: 0",
        "request_timeout: 0",
        "cache_file: ''",
    ])
    def test_invalid_sync_values(self, write_config, credentials_env, line):
        with pytest.raises(ConfigError):
            load_config(write_config(f"sync:\n  {line}\n"), environ=credentials_env)

    def test_invalid_log_level(self, write_config, credentials_env):
        with pytest.raises(ConfigError):
            load_config(write_config("logging:\n  level: LOUD\n"), environ=credentials_env)


class TestLetterboxdConfig:
    """Tests for LetterboxdConfig"""

    def test_repr_hides_secrets(self):
        config = LetterboxdConfig(
            api_key="key",
            api_secret="very-secret",
            username="someone",
            password="hunter2",
        )

        assert "very-secret" not in repr(config)
        assert "hunter2" not in repr(config)
