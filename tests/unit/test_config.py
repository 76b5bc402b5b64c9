"""
Unit tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from tover.config import DatabaseConfig, LoggingConfig, ToverConfig, load_config


class TestLoadConfig:
    """Test layered configuration"""

    def test_defaults(self):
        config = load_config(environ={})

        assert isinstance(config, ToverConfig)
        assert config.database.host == "localhost"
        assert config.imports.write_batch_size == 500
        assert config.imports.lookup_batch_size == 100
        assert config.forecast.horizon_days == 14
        assert config.forecast.lookback_days == 7
        assert config.forecast.max_items == 50
        assert config.logging.format == "json"
        assert config.workspace_id is None

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "tover.yaml"
        path.write_text(
            "database:\n"
            "  host: db.internal\n"
            "  port: 6543\n"
            "imports:\n"
            "  write_batch_size: 250\n"
            "logging:\n"
            "  level: debug\n"
            "  format: TEXT\n"
        )

        config = load_config(path, environ={})

        assert config.database.host == "db.internal"
        assert config.database.port == 6543
        assert config.imports.write_batch_size == 250
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "text"

    def test_environment_overrides_yaml(self, tmp_path):
        path = tmp_path / "tover.yaml"
        path.write_text("database:\n  host: db.internal\n")

        config = load_config(
            path,
            environ={
                "DB_HOST": "override",
                "DB_PORT": "5433",
                "DB_PASSWORD": "secret",
                "TOVER_WORKSPACE_ID": "shop-1",
                "LOG_LEVEL": "",
            },
        )

        assert config.database.host == "override"
        assert config.database.port == 5433
        assert config.database.password == "secret"
        assert config.workspace_id == "shop-1"
        assert config.logging.level == "INFO"

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path, environ={}).database.port == 5432

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml", environ={})

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            load_config(environ={"DB_PORT": "not-a-port"})

    def test_dotenv_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("TOVER_WORKSPACE_ID=from-dotenv\n")
        # setenv first so teardown removes whatever load_dotenv writes
        monkeypatch.setenv("TOVER_WORKSPACE_ID", "placeholder")
        monkeypatch.delenv("TOVER_WORKSPACE_ID")

        config = load_config(env_file=env_file)

        assert config.workspace_id == "from-dotenv"


class TestSections:
    """Test individual config sections"""

    def test_pool_kwargs(self):
        kwargs = DatabaseConfig(host="h", password="p", max_pool_size=4).pool_kwargs()

        assert kwargs["database"] == "tover"
        assert kwargs["password"] == "p"
        assert kwargs["max_size"] == 4
        assert kwargs["min_size"] == 1

    def test_unknown_log_format(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")
