"""
Tests for configuration loading
"""
import pytest
from pydantic import ValidationError as SettingsValidationError

from core_forum_db import DatabaseConfig, RetryOptions, TransactionMode, get_database_config


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run from an empty directory so no stray .env is picked up"""
    monkeypatch.chdir(tmp_path)
    for name in (
        "FORUM_DB_MAX_RETRIES",
        "FORUM_DB_INITIAL_DELAY",
        "FORUM_DB_MAX_DELAY",
        "FORUM_DB_TRANSACTION_MODE",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDatabaseConfig:
    """Test DatabaseConfig"""

    def test_defaults(self):
        """Test defaults without environment"""
        config = get_database_config()

        assert config.max_retries == 3
        assert config.initial_delay == 0.1
        assert config.max_delay == 5.0
        assert config.backoff_multiplier == 2.0
        assert config.transaction_mode is TransactionMode.BOOKKEEPING
        assert config.max_page_size == 1000

    def test_environment(self, monkeypatch):
        """Test FORUM_DB_ environment variables"""
        monkeypatch.setenv("FORUM_DB_MAX_RETRIES", "7")
        monkeypatch.setenv("FORUM_DB_TRANSACTION_MODE", "sql")

        config = get_database_config()

        assert config.max_retries == 7
        assert config.transaction_mode is TransactionMode.SQL

    def test_env_file(self, tmp_path):
        """Test reading an alternative .env file"""
        env_file = tmp_path / "forum.env"
        env_file.write_text("FORUM_DB_MAX_DELAY=9.5\n")

        config = get_database_config(env_file=str(env_file))

        assert config.max_delay == 9.5

    def test_overrides_win(self, monkeypatch):
        """Test keyword overrides beat the environment"""
        monkeypatch.setenv("FORUM_DB_MAX_RETRIES", "7")

        assert get_database_config(max_retries=1).max_retries == 1

    def test_invalid_values(self):
        """Test invalid values are rejected"""
        with pytest.raises(SettingsValidationError):
            DatabaseConfig(max_retries=-1)
        with pytest.raises(SettingsValidationError):
            DatabaseConfig(initial_delay=2.0, max_delay=1.0)

    def test_frozen(self):
        """Test configuration is immutable"""
        config = get_database_config()

        with pytest.raises(SettingsValidationError):
            config.max_retries = 10

    def test_retry_options_from_config(self):
        """Test RetryOptions built from configuration"""
        options = RetryOptions.from_config(get_database_config(backoff_multiplier=3.0))

        assert options.backoff_multiplier == 3.0
        assert options.max_retries == 3
