"""
Tests for export settings resolution.
"""

import pytest
import tempfile
from pathlib import Path
from unittest.mock import patch

from utils.settings import load_settings, ExportSettings, SettingsError


ENV_VARS = (
    'RISK_FREE_RATE', 'PERIODS_PER_YEAR', 'MAX_TRANSACTIONS',
    'MAX_HISTORY_POINTS', 'EXPORT_OUTPUT_DIR', 'LOG_LEVEL', 'EXPORT_CONFIG_PATH'
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the caller's environment and any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch('utils.settings.load_dotenv'):
        yield monkeypatch


@pytest.fixture
def config_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def write_config(directory: Path, text: str) -> Path:
    path = directory / 'export_settings.yml'
    path.write_text(text, encoding='utf-8')
    return path


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_defaults_when_no_file(self, config_dir, clean_env):
        """Test built-in defaults when the default file is absent."""
        clean_env.setenv('EXPORT_CONFIG_PATH', str(config_dir / 'missing.yml'))

        settings = load_settings()

        assert settings == ExportSettings()
        assert settings.risk_free_rate == 0.05
        assert settings.periods_per_year == 365

    def test_yaml_values(self, config_dir):
        """Test values read from the export section."""
        path = write_config(config_dir, """
export:
  risk_free_rate: 0.04
  periods_per_year: 252
  output_dir: ./out
""")

        settings = load_settings(path)

        assert settings.risk_free_rate == 0.04
        assert settings.periods_per_year == 252
        assert settings.output_dir == Path('./out')
        assert settings.max_transactions == 100_000

    def test_env_overrides_yaml(self, config_dir, clean_env):
        """Test precedence: environment > YAML > default."""
        path = write_config(config_dir, "export:\n  risk_free_rate: 0.04\n  log_level: debug\n")
        clean_env.setenv('RISK_FREE_RATE', '0.03')

        settings = load_settings(path)

        assert settings.risk_free_rate == 0.03
        assert settings.log_level == 'DEBUG'

    def test_explicit_missing_file(self, config_dir):
        """Test that an explicitly requested file must exist."""
        with pytest.raises(SettingsError, match="Config file not found"):
            load_settings(config_dir / 'nope.yml')

    def test_unknown_key(self, config_dir):
        """Test that typos in the file are reported."""
        path = write_config(config_dir, "export:\n  risk_free: 0.04\n")

        with pytest.raises(SettingsError, match=r"Unknown settings .*\['risk_free'\]"):
            load_settings(path)

    def test_invalid_yaml(self, config_dir):
        """Test YAML syntax errors."""
        path = write_config(config_dir, "export: [unclosed\n")

        with pytest.raises(SettingsError, match="Invalid YAML"):
            load_settings(path)

    def test_unparseable_env_value(self, config_dir, clean_env):
        """Test that a non-numeric env value is rejected."""
        clean_env.setenv('EXPORT_CONFIG_PATH', str(config_dir / 'missing.yml'))
        clean_env.setenv('PERIODS_PER_YEAR', 'daily')

        with pytest.raises(SettingsError, match="Invalid configuration value"):
            load_settings()

    def test_out_of_range_value(self, config_dir, clean_env):
        """Test range validation."""
        clean_env.setenv('EXPORT_CONFIG_PATH', str(config_dir / 'missing.yml'))
        clean_env.setenv('PERIODS_PER_YEAR', '0')

        with pytest.raises(SettingsError, match="periods_per_year must be positive"):
            load_settings()

    def test_unknown_log_level(self):
        """Test log level validation."""
        with pytest.raises(SettingsError, match="Unknown log level"):
            ExportSettings(log_level='LOUD')

    def test_shipped_config_matches_defaults(self):
        """Test that config/export_settings.yml mirrors the built-in defaults."""
        shipped = Path(__file__).parent.parent.parent / 'config' / 'export_settings.yml'

        assert load_settings(shipped) == ExportSettings()
