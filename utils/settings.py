"""
Export settings - environment overrides on top of an optional YAML file.
Resolved once per invocation and passed explicitly; no module-level state.
"""

import os
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from dotenv import load_dotenv


class SettingsError(ValueError):
    """Raised when a configuration value is invalid."""
    pass


DEFAULT_CONFIG_PATH = './config/export_settings.yml'

# field name -> (env var, default)
_SETTING_SOURCES = {
    'risk_free_rate': ('RISK_FREE_RATE', 0.05),
    'periods_per_year': ('PERIODS_PER_YEAR', 365),
    'max_transactions': ('MAX_TRANSACTIONS', 100_000),
    'max_history_points': ('MAX_HISTORY_POINTS', 100_000),
    'output_dir': ('EXPORT_OUTPUT_DIR', './exports'),
    'log_level': ('LOG_LEVEL', 'INFO'),
}


@dataclass(frozen=True)
class ExportSettings:
    """Configuration for risk calculation and export."""
    risk_free_rate: float = 0.05
    periods_per_year: int = 365
    max_transactions: int = 100_000
    max_history_points: int = 100_000
    output_dir: Path = Path('./exports')
    log_level: str = 'INFO'

    def __post_init__(self):
        """Validate ranges."""
        if not math.isfinite(self.risk_free_rate):
            raise SettingsError(f"risk_free_rate must be finite, got {self.risk_free_rate}")

        if self.periods_per_year <= 0:
            raise SettingsError(f"periods_per_year must be positive, got {self.periods_per_year}")

        if self.max_transactions <= 0:
            raise SettingsError(f"max_transactions must be positive, got {self.max_transactions}")

        if self.max_history_points <= 0:
            raise SettingsError(f"max_history_points must be positive, got {self.max_history_points}")

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise SettingsError(f"Unknown log level: {self.log_level}")


def load_settings(config_path: Optional[Path] = None) -> ExportSettings:
    """
    Build settings from defaults, YAML file and environment.

    Precedence: environment variable > YAML file > built-in default.

    Args:
        config_path: YAML file to read (defaults to EXPORT_CONFIG_PATH or
            ./config/export_settings.yml; a missing default file is ignored)

    Returns:
        Validated ExportSettings

    Raises:
        SettingsError: If a value cannot be parsed or is out of range
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path(os.getenv('EXPORT_CONFIG_PATH', DEFAULT_CONFIG_PATH))

    file_values = _load_yaml_config(Path(config_path), required=explicit)

    raw = {}
    for field_name, (env_var, default) in _SETTING_SOURCES.items():
        value = os.getenv(env_var)
        if value is None:
            value = file_values.get(field_name, default)
        raw[field_name] = value

    try:
        return ExportSettings(
            risk_free_rate=float(raw['risk_free_rate']),
            periods_per_year=int(raw['periods_per_year']),
            max_transactions=int(raw['max_transactions']),
            max_history_points=int(raw['max_history_points']),
            output_dir=Path(raw['output_dir']),
            log_level=str(raw['log_level']).upper(),
        )
    except SettingsError:
        raise
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Invalid configuration value: {e}") from e


def _load_yaml_config(config_path: Path, required: bool) -> Dict[str, Any]:
    """Read the export section of a YAML settings file."""
    if not config_path.exists():
        if required:
            raise SettingsError(f"Config file not found: {config_path}")
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise SettingsError(f"Config root must be a mapping: {config_path}")

    section = config.get('export', config)
    if not isinstance(section, dict):
        raise SettingsError(f"'export' section must be a mapping: {config_path}")

    unknown = set(section) - set(_SETTING_SOURCES)
    if unknown:
        raise SettingsError(f"Unknown settings in {config_path}: {sorted(unknown)}")

    return section
