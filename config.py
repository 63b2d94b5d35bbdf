"""
Configuration management for the Carbon Footprint Calculator
"""
import copy
import json
from datetime import date
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging


class CarbonConfig:
    """Configuration management for the Carbon Footprint Calculator"""

    # Default configuration
    DEFAULT_CONFIG = {
        'paths': {
            'data_dir': 'data',
            'factors_dir': 'data/emission_factors',
            'cups_file': 'data/cups_center/cups.csv',
            'year_file': 'data/year/current_year.txt',
            'output_dir': 'output_reports',
            'log_dir': 'logs'
        },
        'export': {
            'no_center_label': 'SIN_CENTRO',
            'emission_divisor': 1000,
            'write_diagnostics': True,
            'skip_rows_outside_year': True,
            'date_format': 'dd/mm/yyyy',
            'percentage_format': '0.00',
            'emission_format': '0.000000',
            'summary_format': '#,##0.00'
        },
        'formatting': {
            'header_fill': 'D9D9D9',
            'auto_fit_columns': True,
            'max_column_width': 45,
            'min_column_width': 8
        },
        'validation': {
            'max_file_size_mb': 100,
            'allowed_extensions': ['.xlsx', '.xls', '.csv'],
            'min_year': 1900,
            'max_year': 2100
        },
        'logging': {
            'level': 'INFO',
            'file_logging': False
        },
        'localization': {
            'language': 'es',
            'overrides': {}
        }
    }

    def __init__(self, config_file: str = None):
        self.config_file = config_file or 'carbon_config.json'
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file or create default"""
        config_path = Path(self.config_file)

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = json.load(f)
                # Merge with defaults to ensure all keys exist
                return self._merge_configs(self.DEFAULT_CONFIG, config)
            except (json.JSONDecodeError, IOError) as e:
                logging.warning(f"Failed to load config from {config_path}: {e}. Using defaults.")
                return copy.deepcopy(self.DEFAULT_CONFIG)
        else:
            # Create default config file
            self.save_config(self.DEFAULT_CONFIG)
            return copy.deepcopy(self.DEFAULT_CONFIG)

    def save_config(self, config: Dict[str, Any] = None) -> None:
        """Save configuration to file"""
        config = config or self.config
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logging.error(f"Failed to save config to {self.config_file}: {e}")

    def get(self, key_path: str, default=None):
        """Get configuration value using dot notation (e.g., 'export.no_center_label')"""
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation"""
        keys = key_path.split('.')
        config = self.config

        # Navigate to the parent of the target key
        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

    def _merge_configs(self, default: Dict, custom: Dict) -> Dict:
        """Recursively merge custom config with defaults"""
        result = copy.deepcopy(default)

        for key, value in custom.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        required_sections = ['paths', 'export', 'formatting', 'validation']
        for section in required_sections:
            if section not in self.config:
                issues.append(f"Missing required section: {section}")

        numeric_checks = [
            ('export.emission_divisor', 1, 1000000),
            ('validation.max_file_size_mb', 1, 1000),
            ('validation.min_year', 1, 9999),
            ('validation.max_year', 1, 9999),
            ('formatting.max_column_width', 5, 255)
        ]

        for key_path, min_val, max_val in numeric_checks:
            value = self.get(key_path)
            if value is not None and not (min_val <= value <= max_val):
                issues.append(f"{key_path} must be between {min_val} and {max_val}, got {value}")

        if self.get('validation.min_year', 0) > self.get('validation.max_year', 9999):
            issues.append("validation.min_year must not be greater than validation.max_year")

        if not str(self.get('export.no_center_label', '')).strip():
            issues.append("export.no_center_label must not be empty")

        return issues

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults"""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save_config()


class YearSettings:
    """
    Persisted "current year" shared by every module

    The year is stored as a single integer in a small text file. Instances are
    created once by the front end and handed to the exporters and stores that
    need the reporting year.
    """

    def __init__(self, year_file: Optional[str] = None, config: CarbonConfig = None):
        self.config = config or carbon_config
        self.year_file = Path(year_file or self.config.get('paths.year_file', 'data/year/current_year.txt'))
        self._year: Optional[int] = None

    def is_valid_year(self, year) -> bool:
        try:
            year = int(year)
        except (TypeError, ValueError):
            return False
        return self.config.get('validation.min_year', 1900) <= year <= self.config.get('validation.max_year', 2100)

    def load_current_year(self) -> int:
        """Read the persisted year, defaulting to the current calendar year"""
        if self._year is not None:
            return self._year

        year = date.today().year
        try:
            if self.year_file.exists():
                text = self.year_file.read_text(encoding='utf-8').strip()
                if self.is_valid_year(text):
                    year = int(text)
                else:
                    logging.warning(f"Ignoring invalid year '{text}' in {self.year_file}")
        except (IOError, OSError) as e:
            logging.warning(f"Failed to read year from {self.year_file}: {e}")

        self._year = year
        return year

    def save_current_year(self, year: int) -> None:
        """Persist the year; raises ValueError for years outside the configured range"""
        if not self.is_valid_year(year):
            raise ValueError(f"Invalid year: {year}")
        year = int(year)
        self.year_file.parent.mkdir(parents=True, exist_ok=True)
        self.year_file.write_text(str(year), encoding='utf-8')
        self._year = year

    @property
    def current_year(self) -> int:
        return self.load_current_year()


# Global configuration instance
carbon_config = CarbonConfig()
