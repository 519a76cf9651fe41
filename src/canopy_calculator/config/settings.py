"""
Centralized settings and path configuration for the canopy calculator.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_PRICING_TABLE = PACKAGE_DIR / 'data' / 'pricing_table.csv'


def get_project_root(start: Optional[Path] = None) -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = (start or Path(__file__)).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Installed without a checkout: work from the current directory
    return Path.cwd()


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Static pricing table (one row per circumference bracket)
    pricing_table: Path

    # Output of the table integrity check
    check_report: Path

    # Raise instead of silently returning 0 for unpriceable requests
    strict_mode: bool = False

    # Simulated round trip before the estimate is shown
    submit_delay_seconds: float = 1.5

    # Form vocabularies (UI labels)
    obstacle_options: tuple = ('house', 'shed', 'fence', 'powerlines', 'garden')
    tree_type_options: tuple = ('leafy', 'pokey')
    service_type_options: tuple = ('tree trim', 'remove stump', 'both')

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        table_override = os.environ.get('CANOPY_PRICING_TABLE')
        pricing_table = Path(table_override) if table_override else DEFAULT_PRICING_TABLE

        report_override = os.environ.get('CANOPY_CHECK_REPORT')
        check_report = Path(report_override) if report_override else root / 'outputs' / 'pricing_table_report.json'

        delay = os.environ.get('CANOPY_SUBMIT_DELAY')
        try:
            submit_delay = float(delay) if delay else 1.5
        except ValueError:
            raise ValueError(f"CANOPY_SUBMIT_DELAY must be a number of seconds, got {delay!r}")

        return cls(
            project_root=root,
            pricing_table=pricing_table,
            check_report=check_report,
            strict_mode=_env_flag('CANOPY_STRICT'),
            submit_delay_seconds=max(0.0, submit_delay),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
