"""
Configuration for the meta fetcher.
There are three levels of configuration in order of priority
1. cli options
2. yaml config file
3. environment variables
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from metafetcher import __version__

DEFAULT_META_URL_TEMPLATE = "https://v3-cinemeta.strem.io/meta/movie/{identifier}.json"


class Settings(BaseSettings):
    """
    Application configuration with support for:
    - Environment variables (``METAFETCHER_`` prefix)
    - YAML configuration file
    - CLI argument overrides

    Precedence: CLI args > YAML config > Environment variables > Defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="METAFETCHER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===== Directories =====
    data_dir: Path = Field(
        default=Path("."),
        description=(
            "Location of the data directory. It contains CSV files with IMDb IDs "
            "and a metas subdirectory used for writing metas as JSON files."
        ),
    )
    metas_dirname: str = Field(
        default="metas",
        description="Name of the metas cache directory inside data_dir",
    )
    metas_extension: str = Field(
        default=".json",
        description="File extension of cached meta documents",
    )
    create_metas_dir: bool = Field(
        default=False,
        description="Create the metas directory instead of failing when it is missing",
    )

    # ===== CSV input =====
    id_column: str = Field(
        default="IMDb ID",
        description="Header label of the CSV column holding identifiers",
    )
    deduplicate: bool = Field(
        default=False,
        description="Drop repeated identifiers before fetching",
    )

    # ===== Cinemeta configuration =====
    meta_url_template: str = Field(
        default=DEFAULT_META_URL_TEMPLATE,
        description="URL template for meta lookups; '{identifier}' is substituted",
    )
    request_timeout: float = Field(
        default=5.0,
        description="Timeout in seconds for each lookup request",
    )
    request_delay: float = Field(
        default=0.1,
        description="Pause in seconds between consecutive lookups",
    )
    cache_bust: bool = Field(
        default=False,
        description="Append a throwaway query parameter to bypass the server's cache",
    )
    user_agent: str = Field(
        default=f"stremio-metafetcher/{__version__}",
        description="User-Agent header sent with lookups",
    )

    # ===== Output =====
    metas_file_mode: int = Field(
        default=0o600,
        description="Permission bits for newly written meta files",
    )

    # ===== Logging / display =====
    log_level: str = Field(
        default="INFO",
        description="Minimum level for console log output",
    )
    log_to_console: bool = Field(
        default=True,
        description="Emit progress logs to the console",
    )
    log_to_file: bool = Field(
        default=False,
        description="Persist logs to a file (defaults to <data_dir>/logs/metafetcher.log)",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Optional override for log file path",
    )
    show_progress: bool = Field(
        default=False,
        description="Show a tqdm progress bar while fetching",
    )

    @property
    def metas_dir(self) -> Path:
        """Directory holding one ``<identifier><extension>`` file per cached meta."""
        return self.data_dir / self.metas_dirname

    def resolve_log_file(self) -> Optional[Path]:
        """Return the log file path for this run, or None when file logging is off."""
        if not self.log_to_file:
            return None
        if self.log_file is None:
            return self.data_dir / "logs" / "metafetcher.log"
        if not self.log_file.is_absolute():
            return self.data_dir / self.log_file
        return self.log_file

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> Settings:
        """
        Load settings from a YAML file.

        The YAML file values will override defaults but can still be
        overridden by CLI options.

        Parameters
        ----------
        yaml_path : Path
            Path to YAML configuration file

        Returns
        -------
        Settings
            Configured settings instance
        """
        if not yaml_path.exists():
            raise FileNotFoundError(f"Settings file not found: {yaml_path}")

        with yaml_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}

        if not isinstance(data, dict):
            raise ValueError("Settings YAML must contain a mapping at the root")

        return cls(**data)

    def merge_overrides(self, overrides: Dict[str, Any]) -> Settings:
        """
        Create a new Settings instance with specific values overridden.

        Parameters
        ----------
        overrides : dict
            Dictionary of values to override (typically from CLI args)

        Returns
        -------
        Settings
            New settings instance with overrides applied
        """
        overrides = overrides or {}
        if not overrides:
            return self

        return self.model_copy(update=overrides)


def load_settings(
    yaml_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env_file: Optional[Path] = None,
) -> Settings:
    """
    Load settings with proper precedence handling.

    Precedence order (highest to lowest):
    1. Overrides (typically from CLI args)
    2. YAML config file
    3. Environment variables
    4. Defaults

    Parameters
    ----------
    yaml_path : Path, optional
        Path to YAML configuration file
    overrides : dict, optional
        Dictionary of override values (typically from CLI)
    env_file : Path, optional
        Extra ``.env`` file exported into the environment before loading

    Returns
    -------
    Settings
        Configured settings instance
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)

    settings = Settings()

    if yaml_path is not None:
        yaml_settings = Settings.from_yaml(yaml_path)
        settings = settings.merge_overrides(
            yaml_settings.model_dump(exclude_unset=True)
        )

    if overrides:
        settings = settings.merge_overrides(overrides)

    return settings


__all__ = ["DEFAULT_META_URL_TEMPLATE", "Settings", "load_settings"]
