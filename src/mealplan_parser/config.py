"""Configuration management for mealplan_parser.

Parsing itself takes no configuration; the settings here govern recipe
import (page fetching, retries) and the command-line tool's logging.

Configuration priority (highest to lowest):
1. Values passed directly (``ImportConfig(...)`` or ``update()``)
2. Environment variables (MEALPLAN_PARSER_*)
3. Project config file (.mealplan-parser.toml or an explicit path)
4. User config file (~/.config/mealplan-parser/config.toml)
5. Default values

Example:
    >>> config = ImportConfig.load()
    >>> config.update(fetch_timeout=30.0)
    >>> config.save("~/.config/mealplan-parser/config.toml")
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w

from .exceptions import ConfigurationError

ENV_PREFIX = "MEALPLAN_PARSER_"
CONFIG_SECTION = "mealplan-parser"
USER_CONFIG_DIR = Path(".config") / "mealplan-parser"
PROJECT_CONFIG_NAME = ".mealplan-parser.toml"

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; MealPlannerBot/1.0; +https://example.com/bot)"

_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


@dataclass
class ImportConfig:
    """Configuration for recipe import.

    Attributes:
        Fetch Settings:
            fetch_timeout: Seconds allowed for the whole page request
            user_agent: User-Agent header sent with every request
            accept_language: Accept-Language header sent with every request
            max_redirects: Redirect hops followed before giving up

        Retry Settings:
            retry_attempts: Total attempts for a retryable fetch failure
            initial_retry_delay: Delay before the first retry (exponential backoff)
            max_retry_delay: Upper bound for the delay between attempts

        Logging Settings:
            log_file: File the command-line tool writes its log to
            debug_mode: Log at DEBUG level

    Example:
        >>> config = ImportConfig(fetch_timeout=5.0, max_redirects=2)
        >>> config.retry_attempts
        3
    """

    # Fetch settings
    fetch_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"
    max_redirects: int = 5

    # Retry settings
    retry_attempts: int = 3
    initial_retry_delay: float = 1.0
    max_retry_delay: float = 30.0

    # Logging settings
    log_file: Path = field(default_factory=lambda: Path("mealplan_parser.log"))
    debug_mode: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid
        """
        if self.fetch_timeout <= 0:
            raise ConfigurationError(
                "fetch_timeout must be positive",
                fetch_timeout=self.fetch_timeout,
            )

        if not self.user_agent.strip():
            raise ConfigurationError("user_agent must not be empty")

        if self.max_redirects < 0:
            raise ConfigurationError(
                "max_redirects must be non-negative",
                max_redirects=self.max_redirects,
            )

        if self.retry_attempts < 1:
            raise ConfigurationError(
                "retry_attempts must be at least 1",
                retry_attempts=self.retry_attempts,
            )

        if self.initial_retry_delay <= 0:
            raise ConfigurationError(
                "initial_retry_delay must be positive",
                initial_retry_delay=self.initial_retry_delay,
            )

        if self.max_retry_delay < self.initial_retry_delay:
            raise ConfigurationError(
                "max_retry_delay must not be smaller than initial_retry_delay",
                max_retry_delay=self.max_retry_delay,
                initial_retry_delay=self.initial_retry_delay,
            )

        # May receive str from config files or the environment
        if not isinstance(self.log_file, Path):  # type: ignore[reportUnnecessaryIsInstance]
            self.log_file = Path(self.log_file)

    @classmethod
    def load(
        cls,
        config_path: str | Path | None = None,
        load_user_config: bool = True,
        load_env: bool = True,
    ) -> "ImportConfig":
        """Load configuration from file(s) and environment variables.

        Configuration is loaded in this order (later overrides earlier):
        1. Default values
        2. User config file (~/.config/mealplan-parser/config.toml)
        3. Project config file (.mealplan-parser.toml or specified path)
        4. Environment variables (MEALPLAN_PARSER_*)

        Args:
            config_path: Path to project config file (optional)
            load_user_config: Whether to load user config file
            load_env: Whether to load environment variables

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If a file is unreadable, an explicit path does
                not exist, or a value is invalid
        """
        config_dict: dict[str, Any] = {}

        user_config_path = Path.home() / USER_CONFIG_DIR / "config.toml"
        if load_user_config and user_config_path.exists():
            config_dict.update(cls._load_toml(user_config_path))

        if config_path:
            project_path = Path(config_path).expanduser()
            if not project_path.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {project_path}",
                    path=str(project_path),
                )
            config_dict.update(cls._load_toml(project_path))
        else:
            default_path = Path(PROJECT_CONFIG_NAME)
            if default_path.exists():
                config_dict.update(cls._load_toml(default_path))

        if load_env:
            config_dict.update(cls._load_env())

        unknown = sorted(set(config_dict) - set(cls.__dataclass_fields__))
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration key: {unknown[0]}",
                keys=", ".join(unknown),
            )

        return cls(**config_dict)

    @staticmethod
    def _load_toml(path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file.

        A ``[mealplan-parser]`` table is used when present, otherwise the
        top-level keys.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {path}",
                path=str(path),
                error=str(e),
            ) from e

        section = data.get(CONFIG_SECTION, data)
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"[{CONFIG_SECTION}] must be a table",
                path=str(path),
            )
        return section

    @classmethod
    def _load_env(cls) -> dict[str, Any]:
        """Load configuration from environment variables.

        Variables use the MEALPLAN_PARSER_ prefix and the uppercase field
        name, e.g. ``MEALPLAN_PARSER_FETCH_TIMEOUT=30`` or
        ``MEALPLAN_PARSER_DEBUG_MODE=true``. Values are converted to the type
        of the field they set; variables that name no field are ignored.

        Raises:
            ConfigurationError: If a value cannot be converted
        """
        config: dict[str, Any] = {}
        field_types = {f.name: type(getattr(cls(), f.name)) for f in fields(cls)}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            config_key = key[len(ENV_PREFIX) :].lower()
            field_type = field_types.get(config_key)
            if field_type is None:
                continue

            try:
                config[config_key] = _convert_env_value(value, field_type)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {key}",
                    value=value,
                    error=str(e),
                ) from e

        return config

    def save(self, path: str | Path) -> None:
        """Save configuration to a TOML file.

        Raises:
            ConfigurationError: If save fails
        """
        path = Path(path).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                tomli_w.dump({CONFIG_SECTION: self.to_dict()}, f)
        except (OSError, TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to save configuration to {path}",
                path=str(path),
                error=str(e),
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary of TOML-compatible values.

        Example:
            >>> ImportConfig().to_dict()["max_redirects"]
            5
        """
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {key: str(v) if isinstance(v, Path) else v for key, v in values.items()}

    def update(self, **kwargs: Any) -> None:
        """Update configuration values.

        Unknown keys are rejected before anything is changed; the updated
        configuration is validated as a whole.

        Raises:
            ConfigurationError: If a key is unknown or an updated value is invalid

        Example:
            >>> config = ImportConfig()
            >>> config.update(fetch_timeout=30.0, max_redirects=2)
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration key: {unknown[0]}",
                key=unknown[0],
                valid_keys=", ".join(sorted(known)),
            )

        for key, value in kwargs.items():
            setattr(self, key, value)
        self._validate()


def _convert_env_value(value: str, field_type: type) -> Any:
    if field_type is bool:
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected one of {_TRUE_VALUES + _FALSE_VALUES}")
    if field_type is int:
        return int(value)
    if field_type is float:
        return float(value)
    return value
