"""Configuration loader with multi-source support."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Generic, Mapping, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

# Separates nesting levels in environment overrides:
# EUTERPE_LIBRARY_LIBRARY__SCAN__FILES_PER_OPERATION=500
ENV_NESTING_SEPARATOR = "__"


class ConfigLoader(Generic[T]):
    """Loads configuration from several sources, later ones winning.

    Order: shipped defaults, system config, user config, environment.
    """

    def __init__(
        self,
        app_name: str,
        config_class: Type[T],
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.app_name = app_name
        self.config_class = config_class
        self.environ = os.environ if environ is None else environ
        self._config: Optional[T] = None

    @property
    def env_prefix(self) -> str:
        return f"{self.app_name.upper().replace('-', '_')}_"

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Load configuration from all sources.

        Args:
            defaults_path: Optional path to a defaults TOML file

        Returns:
            Validated configuration object

        Raises:
            pydantic.ValidationError: If the merged configuration is invalid
            toml.TomlDecodeError: If a configuration file is malformed
        """
        config_dict = self._load_defaults(defaults_path)

        for extra in (self._load_system_config(), self._load_user_config()):
            if extra:
                config_dict = self._deep_merge(config_dict, extra)

        config_dict = self._apply_env_overrides(config_dict)

        self._config = self.config_class(**config_dict)
        return self._config

    def _load_defaults(self, defaults_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load default configuration shipped with the app."""
        if defaults_path is not None:
            if not defaults_path.exists():
                raise FileNotFoundError(f"Config file not found: {defaults_path}")
            logger.debug(f"Loading config from {defaults_path}")
            return toml.load(defaults_path)

        candidate = Path.cwd() / "config" / "defaults.toml"
        if candidate.exists():
            logger.debug(f"Loading default config from {candidate}")
            return toml.load(candidate)

        return {}

    def _load_system_config(self) -> Optional[Dict[str, Any]]:
        """Load system-wide configuration."""
        if os.name == "nt":
            system_path = (
                Path(self.environ.get("PROGRAMDATA", "C:\\ProgramData"))
                / self.app_name
                / "config.toml"
            )
        else:
            system_path = Path(f"/etc/{self.app_name}/config.toml")

        if system_path.exists():
            logger.debug(f"Loading system config from {system_path}")
            return toml.load(system_path)
        return None

    def _load_user_config(self) -> Optional[Dict[str, Any]]:
        """Load user-specific configuration."""
        user_config_path = self.user_config_path()
        logger.debug(f"Looking for user config: path={user_config_path}, exists={user_config_path.exists()}")

        if user_config_path.exists():
            return toml.load(user_config_path)
        return None

    def user_config_path(self) -> Path:
        user_config_dir = platformdirs.user_config_dir(appname=self.app_name, appauthor=False)
        return Path(user_config_dir) / "config.toml"

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with environment variables.

        ``<PREFIX>LIBRARY__FAST_SCAN=true`` sets ``config["library"]["fast_scan"]``.
        """
        prefix = self.env_prefix

        for env_key, env_value in self.environ.items():
            if not env_key.startswith(prefix):
                continue

            key_path = env_key[len(prefix):].lower().split(ENV_NESTING_SEPARATOR)
            if not all(key_path):
                logger.warning(f"Ignoring malformed config override: {env_key}")
                continue

            current = config
            for part in key_path[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            current[key_path[-1]] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert string environment variable to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        # os.pathsep keeps Windows drive letters intact in path lists
        if os.pathsep in value:
            return [v.strip() for v in value.split(os.pathsep) if v.strip()]

        return value

    def save_user_config(self, config: BaseModel) -> Path:
        """Write configuration to the user config file and return its path."""
        user_config_path = self.user_config_path()
        user_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(user_config_path, "w", encoding="utf-8") as f:
            toml.dump(config.model_dump(exclude_none=True), f)
        return user_config_path

    @property
    def config(self) -> T:
        """Get loaded configuration."""
        if self._config is None:
            self._config = self.load()
        return self._config
