"""
Environment variable management with .env file support.

All sharelift settings are read from ``SHARELIFT_*`` variables. A ``.env``
file in the project root is loaded first so local development does not need
exported variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "SHARELIFT_"


class EnvManager:
    """
    Manages environment variables for sharelift deployments.

    Example:
        >>> env = EnvManager()
        >>> env.load()  # Loads .env if exists
        >>> source_url = env.get("SOURCE_URL")
    """

    def __init__(
        self,
        project_root: Path | str | None = None,
        auto_load: bool = True,
        prefix: str = ENV_PREFIX,
    ):
        """
        Initialize the environment manager.

        Args:
            project_root: Root directory of the project (searches for .env here)
            auto_load: Automatically load .env file if found
            prefix: Prefix prepended to every key looked up through this manager
        """
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.prefix = prefix
        self._loaded = False

        if auto_load:
            self.load()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, env_file: str | Path | None = None, override: bool = False) -> bool:
        """
        Load environment variables from .env file.

        Args:
            env_file: Path to .env file (defaults to .env in project root)
            override: Whether to override existing environment variables

        Returns:
            True if .env file was loaded, False otherwise
        """
        if env_file is None:
            env_file = self.project_root / ".env"
        else:
            env_file = Path(env_file)

        if not env_file.exists():
            return False

        load_dotenv(env_file, override=override)
        self._loaded = True
        return True

    def key(self, name: str) -> str:
        """Full environment variable name for a short setting name."""
        return f"{self.prefix}{name}"

    def get(
        self,
        name: str,
        default: str | None = None,
        required: bool = False,
    ) -> str | None:
        """
        Get an environment variable value.

        Args:
            name: Setting name without the prefix
            default: Default value if not found
            required: If True, raises ValueError if not found and no default

        Returns:
            Environment variable value or default

        Raises:
            ValueError: If required=True and variable not found
        """
        value = os.environ.get(self.key(name))
        if value is None or value.strip() == "":
            value = default

        if required and value is None:
            msg = f"Required environment variable not set: {self.key(name)}"
            raise ValueError(msg)

        return value

    def get_bool(self, name: str, default: bool = False) -> bool:
        """Get environment variable as boolean."""
        value = (self.get(name) or "").lower()
        if value in ("true", "1", "yes", "on"):
            return True
        if value in ("false", "0", "no", "off"):
            return False
        return default

    def get_float(self, name: str, default: float | None = None) -> float | None:
        """Get environment variable as float; malformed values raise ValueError."""
        value = self.get(name)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            msg = f"{self.key(name)} must be a number, got {value!r}"
            raise ValueError(msg) from None

    def get_list(self, name: str, default: list[str] | None = None) -> list[str] | None:
        """Get a comma separated environment variable as a list of stripped items."""
        value = self.get(name)
        if value is None:
            return default
        return [item.strip() for item in value.split(",") if item.strip()]
