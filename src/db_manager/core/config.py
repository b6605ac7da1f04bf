"""
Application configuration management.

Handles persistent storage of the database catalog offered in the
add-container form and of general application preferences.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from .models import DEFAULT_TAG, ContainerSpec

logger = logging.getLogger(__name__)


@dataclass
class DatabaseConfig:
    """A database image the user can provision."""
    name: str
    image: str
    icon_url: str = ""
    tags: list[str] = field(default_factory=list)
    # Form label -> environment variable name
    variables: dict[str, str] = field(default_factory=dict)
    # Volume name -> mount path inside the container
    volumes: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.name

    @property
    def default_tag(self) -> str:
        return self.tags[0] if self.tags else DEFAULT_TAG

    def build_spec(
        self,
        name: str,
        tag: Optional[str] = None,
        values: Optional[dict[str, str]] = None,
        persist: bool = True,
    ) -> ContainerSpec:
        """
        Turn the add-container form into a ContainerSpec.

        Args:
            name: Container name typed by the user
            tag: Selected tag; the first catalog tag if not given
            values: Environment variable name -> value entered by the user
            persist: Whether to create the catalog's volumes

        Raises:
            ValueError: If the name is empty
        """
        values = values or {}
        return ContainerSpec(
            name=name,
            image=self.image,
            tag=tag or self.default_tag,
            variables={key: values.get(key, "") for key in self.variables.values()},
            volumes=dict(self.volumes) if persist else {},
        )


def default_databases() -> list[DatabaseConfig]:
    """Catalog used until the user edits the configuration file."""
    return [
        DatabaseConfig(
            name="PostgreSQL",
            image="postgres",
            icon_url="https://www.postgresql.org/media/img/about/press/elephant.png",
            tags=["latest", "16", "15", "14"],
            variables={
                "Password": "POSTGRES_PASSWORD",
                "User": "POSTGRES_USER",
                "Database": "POSTGRES_DB",
            },
            volumes={"data": "/var/lib/postgresql/data"},
        ),
        DatabaseConfig(
            name="MySQL",
            image="mysql",
            icon_url="https://www.mysql.com/common/logos/logo-mysql-170x115.png",
            tags=["latest", "8.4", "8.0"],
            variables={
                "Root password": "MYSQL_ROOT_PASSWORD",
                "Database": "MYSQL_DATABASE",
                "User": "MYSQL_USER",
                "Password": "MYSQL_PASSWORD",
            },
            volumes={"data": "/var/lib/mysql"},
        ),
        DatabaseConfig(
            name="MariaDB",
            image="mariadb",
            icon_url="https://mariadb.com/wp-content/uploads/2019/11/mariadb-logo_blue-transparent.png",
            tags=["latest", "11", "10"],
            variables={
                "Root password": "MARIADB_ROOT_PASSWORD",
                "Database": "MARIADB_DATABASE",
            },
            volumes={"data": "/var/lib/mysql"},
        ),
        DatabaseConfig(
            name="MongoDB",
            image="mongo",
            icon_url="https://www.mongodb.com/assets/images/global/favicon.ico",
            tags=["latest", "7", "6"],
            variables={
                "Root user": "MONGO_INITDB_ROOT_USERNAME",
                "Root password": "MONGO_INITDB_ROOT_PASSWORD",
            },
            volumes={"data": "/data/db"},
        ),
        DatabaseConfig(
            name="Redis",
            image="redis",
            icon_url="https://redis.io/favicon.ico",
            tags=["latest", "7"],
            volumes={"data": "/data"},
        ),
    ]


@dataclass
class AppConfig:
    """Main application configuration."""
    databases: list[DatabaseConfig] = field(default_factory=default_databases)

    # How often the container list refreshes on its own
    refresh_interval_ms: int = 5000

    def __post_init__(self):
        """Ensure catalog entries are DatabaseConfig objects."""
        self.databases = [
            DatabaseConfig(**d) if isinstance(d, dict) else d
            for d in self.databases
        ]


class ConfigManager:
    """Manages loading and saving application configuration."""

    DEFAULT_CONFIG_PATH = Path.home() / ".db-manager" / "app_config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get current configuration, loading from disk if needed."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from disk, or create default if not exists."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                return AppConfig(**data)
            except (OSError, json.JSONDecodeError, TypeError) as e:
                logger.warning("Could not load config, using defaults: %s", e)
                return AppConfig()
        return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> None:
        """Save configuration to disk."""
        if config is not None:
            self._config = config

        if self._config is None:
            return

        # Ensure parent directory exists
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(asdict(self._config), f, indent=2)

    def ensure_config_file(self) -> None:
        """Write the default configuration if no file exists yet."""
        if not self.config_path.exists():
            self.save(self.config)

    def find_database(self, image: str) -> Optional[DatabaseConfig]:
        """Catalog entry for an image repository, if any."""
        for database in self.config.databases:
            if database.image == image:
                return database
        return None
