"""
Configuration management for Bulletin.

This module handles loading and accessing configuration values from config.yaml.
API hosts, identity tokens, attachment hosting and board lookup behaviour all
live here so screens never hardcode a server address.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List
import logging


class ConfigManager:
    """
    Manages configuration loading and access for Bulletin.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "api": {
                "base_url": "http://localhost:8181",
                "timeout": 30.0
            },
            "auth": {
                "user_token": None,
                "admin_token": None
            },
            "attachments": {
                "base_url": "http://localhost:8181",
                "legacy_prefix": "posts",
                "image_prefix": "/images",
                "default_image": "/static/gym_default.png"
            },
            "facilities": {
                "endpoint": "/api/facilities",
                "page_size": 5
            },
            "boards": {
                "cache_ttl": 0.0,
                "page_size": 5,
                "home_sections": {
                    "01": "Notices",
                    "02": "Contents"
                }
            },
            "editor": {
                "upload_endpoint": "/api/files/upload/editor",
                "upload_field": "image",
                "accepted_types": [
                    "image/gif",
                    "image/jpeg",
                    "image/jpg",
                    "image/png",
                    "image/svg"
                ]
            },
            "paths": {
                "log_file": "bulletin.log"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "api.base_url")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("api.base_url")  # Returns "http://localhost:8181"
            config.get("boards.home_sections.01")  # Returns the notice board title
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def api_base_url(self) -> str:
        """Get the content API base URL."""
        return self.get("api.base_url", "http://localhost:8181")

    @property
    def api_timeout(self) -> float:
        """Get the content API request timeout."""
        return self.get("api.timeout", 30.0)

    @property
    def user_token(self):
        """Get the bearer token of the end-user identity context."""
        return self.get("auth.user_token")

    @property
    def admin_token(self):
        """Get the bearer token of the administrative identity context."""
        return self.get("auth.admin_token")

    @property
    def attachment_base_url(self) -> str:
        """Get the attachment static-file host."""
        return self.get("attachments.base_url", self.api_base_url)

    @property
    def legacy_prefix(self) -> str:
        """Get the legacy path segment stripped from stored attachment paths."""
        return self.get("attachments.legacy_prefix", "posts")

    @property
    def image_prefix(self) -> str:
        """Get the path under which bare stored image names are served."""
        return self.get("attachments.image_prefix", "/images")

    @property
    def default_image(self) -> str:
        """Get the image shown when a record has no usable image path."""
        return self.get("attachments.default_image", "/static/gym_default.png")

    @property
    def facilities_endpoint(self) -> str:
        """Get the facility list endpoint."""
        return self.get("facilities.endpoint", "/api/facilities")

    @property
    def facility_page_size(self) -> int:
        """Get the number of facilities shown on the home page."""
        return self.get("facilities.page_size", 5)

    @property
    def board_cache_ttl(self) -> float:
        """Get how long a fetched board list may be reused, in seconds (0 disables reuse)."""
        return float(self.get("boards.cache_ttl", 0.0) or 0.0)

    @property
    def board_page_size(self) -> int:
        """Get the number of posts listed per board on the home page."""
        return self.get("boards.page_size", 5)

    @property
    def home_sections(self) -> Dict[str, str]:
        """Get board code to default section title mapping for the home page."""
        sections = self.get("boards.home_sections", {
            "01": "Notices",
            "02": "Contents"
        })
        # YAML reads unquoted 01 as an integer
        return {str(code).zfill(2): title for code, title in sections.items()}

    @property
    def upload_endpoint(self) -> str:
        """Get the editor image upload endpoint."""
        return self.get("editor.upload_endpoint", "/api/files/upload/editor")

    @property
    def upload_field(self) -> str:
        """Get the multipart field name used for editor uploads."""
        return self.get("editor.upload_field", "image")

    @property
    def accepted_types(self) -> List[str]:
        """Get the content types the editor accepts for image uploads."""
        return self.get("editor.accepted_types", [
            "image/gif",
            "image/jpeg",
            "image/jpg",
            "image/png",
            "image/svg"
        ])

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "bulletin.log")


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
