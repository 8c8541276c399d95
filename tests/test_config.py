"""
Unit tests for configuration management.
"""

import os
import tempfile
import unittest
from pathlib import Path

from bulletin.config import ConfigManager


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        if self.config_path.exists():
            self.config_path.unlink()
        os.rmdir(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.api_base_url, "http://localhost:8181")
        self.assertEqual(config.attachment_base_url, "http://localhost:8181")
        self.assertEqual(config.legacy_prefix, "posts")
        self.assertEqual(config.board_cache_ttl, 0.0)
        self.assertEqual(config.board_page_size, 5)
        self.assertEqual(list(config.home_sections), ["01", "02"])
        self.assertEqual(config.upload_field, "image")
        self.assertIn("image/png", config.accepted_types)
        self.assertIsNone(config.user_token)

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file."""
        test_config = """
api:
  base_url: "http://cms.test:9000"
  timeout: 5

auth:
  admin_token: "secret"

boards:
  cache_ttl: 2.5
  home_sections:
    01: "News"
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.api_base_url, "http://cms.test:9000")
        self.assertEqual(config.api_timeout, 5)
        self.assertEqual(config.admin_token, "secret")
        self.assertEqual(config.board_cache_ttl, 2.5)
        # Unquoted YAML keys come back as board codes
        self.assertEqual(config.home_sections, {"01": "News"})
        # Attachments default to the API host when not configured
        self.assertEqual(config.attachment_base_url, "http://cms.test:9000")

    def test_invalid_yaml_falls_back_to_defaults(self):
        """Test a broken file does not stop the application."""
        with open(self.config_path, 'w') as f:
            f.write("api: [unclosed")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.api_base_url, "http://localhost:8181")

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.get("editor.upload_endpoint"), "/api/files/upload/editor")
        self.assertEqual(config.get("boards.home_sections.01"), "Notices")
        self.assertIsNone(config.get("nonexistent.key"))
        self.assertEqual(config.get("nonexistent.key", "default"), "default")

    def test_config_reload(self):
        """Test reloading configuration."""
        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.legacy_prefix, "posts")

        with open(self.config_path, 'w') as f:
            f.write("attachments:\n  legacy_prefix: \"uploads\"\n")

        config.reload()
        self.assertEqual(config.legacy_prefix, "uploads")


if __name__ == "__main__":
    unittest.main()
