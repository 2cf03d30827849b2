"""Tests for configuration loading."""

import logging
from pathlib import Path

from unity_yaml_editor.config import EditorConfig, get_config, set_config

from tests.conftest import write_file


class TestDefaults:
    def test_defaults(self):
        config = EditorConfig.from_env()
        assert config.project_root is None
        assert config.log_level == "WARNING"
        assert config.default_page_size == 200
        assert config.max_page_size == 1000
        assert config.persist_guid_cache is False
        assert config.output_format == "json"

    def test_global_instance_is_cached(self):
        assert get_config() is get_config()
        custom = EditorConfig(output_format="text")
        set_config(custom)
        assert get_config() is custom


class TestTomlConfig:
    """Settings read from unity-yaml.toml."""

    def test_default_file_in_cwd(self, tmp_path):
        write_file(
            tmp_path / "unity-yaml.toml",
            '[project]\nroot = "/projects/game"\n\n'
            '[logging]\nlevel = "debug"\nstructured = true\n\n'
            "[pagination]\ndefault_page_size = 25\nmax_page_size = 100\n\n"
            '[guid_cache]\npath = "cache.json"\npersist = true\n\n'
            '[output]\nformat = "text"\n',
        )
        config = EditorConfig.from_env()
        assert config.project_root == Path("/projects/game")
        assert config.log_level == "DEBUG"
        assert config.structured_logging is True
        assert config.default_page_size == 25
        assert config.max_page_size == 100
        assert config.guid_cache_path == Path("cache.json")
        assert config.persist_guid_cache is True
        assert config.output_format == "text"

    def test_explicit_file(self, tmp_path):
        path = write_file(tmp_path / "conf" / "editor.toml", "[output]\nformat = \"text\"\n")
        assert EditorConfig.from_env(str(path)).output_format == "text"

    def test_missing_file_keeps_defaults(self, tmp_path):
        config = EditorConfig.from_env(str(tmp_path / "absent.toml"))
        assert config.output_format == "json"

    def test_broken_toml_keeps_defaults(self, tmp_path):
        path = write_file(tmp_path / "bad.toml", "[output\nformat=")
        assert EditorConfig.from_env(str(path)).default_page_size == 200


class TestEnvironment:
    def test_env_overrides_toml(self, tmp_path, monkeypatch):
        write_file(tmp_path / "unity-yaml.toml", "[pagination]\ndefault_page_size = 25\n")
        monkeypatch.setenv("UNITY_YAML_PAGE_SIZE", "50")
        monkeypatch.setenv("UNITY_YAML_PROJECT_ROOT", str(tmp_path))
        monkeypatch.setenv("UNITY_YAML_PERSIST_GUID_CACHE", "yes")
        config = EditorConfig.from_env()
        assert config.default_page_size == 50
        assert config.project_root == tmp_path
        assert config.persist_guid_cache is True

    def test_config_file_variable(self, tmp_path, monkeypatch):
        path = write_file(tmp_path / "other.toml", "[logging]\nlevel = \"error\"\n")
        monkeypatch.setenv("UNITY_YAML_CONFIG_FILE", str(path))
        assert EditorConfig.from_env().log_level == "ERROR"

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("UNITY_YAML_PAGE_SIZE", "lots")
        monkeypatch.setenv("UNITY_YAML_MAX_PAGE_SIZE", "-4")
        monkeypatch.setenv("UNITY_YAML_OUTPUT_FORMAT", "xml")
        config = EditorConfig.from_env()
        assert config.default_page_size == 200
        assert config.max_page_size == 1000
        assert config.output_format == "json"

    def test_default_page_size_clamped_to_max(self, monkeypatch):
        monkeypatch.setenv("UNITY_YAML_PAGE_SIZE", "500")
        monkeypatch.setenv("UNITY_YAML_MAX_PAGE_SIZE", "100")
        config = EditorConfig.from_env()
        assert config.default_page_size == 100


class TestSetupLogging:
    def test_single_stderr_handler(self):
        config = EditorConfig(log_level="DEBUG")
        config.setup_logging()
        config.setup_logging()
        package_logger = logging.getLogger("unity_yaml_editor")
        handlers = [h for h in package_logger.handlers if getattr(h, "_unity_yaml_handler", False)]
        assert len(handlers) == 1
        assert package_logger.level == logging.DEBUG

    def test_unknown_level_defaults_to_warning(self):
        EditorConfig(log_level="CHATTY").setup_logging()
        assert logging.getLogger("unity_yaml_editor").level == logging.WARNING
