"""
Tests for configuration and runtime path resolution.
"""

import json

from condict.core.config import (
    AppConfig,
    ConfigManager,
    DEFAULT_CONFIG,
    get_config_manager,
    get_preset_backend,
    get_sound_change_settings,
)
from condict.runtime.bootstrap import bootstrap, is_bootstrapped
from condict.runtime.runtime_config import get_runtime_config


class TestConfigManager:
    """JSON-backed settings with dot-notation access."""

    def test_defaults(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path)
        assert manager.get("sound_change.template_syntax") == "python"
        assert manager.get("presets.backend") == "database"

    def test_missing_key_returns_default(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path)
        assert manager.get("sound_change.nope", 42) == 42

    def test_set_persists(self, tmp_path):
        ConfigManager(config_dir=tmp_path).set("sound_change.batch_workers", 4)

        reloaded = ConfigManager(config_dir=tmp_path)

        assert reloaded.get("sound_change.batch_workers") == 4

    def test_loaded_values_merge_with_defaults(self, tmp_path):
        (tmp_path / "config.json").write_text(
            json.dumps({"sound_change": {"template_syntax": "dollar"}}), encoding="utf-8"
        )

        manager = ConfigManager(config_dir=tmp_path)

        assert manager.get("sound_change.template_syntax") == "dollar"
        assert manager.get("sound_change.rule_timeout_seconds") == 1.0

    def test_invalid_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "config.json").write_text("{oops", encoding="utf-8")
        manager = ConfigManager(config_dir=tmp_path)
        assert not manager.load()
        assert manager.get("presets.backend") == "database"

    def test_reset_key(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path)
        manager.set("presets.backend", "json")
        manager.reset("presets.backend")
        assert manager.get("presets.backend") == "database"

    def test_profile_export_import(self, tmp_path):
        source = ConfigManager(config_dir=tmp_path / "a")
        source.set("sound_change.template_syntax", "dollar")
        profile = tmp_path / "profile.json"
        assert source.export_profile(profile)

        target = ConfigManager(config_dir=tmp_path / "b")
        assert target.import_profile(profile)
        assert target.get("sound_change.template_syntax") == "dollar"

    def test_get_all_is_a_copy(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path)
        manager.get_all()["presets"]["backend"] = "json"
        assert manager.get("presets.backend") == "database"

    def test_defaults_not_shared(self, tmp_path):
        ConfigManager(config_dir=tmp_path).set("presets.backend", "json", save=False)
        assert DEFAULT_CONFIG["presets"]["backend"] == "database"


class TestSoundChangeSettings:
    """Coercion of hand-edited sound change settings."""

    def test_defaults(self):
        assert get_sound_change_settings() == {
            "rule_timeout_seconds": 1.0,
            "template_syntax": "python",
            "batch_workers": 1,
        }

    def test_bad_values_fall_back(self):
        AppConfig.set("sound_change", {
            "rule_timeout_seconds": "soon",
            "template_syntax": "perl",
            "batch_workers": "many",
        })

        assert get_sound_change_settings() == {
            "rule_timeout_seconds": 1.0,
            "template_syntax": "python",
            "batch_workers": 1,
        }

    def test_values_are_coerced(self):
        AppConfig.set("sound_change", {
            "rule_timeout_seconds": "2.5",
            "template_syntax": " Dollar ",
            "batch_workers": 500,
        })

        settings = get_sound_change_settings()

        assert settings["rule_timeout_seconds"] == 2.5
        assert settings["template_syntax"] == "dollar"
        assert settings["batch_workers"] == 32

    def test_null_timeout_disables_budget(self):
        AppConfig.set("sound_change.rule_timeout_seconds", None)
        assert get_sound_change_settings()["rule_timeout_seconds"] is None

    def test_preset_backend(self):
        assert get_preset_backend() == "database"
        AppConfig.set("presets.backend", "yaml")
        assert get_preset_backend() == "database"
        AppConfig.set("presets.backend", "json")
        assert get_preset_backend() == "json"


class TestRuntime:
    """Runtime paths and bootstrap."""

    def test_home_env_var_sets_root(self, condict_home):
        paths = get_runtime_config().paths
        assert paths.app_root == condict_home
        assert paths.config_dir == condict_home / "config"
        assert paths.database_dir == condict_home / "data" / "database"

    def test_global_config_lives_in_config_dir(self, condict_home):
        assert get_config_manager().config_path == condict_home / "config" / "config.json"

    def test_bootstrap_creates_directories(self, condict_home):
        assert bootstrap()
        assert is_bootstrapped()
        assert (condict_home / "data" / "logs").is_dir()
        assert (condict_home / "data" / "database").is_dir()
        assert (condict_home / "config").is_dir()

    def test_bootstrap_writes_log_file(self, condict_home):
        bootstrap()
        assert (condict_home / "data" / "logs" / "condict.log").exists()
