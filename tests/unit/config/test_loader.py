"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from serviceregistry.config.loader import (
    connection_type_key,
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
    load_toml,
    normalize_metadatafields,
)
from serviceregistry.config.proxy import ConfigurationError


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_nested_dicts(self) -> None:
        """Nested dictionaries are merged recursively."""
        base = {"metadatafields": {"saml20_sp": {"a": 1}}, "debug": False}
        override = {"metadatafields": {"saml20_sp": {"b": 2}}}
        result = deep_merge(base, override)
        assert result == {
            "metadatafields": {"saml20_sp": {"a": 1, "b": 2}},
            "debug": False,
        }

    def test_override_replaces_non_dict(self) -> None:
        """Non-dict values in override replace base values."""
        result = deep_merge({"a": {"x": 1}}, {"a": "replaced"})
        assert result == {"a": "replaced"}

    def test_base_unmodified(self) -> None:
        """Original base dictionary is not modified."""
        base = {"a": 1}
        deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestLoadToml:
    """Tests for load_toml function."""

    def test_load_quoted_metadata_keys(self, tmp_path: Path) -> None:
        """Quoted keys with colons and wildcards survive loading."""
        toml_file = tmp_path / "test.toml"
        toml_file.write_text(
            '[metadatafields.saml20_sp]\n"contacts:#:emailAddress" = { type = "text" }\n'
        )

        result = load_toml(toml_file)
        assert result == {
            "metadatafields": {"saml20_sp": {"contacts:#:emailAddress": {"type": "text"}}}
        }

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        """Missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_toml(tmp_path / "nonexistent.toml")

    def test_load_invalid_toml_raises(self, tmp_path: Path) -> None:
        """Invalid TOML syntax raises error."""
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("invalid = [unclosed")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(invalid_file)


class TestGetEnvironment:
    """Tests for get_environment function."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Returns SERVICEREGISTRY_ENV value when set."""
        monkeypatch.setenv("SERVICEREGISTRY_ENV", "production")
        assert get_environment() == "production"

    def test_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults to 'development' when SERVICEREGISTRY_ENV not set."""
        monkeypatch.delenv("SERVICEREGISTRY_ENV", raising=False)
        assert get_environment() == "development"


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_uses_env_var_when_set(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Uses SERVICEREGISTRY_CONFIG_DIR when set."""
        config_dir = tmp_path / "custom_config"
        config_dir.mkdir()
        monkeypatch.setenv("SERVICEREGISTRY_CONFIG_DIR", str(config_dir))

        assert get_config_dir() == config_dir

    def test_raises_for_missing_env_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Raises error when SERVICEREGISTRY_CONFIG_DIR doesn't exist."""
        monkeypatch.setenv("SERVICEREGISTRY_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_finds_config_dir_above_working_directory(
        self, test_config_dir: Path, mock_toml_files, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without the env var, the nearest config/default.toml upwards is used."""
        mock_toml_files({"default.toml": "debug = false"})
        nested = test_config_dir.parent / "serviceregistry" / "connection"
        nested.mkdir(parents=True)
        monkeypatch.delenv("SERVICEREGISTRY_CONFIG_DIR", raising=False)
        monkeypatch.chdir(nested)

        assert get_config_dir().resolve() == test_config_dir.resolve()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_merges_environment_config(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Environment config overrides default config."""
        mock_toml_files({
            "default.toml": "app_name = 'test'\ndebug = false",
            "development.toml": "debug = true",
        })
        monkeypatch.setenv("SERVICEREGISTRY_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("SERVICEREGISTRY_ENV", "development")

        assert load_config() == {"app_name": "test", "debug": True}

    def test_missing_environment_file_is_optional(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Only default.toml is required."""
        mock_toml_files({"default.toml": "app_name = 'test'"})
        monkeypatch.setenv("SERVICEREGISTRY_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("SERVICEREGISTRY_ENV", "nonexistent")

        assert load_config() == {"app_name": "test"}

    def test_missing_default_raises(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Missing default.toml raises error."""
        monkeypatch.setenv("SERVICEREGISTRY_CONFIG_DIR", str(test_config_dir))

        with pytest.raises(FileNotFoundError, match="default.toml"):
            load_config()

    def test_explicit_directory_and_environment(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Arguments take precedence over the environment variables."""
        mock_toml_files({
            "default.toml": "debug = false",
            "production.toml": "debug = true",
        })
        monkeypatch.setenv("SERVICEREGISTRY_CONFIG_DIR", "/nonexistent")
        monkeypatch.setenv("SERVICEREGISTRY_ENV", "development")

        assert load_config(test_config_dir, "production") == {"debug": True}

    def test_hyphenated_override_merges_into_default_section(
        self, test_config_dir: Path, mock_toml_files
    ) -> None:
        """An override spelled saml20-sp extends the default's saml20_sp table."""
        mock_toml_files({
            "default.toml": (
                "[metadatafields.saml20_sp]\n"
                '"coin:no_consent_required" = { type = "boolean", default = false }\n'
            ),
            "production.toml": (
                '[metadatafields."saml20-sp"]\n'
                '"coin:no_consent_required" = { type = "boolean", default = true }\n'
                'name = { type = "text", required = true }\n'
            ),
        })

        config = load_config(test_config_dir, "production")

        assert config["metadatafields"] == {
            "saml20_sp": {
                "coin:no_consent_required": {"type": "boolean", "default": True},
                "name": {"type": "text", "required": True},
            }
        }

    def test_malformed_metadatafields_raises(
        self, test_config_dir: Path, mock_toml_files
    ) -> None:
        """A connection type entry that is not a table is rejected."""
        mock_toml_files({"default.toml": 'metadatafields = { saml20_sp = "text" }'})

        with pytest.raises(ConfigurationError, match="metadatafields.saml20_sp"):
            load_config(test_config_dir, "development")


class TestNormalizeMetadatafields:
    """Tests for connection type normalization."""

    def test_connection_type_key(self) -> None:
        """Hyphens become underscores."""
        assert connection_type_key("saml20-idp") == "saml20_idp"
        assert connection_type_key("oidc10_rp") == "oidc10_rp"

    def test_both_spellings_in_one_file_merge(self) -> None:
        """Two spellings of one connection type end up in one table."""
        config = {
            "debug": True,
            "metadatafields": {
                "saml20-idp": {"name": {"type": "text"}},
                "saml20_idp": {"logo": {"type": "file"}},
            },
        }

        assert normalize_metadatafields(config) == {
            "debug": True,
            "metadatafields": {
                "saml20_idp": {"name": {"type": "text"}, "logo": {"type": "file"}},
            },
        }

    def test_without_metadatafields_unchanged(self) -> None:
        """Configs without field definitions pass through."""
        config = {"debug": True}
        assert normalize_metadatafields(config) is config

    def test_metadatafields_must_be_a_table(self) -> None:
        """A scalar metadatafields option is rejected."""
        with pytest.raises(ConfigurationError, match="must be a table"):
            normalize_metadatafields({"metadatafields": "none"})
