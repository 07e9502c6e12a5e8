"""Tests for the layered YAML settings source.

- Path helpers (user and project config locations)
- YAML loading and error reporting
- Layer merge order
"""

import pathlib as _pathlib

import pydantic_settings as _pydantic_settings
import pytest as _pytest

import jsonprov.config.settings as settings
import jsonprov.config.sources as sources


class TestLayeredYamlSettingsSourceClass:
    """Verify the LayeredYamlSettingsSource class API."""

    def test_is_pydantic_settings_source(self) -> None:
        assert issubclass(
            sources.LayeredYamlSettingsSource,
            _pydantic_settings.PydanticBaseSettingsSource,
        )


class TestHelperFunctions:
    """Tests for path helper functions."""

    def test_get_user_config_path_default(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Without env var, should return XDG-compliant user config path."""
        monkeypatch.delenv("JSONPROV_CONFIG_DIR", raising=False)
        path = sources.get_user_config_path()
        assert path == _pathlib.Path.home() / ".config" / "jsonprov" / "config.yaml"

    def test_get_user_config_path_with_env_var(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JSONPROV_CONFIG_DIR", "/custom/config/dir")
        path = sources.get_user_config_path()
        assert path == _pathlib.Path("/custom/config/dir/config.yaml")

    def test_get_project_config_path(self) -> None:
        project_root = _pathlib.Path("/some/project")
        path = sources.get_project_config_path(project_root)
        assert path == project_root / ".jsonprov" / "config.yaml"


class TestLoadYamlFile:
    """Tests for load_yaml_file()."""

    def test_loads_mapping(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("merge:\n  array_strategy: concat\n")
        assert sources.load_yaml_file(path) == {"merge": {"array_strategy": "concat"}}

    def test_empty_file_returns_none(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert sources.load_yaml_file(path) is None

    def test_malformed_yaml(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("merge: [unclosed\n")
        with _pytest.raises(sources.ConfigFileError, match="invalid YAML") as exc_info:
            sources.load_yaml_file(path)
        assert exc_info.value.path == path

    def test_non_mapping_top_level(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with _pytest.raises(sources.ConfigFileError, match="got list"):
            sources.load_yaml_file(path)

    def test_unreadable_path(self, tmp_path: _pathlib.Path) -> None:
        """A directory in place of the file cannot be read."""
        with _pytest.raises(sources.ConfigFileError, match="cannot read file"):
            sources.load_yaml_file(tmp_path)


class TestLayerMerging:
    """Tests for how user and project layers combine."""

    def _write(self, path: _pathlib.Path, content: str) -> _pathlib.Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def test_no_files(self, tmp_path: _pathlib.Path) -> None:
        source = sources.LayeredYamlSettingsSource(
            settings.Settings,
            tmp_path,
            user_config_path=tmp_path / "missing.yaml",
        )
        assert source() == {}
        assert source.get_loaded_layers() == []

    def test_project_overrides_user(self, tmp_path: _pathlib.Path) -> None:
        user = self._write(
            tmp_path / "user" / "config.yaml",
            "merge:\n  array_strategy: concat\nlogging:\n  level: info\n",
        )
        project_root = tmp_path / "project"
        project = self._write(
            project_root / ".jsonprov" / "config.yaml",
            "merge:\n  array_strategy: replace\n",
        )

        source = sources.LayeredYamlSettingsSource(
            settings.Settings,
            project_root,
            user_config_path=user,
        )

        assert source() == {
            "merge": {"array_strategy": "replace"},
            "logging": {"level": "info"},
        }
        assert source.get_loaded_layers() == [("user", user), ("project", project)]

    def test_get_field_value(self, tmp_path: _pathlib.Path) -> None:
        user = self._write(tmp_path / "config.yaml", "diff:\n  array_strategy: elements\n")
        source = sources.LayeredYamlSettingsSource(settings.Settings, user_config_path=user)

        field = settings.Settings.model_fields["diff"]
        assert source.get_field_value(field, "diff") == (
            {"array_strategy": "elements"},
            "diff",
            True,
        )
        assert source.get_field_value(field, "merge") == (None, "merge", False)

    def test_malformed_layer_raises(self, tmp_path: _pathlib.Path) -> None:
        user = self._write(tmp_path / "config.yaml", "just a string\n")
        with _pytest.raises(sources.ConfigFileError):
            sources.LayeredYamlSettingsSource(settings.Settings, user_config_path=user)


class TestLayerProvenance:
    """Each merged config value remembers the layer file that set it."""

    def test_values_traced_to_files(self, tmp_path: _pathlib.Path) -> None:
        user = tmp_path / "user.yaml"
        user.write_text("merge:\n  array_strategy: concat\nlogging:\n  level: info\n")
        project_root = tmp_path / "project"
        project = project_root / ".jsonprov" / "config.yaml"
        project.parent.mkdir(parents=True)
        project.write_text("logging:\n  level: debug\n")

        source = sources.LayeredYamlSettingsSource(
            settings.Settings,
            project_root,
            user_config_path=user,
        )

        origins = source.get_provenance()
        assert origins["merge.array_strategy"] == user
        assert origins["logging.level"] == project
        assert origins["logging"] == project

    def test_empty_file_is_not_a_layer(self, tmp_path: _pathlib.Path) -> None:
        user = tmp_path / "user.yaml"
        user.write_text("")
        source = sources.LayeredYamlSettingsSource(settings.Settings, user_config_path=user)
        assert source.layers == []
        assert source.get_provenance() == {}
