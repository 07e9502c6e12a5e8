"""Layered YAML settings source.

jsonprov reads its own configuration the way it merges any other documents:
each YAML file is a source record, folded with merge_all_with_metadata(), so
`jsonprov config show --provenance` can tell which file set each value.

Layers, lowest precedence first:
- user: ~/.config/jsonprov/config.yaml, or $JSONPROV_CONFIG_DIR/config.yaml
- project: .jsonprov/config.yaml under the working directory

Environment variables, .env and constructor arguments sit above these and
are handled by pydantic-settings itself.
"""

import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import jsonprov.constants as constants

if _typing.TYPE_CHECKING:
    import jsonprov.merge._provenance as _provenance

_logger = _logging.getLogger(__name__)

ENV_CONFIG_DIR = "JSONPROV_CONFIG_DIR"
CONFIG_FILE_NAME = "config.yaml"


class ConfigFileError(Exception):
    """A config layer could not be read or is not a YAML mapping."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


@_dataclasses.dataclass(frozen=True, slots=True)
class ConfigLayer:
    """One loaded config file. ``name`` doubles as its provenance source id."""

    name: str
    path: _pathlib.Path
    data: dict[str, _typing.Any]


def get_user_config_path() -> _pathlib.Path:
    """User layer path; $JSONPROV_CONFIG_DIR replaces ~/.config/jsonprov."""
    if override := _os.environ.get(ENV_CONFIG_DIR):
        return _pathlib.Path(override) / CONFIG_FILE_NAME
    return _pathlib.Path.home() / ".config" / "jsonprov" / CONFIG_FILE_NAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Project layer path inside ``project_root``."""
    return project_root / constants.PROJECT_CONFIG_DIR / CONFIG_FILE_NAME


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Parse one config layer.

    Returns:
        The top-level mapping, or None for an empty file.

    Raises:
        ConfigFileError: Unreadable file, invalid YAML, or a top level that
            is not a mapping.
    """
    try:
        parsed = _yaml.safe_load(path.read_text(encoding="utf-8"))
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e.strerror or e}") from e

    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise ConfigFileError(
            path,
            f"top level must be a mapping, got {type(parsed).__name__}",
        )
    return parsed


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    pydantic-settings source backed by the user and project YAML layers.

    The layers are merged once, at construction. Missing files are skipped;
    empty files load as no layer at all.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Args:
            settings_cls: The Settings class being populated.
            project_root: Directory holding .jsonprov/config.yaml, if any.
            user_config_path: Explicit user layer file; defaults to
                get_user_config_path().
        """
        super().__init__(settings_cls)
        candidates = [("user", user_config_path or get_user_config_path())]
        if project_root is not None:
            candidates.append(("project", get_project_config_path(project_root)))

        self._layers = [layer for layer in (self._read(name, path) for name, path in candidates) if layer]
        self._result = self._merge_layers(self._layers)
        _logger.debug("Config layers: %s", [(layer.name, str(layer.path)) for layer in self._layers])

    @staticmethod
    def _read(name: str, path: _pathlib.Path) -> ConfigLayer | None:
        if not path.is_file():
            return None
        data = load_yaml_file(path)
        return ConfigLayer(name, path, data) if data else None

    @staticmethod
    def _merge_layers(layers: list[ConfigLayer]) -> "_provenance.MergeResult":
        # Deferred: the merge package imports config.types
        import jsonprov.merge._provenance as _provenance
        import jsonprov.merge._types as _types

        return _provenance.merge_all_with_metadata(_types.SourceRecord(layer.name, layer.data) for layer in layers)

    @property
    def layers(self) -> list[ConfigLayer]:
        """Layers actually loaded, lowest precedence first."""
        return list(self._layers)

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """(name, path) of each loaded layer, lowest precedence first."""
        return [(layer.name, layer.path) for layer in self._layers]

    def get_provenance(self) -> dict[str, _pathlib.Path]:
        """Dotted config path -> file that last set it."""
        paths = {layer.name: layer.path for layer in self._layers}
        return {key: paths[str(record.source_id)] for key, record in self._result.provenance.items()}

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """(value, field_name, value_is_complex) for one top-level field."""
        value = self._result.merged.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        return {key: value for key, value in self._result.merged.items() if value is not None}
