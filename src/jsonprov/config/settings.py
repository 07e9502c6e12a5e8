"""
CLI settings for jsonprov.

A value is taken from the first place that defines it:
constructor keyword, JSONPROV_* environment variable, the .env file named by
JSONPROV_ENV_FILE, the project's .jsonprov/config.yaml, the user's
config.yaml, then the field default.

Sections nest with a double underscore, e.g.
JSONPROV_DIFF__ARRAY_STRATEGY=elements.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import jsonprov.config.sources as sources
import jsonprov.config.types as types
import jsonprov.constants as constants

_SettingsSource: _typing.TypeAlias = _pydantic_settings.PydanticBaseSettingsSource


def _dotenv_path() -> str | None:
    env_file = _os.environ.get("JSONPROV_ENV_FILE")
    if env_file and _pathlib.Path(env_file).is_file():
        return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """Effective jsonprov settings: merge and diff defaults plus logging."""

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        env_file=_dotenv_path(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    merge: types.MergeOptions = _pydantic.Field(default_factory=types.MergeOptions)
    """Options for `jsonprov merge` when --array-strategy is not given."""

    diff: types.DiffOptions = _pydantic.Field(default_factory=types.DiffOptions)
    """Options for `jsonprov diff` when --array-strategy is not given."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)

    @classmethod
    def yaml_layers(
        cls,
        project_root: _pathlib.Path | None = None,
    ) -> sources.LayeredYamlSettingsSource:
        """
        The YAML source Settings reads from, rooted at ``project_root``.

        Defaults to the working directory. The CLI uses this to show which
        file each configured value came from.
        """
        root = _pathlib.Path.cwd() if project_root is None else project_root
        return sources.LayeredYamlSettingsSource(cls, root)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _SettingsSource,
        env_settings: _SettingsSource,
        dotenv_settings: _SettingsSource,
        file_secret_settings: _SettingsSource,
    ) -> tuple[_SettingsSource, ...]:
        # Earlier entries win; YAML sits under everything pydantic reads itself
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls.yaml_layers(),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Build Settings while ignoring any .env file."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]
