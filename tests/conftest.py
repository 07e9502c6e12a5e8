"""
Shared pytest fixtures for jsonprov tests.

Environment isolation for Settings, plus small documents and schemas
reused across the merge, schema and CLI tests.
"""

import json as _json
import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import jsonprov.config as config
import jsonprov.merge as merge

# Variables Settings would read
ENV_PREFIX_TO_CLEAR = "JSONPROV_"


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with JSONPROV_* keys removed.

    Pair with mock.patch.dict(..., clear=True) so no JSONPROV_ variable leaks in.
    """
    return {k: v for k, v in _os.environ.items() if not k.startswith(ENV_PREFIX_TO_CLEAR)}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str], tmp_path: _pathlib.Path):
    """
    Context manager that isolates tests from environment variables and user config.

    The user config directory points into tmp_path, so a developer's
    ~/.config/jsonprov/config.yaml never leaks into tests.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    env = dict(clean_env)
    env["JSONPROV_CONFIG_DIR"] = str(tmp_path / "user-config")
    return _mock.patch.dict(_os.environ, env, clear=True)


@_pytest.fixture
def clean_settings(
    isolated_env: _typing.Any,
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> config.Settings:
    """
    Settings instance isolated from environment, .env file and config files.

    Runs from an empty project directory, so every field has its default.
    """
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    with isolated_env:
        return config.Settings.construct_without_dotenv()


@_pytest.fixture
def people_sources() -> list[merge.SourceRecord]:
    """Three sources that each set part of a person record."""
    return [
        merge.SourceRecord("1", {"name": "Alice", "age": 25}),
        merge.SourceRecord("2", {"name": "Bob"}),
        merge.SourceRecord("3", {"age": 30}),
    ]


@_pytest.fixture
def person_schema() -> dict[str, _typing.Any]:
    """Object schema with a string and a number property."""
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "age": {"type": "number"},
        },
    }


@_pytest.fixture
def write_json(tmp_path: _pathlib.Path) -> _typing.Callable[[str, _typing.Any], _pathlib.Path]:
    """Write a value as JSON into tmp_path and return the file path."""

    def _write(name: str, value: _typing.Any) -> _pathlib.Path:
        path = tmp_path / name
        path.write_text(_json.dumps(value), encoding="utf-8")
        return path

    return _write
