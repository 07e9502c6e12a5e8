"""
Loading JSON and YAML documents from disk.

YAML is a superset of JSON, so every document goes through yaml.safe_load.
"""

import pathlib as _pathlib
import typing as _typing

import yaml as _yaml


class DocumentLoadError(Exception):
    """A document could not be read or parsed."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot load {path}: {message}")


def load_document(path: _pathlib.Path | str) -> _typing.Any:
    """
    Read and parse one JSON or YAML document.

    Args:
        path: File to load.

    Returns:
        The parsed value. An empty file yields None.

    Raises:
        DocumentLoadError: If the file cannot be read or is not valid YAML/JSON.
    """
    path = _pathlib.Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(path, str(e)) from e

    try:
        return _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise DocumentLoadError(path, f"invalid JSON/YAML: {e}") from e


def source_id_for(path: _pathlib.Path | str) -> str:
    """Default source id for a document: the file name without its suffix."""
    return _pathlib.Path(path).stem
