"""
The `jsonprov` command.

Documents may be JSON or YAML. Results go to stdout as JSON; tables (for
--provenance and traverse) are drawn with rich. Log records go to stderr.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.logging as _rich_logging
import rich.syntax as _rich_syntax
import rich.table as _rich_table
import yaml as _yaml

import jsonprov
import jsonprov.config as config
import jsonprov.documents as documents
import jsonprov.enricher as enricher
import jsonprov.merge as merge
import jsonprov.schema as schema
import jsonprov.utils.json_values as json_values

# -h works as well as --help
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_FILE = _click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path)


def _configure_logging(level: str) -> None:
    """Send jsonprov log records to stderr through rich at ``level``."""
    logger = _logging.getLogger("jsonprov")
    logger.setLevel(level.upper())
    if not any(isinstance(h, _rich_logging.RichHandler) for h in logger.handlers):
        handler = _rich_logging.RichHandler(
            console=_rich_console.Console(stderr=True),
            show_path=False,
        )
        logger.addHandler(handler)


def _dumps(value: _typing.Any) -> str:
    # YAML input may carry dates; render anything non-JSON as text
    return _json.dumps(json_values.to_jsonable(value), indent=2, default=str)


def _load(path: _pathlib.Path) -> _typing.Any:
    try:
        return documents.load_document(path)
    except documents.DocumentLoadError as e:
        raise _click.ClickException(str(e)) from e


def _load_mapping(path: _pathlib.Path, what: str) -> dict[str, _typing.Any]:
    value = _load(path)
    if value is None:
        return {}
    if not json_values.is_mapping(value):
        raise _click.ClickException(f"{what} {path} must contain an object, got {type(value).__name__}")
    return dict(value)


def _settings(ctx: _click.Context) -> config.Settings:
    settings: config.Settings = ctx.obj["settings"]
    return settings


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(jsonprov.__version__, "-v", "--version", prog_name="jsonprov")
@_click.option(
    "--verbose",
    is_flag=True,
    help="Log engine activity at debug level",
)
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """
    jsonprov - merge JSON documents and track where every value came from.

    \b
    Examples:
        jsonprov merge base.json team.yaml local.json --provenance
        jsonprov diff old.json new.json
        jsonprov enrich --schema schema.json --ui ui.json base.json team.json
        jsonprov traverse schema.json --data merged.json
        jsonprov config show
    """
    try:
        settings = config.Settings()
    except config.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid configuration:\n{e}") from e

    _configure_logging("debug" if verbose else settings.logging.level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# =============================================================================
# Merge / Diff
# =============================================================================


@cli.command(name="merge")
@_click.argument("files", nargs=-1, required=True, type=_FILE)
@_click.option(
    "--array-strategy",
    type=_click.Choice(["replace", "concat"]),
    default=None,
    help="How arrays combine (default: from settings)",
)
@_click.option("--provenance", "show_provenance", is_flag=True, help="Show which file set each path")
@_click.option("--json", "as_json", is_flag=True, help="Output merged value and provenance as one JSON object")
@_click.pass_context
def merge_cmd(
    ctx: _click.Context,
    files: tuple[_pathlib.Path, ...],
    array_strategy: str | None,
    show_provenance: bool,
    as_json: bool,
) -> None:
    """Merge FILES in order; later files win. Each file's id is its name without suffix."""
    options = _settings(ctx).merge
    if array_strategy is not None:
        options = config.MergeOptions(array_strategy=array_strategy)

    sources = [merge.SourceRecord(documents.source_id_for(path), _load(path)) for path in files]
    result = merge.merge_all_with_metadata(sources, options)

    if as_json:
        provenance = {
            path: {"sourceId": record.source_id, "value": record.value}
            for path, record in result.provenance.items()
        }
        _click.echo(_dumps({"merged": result.merged, "provenance": provenance}))
        return

    _click.echo(_dumps(result.merged))
    if show_provenance:
        table = _rich_table.Table(title="Provenance")
        table.add_column("Path", style="cyan")
        table.add_column("Source", style="green")
        table.add_column("Value")
        for path in sorted(result.provenance):
            record = result.provenance[path]
            table.add_row(path, str(record.source_id), _json.dumps(record.value, default=str))
        _rich_console.Console().print(table)


@cli.command(name="diff")
@_click.argument("old", type=_FILE)
@_click.argument("new", type=_FILE)
@_click.option(
    "--array-strategy",
    type=_click.Choice(["replace", "elements"]),
    default=None,
    help="How differing arrays are recorded (default: from settings)",
)
@_click.pass_context
def diff_cmd(
    ctx: _click.Context,
    old: _pathlib.Path,
    new: _pathlib.Path,
    array_strategy: str | None,
) -> None:
    """
    Print the changes that turn OLD into NEW.

    Removed keys are shown as null.
    """
    options = _settings(ctx).diff
    if array_strategy is not None:
        options = config.DiffOptions(array_strategy=array_strategy)
    _click.echo(_dumps(merge.diff(_load(old), _load(new), options)))


# =============================================================================
# Schema commands
# =============================================================================


@cli.command(name="enrich")
@_click.argument("files", nargs=-1, required=True, type=_FILE)
@_click.option("--schema", "schema_file", required=True, type=_FILE, help="JSON Schema to walk")
@_click.option("--ui", "ui_file", type=_FILE, default=None, help="Existing UI annotations to update")
@_click.option("--defaults", is_flag=True, help="Also output the schema with merged defaults")
@_click.pass_context
def enrich_cmd(
    ctx: _click.Context,
    files: tuple[_pathlib.Path, ...],
    schema_file: _pathlib.Path,
    ui_file: _pathlib.Path | None,
    defaults: bool,
) -> None:
    """
    Annotate a schema UI with the file each merged value came from.

    Each FILE must hold an object. Its "id" key names the source; when
    missing, the file name without suffix is used.
    """
    schema_doc = _load(schema_file)
    schema_ui = _load_mapping(ui_file, "UI file") if ui_file is not None else {}

    objects = []
    for path in files:
        obj = _load_mapping(path, "Document")
        obj.setdefault("id", documents.source_id_for(path))
        objects.append(obj)

    result = enricher.enrich_schema(schema_doc, schema_ui, objects, _settings(ctx).merge)

    output: dict[str, _typing.Any] = {"schemaUI": result.schema_ui, "merged": result.merged}
    if defaults:
        output["schema"] = enricher.generate_schema(schema_doc, result.merged, result.provenance)
    _click.echo(_dumps(output))


@cli.command(name="traverse")
@_click.argument("schema_file", metavar="SCHEMA", type=_FILE)
@_click.option("--data", "data_file", type=_FILE, default=None, help="Walk the schema against this document")
@_click.option("--json", "as_json", is_flag=True, help="One JSON object per visited node")
def traverse_cmd(
    schema_file: _pathlib.Path,
    data_file: _pathlib.Path | None,
    as_json: bool,
) -> None:
    """List every schema node the traversal visits, in visit order."""
    schema_doc = _load(schema_file)
    visits: list[dict[str, _typing.Any]] = []

    def record(context: schema.SchemaTraversalContext) -> None:
        visit: dict[str, _typing.Any] = {
            "path": context.dotted_path,
            "propertyName": context.property_name,
            "keyword": context.keyword,
        }
        if isinstance(context, schema.DataTraversalContext):
            visit["data"] = context.data_value
        visits.append(visit)

    if data_file is not None:
        schema.traverse_data(schema_doc, _load(data_file), record)
    else:
        schema.traverse_schema(schema_doc, record)

    if as_json:
        for visit in visits:
            _click.echo(_json.dumps(json_values.to_jsonable(visit), default=str))
        return

    table = _rich_table.Table(title=f"Traversal of {schema_file.name}")
    table.add_column("Path", style="cyan")
    table.add_column("Property")
    table.add_column("Keyword", style="magenta")
    if data_file is not None:
        table.add_column("Data")
    for visit in visits:
        row = [visit["path"] or "(root)", visit["propertyName"] or "", visit["keyword"] or ""]
        if data_file is not None:
            row.append(_json.dumps(json_values.to_jsonable(visit["data"]), default=str))
        table.add_row(*row)
    _rich_console.Console().print(table)


# =============================================================================
# Config
# =============================================================================


@cli.group(name="config")
def config_cmd() -> None:
    """Inspect jsonprov's own settings."""


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Print the settings as JSON")
@_click.option("--provenance", "show_provenance", is_flag=True, help="List which config file set each value")
@_click.pass_context
def config_show(ctx: _click.Context, as_json: bool, show_provenance: bool) -> None:
    """
    Print the settings every command starts from.

    Environment variables and config files are already applied. With
    --provenance, values read from the user or project config.yaml are
    listed with the file that set them.

    \b
    Examples:
        jsonprov config show
        jsonprov config show --json
        jsonprov config show --provenance
    """
    effective = _settings(ctx).model_dump(mode="json")
    origins = config.Settings.yaml_layers().get_provenance() if show_provenance else {}

    if as_json:
        if show_provenance:
            _click.echo(_dumps({"settings": effective, "provenance": origins}))
        else:
            _click.echo(_dumps(effective))
        return

    yaml_text = _yaml.safe_dump(effective, sort_keys=False)
    if _sys.stdout.isatty():
        _rich_console.Console().print(_rich_syntax.Syntax(yaml_text, "yaml", background_color="default"))
    else:
        _click.echo(yaml_text)

    if show_provenance:
        # An empty table is narrower than its title; keep the title on one line
        table = _rich_table.Table(title="Config file provenance", min_width=40)
        table.add_column("Setting", style="cyan", no_wrap=True)
        table.add_column("File", style="green")
        for key in sorted(origins):
            table.add_row(key, str(origins[key]))
        _rich_console.Console().print(table)


def main() -> None:
    """Console script entry point."""
    cli(prog_name="jsonprov")


if __name__ == "__main__":
    main()
