# src/tagstash/cli.py
"""tagstash Command Line Interface.

Entry point for the tagstash CLI tool. A typical cycle:

    tagstash stash base/*.yaml --store .tagstash.json
    kustomize build base | tagstash restore --store .tagstash.json > out.yaml
    tagstash restore --in-place base/*.yaml --store .tagstash.json
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from tagstash import __version__
from tagstash.cli_formatters import describe_tree, format_unresolved, template_tag_paths
from tagstash.contracts import (
    MissingFieldError,
    ParseError,
    ReadError,
    StashConflictError,
    StoreFormatError,
    TagStashError,
    WriteError,
)
from tagstash.core.classifier import is_structured_object
from tagstash.core.config import NamingSettings, TagStashSettings, load_kustomize_naming, load_settings
from tagstash.core.identifiers import build_identifier
from tagstash.core.parser import parse_document
from tagstash.core.splitter import split_documents
from tagstash.core.stash_store import StashStore
from tagstash.core.templates import TemplateTagMatcher
from tagstash.engine.restore import RestoreEngine, RestoreResult
from tagstash.engine.sources import STDIO, read_source, write_output
from tagstash.engine.stash import StashEngine, StashResult

__all__ = ["app"]

app = typer.Typer(
    name="tagstash",
    help="Stash template tags out of Kubernetes manifests and restore them after composition.",
    no_args_is_help=True,
)

# Title and hint shown for each fatal error kind
_ERROR_PRESENTATION: dict[type[TagStashError], tuple[str, str | None]] = {
    ReadError: ("Read Error", "Check the path and file permissions."),
    ParseError: ("YAML Syntax Error", "Check for tab indentation, unclosed brackets, or duplicate anchors."),
    MissingFieldError: ("Missing Required Field", "Structured objects need apiVersion, kind, metadata and metadata.name."),
    StashConflictError: ("Stash Conflict", "Check for duplicate mapping keys or two documents with the same identifier."),
    StoreFormatError: ("Invalid Stash Store", "Re-run `tagstash stash` to regenerate the store."),
    WriteError: ("Write Error", "Check that the target directory exists and is writable."),
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tagstash version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence checked in _load_dotenv for a better message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """tagstash: keep template tags alive through manifest composition."""
    from tagstash.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        expand=False,
    )
    console.print(panel)


def _fail(error: TagStashError) -> typer.Exit:
    title, hint = _ERROR_PRESENTATION.get(type(error), ("Error", None))
    _format_error(title=title, message=str(error), hint=hint)
    return typer.Exit(1)


def _load_config(settings: Path | None) -> TagStashSettings:
    """Load settings, or defaults when no file is given.

    Raises:
        typer.Exit: On any configuration error (after printing it)
    """
    if settings is None:
        return TagStashSettings()

    settings_path = settings.expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None


def _resolve_naming(config: TagStashSettings, kustomization: Path | None) -> NamingSettings:
    if kustomization is None:
        return config.naming
    try:
        return load_kustomize_naming(kustomization)
    except FileNotFoundError:
        _format_error(
            title="File Not Found",
            message=f"Kustomization file does not exist: {kustomization}",
        )
        raise typer.Exit(1) from None
    except (ValueError, ValidationError) as e:
        _format_error(title="Invalid Kustomization", message=str(e))
        raise typer.Exit(1) from None


_SETTINGS_OPTION = typer.Option(None, "--settings", "-s", help="Path to settings YAML file.")
_KUSTOMIZATION_OPTION = typer.Option(
    None,
    "--kustomization",
    "-k",
    help="Take namePrefix, nameSuffix and namespace from this kustomization.yaml.",
)


@app.command()
def stash(
    files: list[Path] = typer.Argument(..., help="YAML manifest files to stash."),
    settings: Path | None = _SETTINGS_OPTION,
    store: Path | None = typer.Option(None, "--store", help="Stash store to write (default: store_path setting)."),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Write stashed files into this directory instead of in place.",
    ),
    kustomization: Path | None = _KUSTOMIZATION_OPTION,
) -> None:
    """Replace template tags with a placeholder and record them in a stash store.

    Nothing is written unless every file stashes cleanly.
    """
    if output_dir is not None:
        clashing = sorted(name for name, count in Counter(path.name for path in files).items() if count > 1)
        if clashing:
            _format_error(
                title="Invalid Arguments",
                message="Several files would be written to the same name in --output-dir.",
                details=clashing,
                hint="Stash files with the same name into separate directories.",
            )
            raise typer.Exit(1)

    config = _load_config(settings)
    naming = _resolve_naming(config, kustomization)
    stash_store = StashStore()
    engine = StashEngine(
        stash_store,
        TemplateTagMatcher.from_settings(config.template),
        placeholder=config.placeholder,
        naming=naming,
    )

    results: list[tuple[Path, StashResult]] = []
    try:
        for path in files:
            results.append((path, engine.stash_stream(read_source(path), source=str(path))))
    except TagStashError as e:
        raise _fail(e) from None

    store_path = store if store is not None else config.store_path
    try:
        for path, result in results:
            write_output(output_dir / path.name if output_dir is not None else path, result.data)
        stash_store.save(store_path)
    except TagStashError as e:
        raise _fail(e) from None
    typer.echo(f"Stashed {len(stash_store)} template tag(s) from {len(files)} file(s) into {store_path}")


@app.command()
def restore(
    inputs: list[str] | None = typer.Argument(None, help="Streams to restore; '-' (default) reads stdin."),
    settings: Path | None = _SETTINGS_OPTION,
    store: Path | None = typer.Option(None, "--store", help="Stash store to read (default: store_path setting)."),
    output: str = typer.Option(STDIO, "--output", "-o", help="Where to write the restored stream ('-' for stdout)."),
    in_place: bool = typer.Option(
        False,
        "--in-place",
        "-i",
        help="Restore the given stashed source files in place.",
    ),
    kustomization: Path | None = _KUSTOMIZATION_OPTION,
    strict: bool = typer.Option(False, "--strict", help="Exit with status 2 if anything could not be restored."),
) -> None:
    """Write stashed template tags back into a composed stream (or the stashed sources)."""
    sources = inputs or [STDIO]
    if in_place and STDIO in sources:
        _format_error(title="Invalid Arguments", message="--in-place needs file paths, not stdin.")
        raise typer.Exit(1)
    if not in_place and len(sources) > 1:
        _format_error(
            title="Invalid Arguments",
            message="Several inputs given without --in-place.",
            hint="Pipe the composed stream through stdin, or use --in-place for source files.",
        )
        raise typer.Exit(1)

    config = _load_config(settings)
    store_path = store if store is not None else config.store_path
    try:
        stash_store = StashStore.load(store_path)
    except FileNotFoundError:
        _format_error(
            title="File Not Found",
            message=f"Stash store does not exist: {store_path}",
            hint="Run `tagstash stash` first.",
        )
        raise typer.Exit(1) from None
    except TagStashError as e:
        raise _fail(e) from None

    # Sources have not been through the composer, so apply its renaming ourselves
    naming = _resolve_naming(config, kustomization) if in_place else None
    engine = RestoreEngine(stash_store, naming=naming)

    results: list[tuple[str, RestoreResult]] = []
    try:
        for location in sources:
            name = "<stdin>" if location == STDIO else location
            results.append((location, engine.restore_stream(read_source(location), source=name)))
    except TagStashError as e:
        raise _fail(e) from None
    unresolved = engine.finish()

    try:
        for location, result in results:
            write_output(location if in_place else output, result.data)
    except TagStashError as e:
        raise _fail(e) from None

    for line in format_unresolved(unresolved):
        typer.secho(line, fg=typer.colors.YELLOW, err=True)
    restored = sum(result.restored for _, result in results)
    typer.echo(f"Restored {restored} of {len(stash_store)} template tag(s)", err=True)

    if strict and unresolved:
        raise typer.Exit(2)


@app.command("inspect")
def inspect_(
    file: str = typer.Argument(..., help="YAML stream to inspect ('-' for stdin)."),
    settings: Path | None = _SETTINGS_OPTION,
) -> None:
    """Print each document's node tree, identifier and template tag paths."""
    config = _load_config(settings)
    is_template_tag = TemplateTagMatcher.from_settings(config.template)
    source = "<stdin>" if file == STDIO else file

    try:
        data = read_source(file)
        for index, chunk in enumerate(split_documents(data)):
            document = parse_document(chunk, index, source)
            if not is_structured_object(document.tree):
                typer.echo(f"--- document {index}: not a structured object")
            else:
                try:
                    identifier = build_identifier(document.tree, config.naming, document_index=index, source=source)
                except MissingFieldError as e:
                    identifier = f"<missing {e.field}>"
                typer.echo(f"--- document {index}: {identifier}")
            for line in describe_tree(document.tree):
                typer.echo(line)
            for line in template_tag_paths(document.tree, is_template_tag):
                typer.echo(f"  template tag: {line}")
    except TagStashError as e:
        raise _fail(e) from None
