"""CLI interface for validify using Typer framework."""

import dataclasses
import importlib
import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Any

import pydantic
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from validify import __description__, __version__
from validify.config import OutputFormat, ValidifyConfig, load_config
from validify.errors import FieldError, ValidationErrors, ValidifyError
from validify.payload import validify
from validify.rules import EVALUATORS, RuleKind
from validify.rules.catalog import MODIFIERS

logger = logging.getLogger(__name__)

# Exit codes
EXIT_INVALID = 1
EXIT_UNREADABLE = 2

app = typer.Typer(
    name="validify",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"validify version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """validify - declarative validation and modification of structured records."""


def _configure_logging(config: ValidifyConfig) -> None:
    logging.basicConfig(
        level=config.logging.level.logging_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _import_record_type(reference: str) -> type:
    """Resolve 'package.module:Record' to a record type."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"schema must look like 'package.module:Record', got: {reference}")
    module = importlib.import_module(module_name)
    record_type = module
    for part in attribute.split("."):
        record_type = getattr(record_type, part)
    if not dataclasses.is_dataclass(record_type):
        raise ValueError(f"{reference} is not a dataclass record")
    return record_type


def _output_errors_table(errors: ValidationErrors, config: ValidifyConfig) -> None:
    separator = config.output.location_separator
    field_errors = errors.field_errors()
    schema_errors = errors.schema_errors()

    console.print(
        f"[red]Validation failed:[/red] {len(errors)} error(s) "
        f"({len(field_errors)} field, {len(schema_errors)} schema)"
    )

    if field_errors:
        console.print("\n[blue]Field errors:[/blue]")
        table = Table()
        table.add_column("Location", style="cyan")
        table.add_column("Type", style="white")
        table.add_column("Code", style="dim")
        table.add_column("Message", style="white")
        if config.output.include_params:
            table.add_column("Params", style="dim")

        for error in field_errors:
            row = [
                error.location.render(separator),
                error.kind,
                escape(error.code or ""),
                escape(error.message or ""),
            ]
            if config.output.include_params:
                row.append(escape(_format_params(error)))
            table.add_row(*row)

        console.print(table)

    if schema_errors:
        console.print("\n[blue]Schema errors:[/blue]")
        table = Table()
        table.add_column("Name", style="cyan")
        table.add_column("Message", style="white")
        for error in schema_errors:
            table.add_row(escape(error.name), escape(error.message or ""))
        console.print(table)


def _format_params(error: FieldError) -> str:
    return ", ".join(f"{key}={value!r}" for key, value in error.params.items())


def _record_to_dict(record: Any) -> dict[str, Any]:
    return dataclasses.asdict(record)


@app.command()
def check(
    payload: Annotated[
        Path,
        typer.Argument(help="JSON file holding the payload to validate")
    ],
    schema: Annotated[
        str,
        typer.Option("--schema", "-s", help="Record type as 'package.module:Record' (default: from config)")
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: table, json (default: from config)")
    ] = None,
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .validify.json)")
    ] = None,
) -> None:
    """Validate and modify a JSON payload against a record type."""
    try:
        validify_config = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_UNREADABLE)

    _configure_logging(validify_config)
    output_format = format or validify_config.output.format
    reference = schema or validify_config.check.schema_ref
    if not reference:
        console.print("[red]Error:[/red] No record type given. Use --schema or set 'check.schema' in .validify.json")
        raise typer.Exit(EXIT_UNREADABLE)

    try:
        record_type = _import_record_type(reference)
        data = jsonlib.loads(payload.read_text(encoding="utf-8"))
    except (ImportError, AttributeError, ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_UNREADABLE)

    logger.info(f"Checking {payload} against {reference}")

    try:
        record = validify(record_type, data)
    except pydantic.ValidationError as e:
        console.print(f"[red]Error:[/red] Payload could not be deserialized:\n{escape(str(e))}")
        raise typer.Exit(EXIT_UNREADABLE)
    except ValidifyError as e:
        if output_format == OutputFormat.JSON:
            report = {
                "valid": False,
                "errors": e.errors.to_list(
                    separator=validify_config.output.location_separator,
                    include_params=validify_config.output.include_params,
                ),
            }
            console.print_json(jsonlib.dumps(report, default=str))
        else:
            _output_errors_table(e.errors, validify_config)
        raise typer.Exit(EXIT_INVALID)

    if output_format == OutputFormat.JSON:
        console.print_json(jsonlib.dumps({"valid": True, "record": _record_to_dict(record)}, default=str))
    else:
        console.print("[green]Payload is valid[/green]")
        console.print_json(jsonlib.dumps(_record_to_dict(record), default=str))


@app.command()
def rules() -> None:
    """List the built-in rule catalog."""
    modifier_kinds = {rule.kind for rule in MODIFIERS}

    table = Table(title="Built-in rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Role", style="white")

    for kind in RuleKind:
        if kind not in EVALUATORS and kind is not RuleKind.CUSTOM:
            continue
        if kind is RuleKind.CUSTOM:
            role = "modifier, validator"
        elif kind in modifier_kinds:
            role = "modifier"
        else:
            role = "validator"
        table.add_row(kind.value, role)

    console.print(table)


if __name__ == "__main__":
    app()
