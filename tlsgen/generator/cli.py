"""Command-line interface for tlsgen code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.tree import Tree

from tlsgen.generator import python
from tlsgen.generator.errors import GenerationError
from tlsgen.generator.parser import load_all
from tlsgen.generator.reflect import reflect_all
from tlsgen.generator.schema import FixedUint, LengthPrefixedBytes, LengthPrefixedList
from tlsgen.generator.sizes import calculate_sizes

if TYPE_CHECKING:
    from tlsgen.generator.schema import Field, RecordSchema
    from tlsgen.generator.sizes import SizeInfo

logger = logging.getLogger(__name__)

_input_option = click.option(
    "--input",
    "-i",
    "input_files",
    required=True,
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Type declaration file (.json for a manifest). Repeatable.",
)
_type_option = click.option(
    "--type",
    "-t",
    "type_names",
    required=True,
    multiple=True,
    help="Record type to generate a decoder for. Repeatable.",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """tlsgen decoder generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(err: GenerationError) -> NoReturn:
    print(f"Error: {err}")
    sys.exit(1)


def _load_schemas(
    input_files: tuple[str, ...], type_names: tuple[str, ...]
) -> list[RecordSchema]:
    try:
        decls = load_all(list(input_files))
        return reflect_all(decls, list(type_names))
    except GenerationError as err:
        _fail(err)


@cli.command()
@_input_option
@_type_option
@click.option("--output", "-o", "output_file", default=None, help="Output file (default: stdout)")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="tlsgen_runtime",
    show_default=True,
    help="Import path of the runtime package used by generated code",
)
def gen(
    input_files: tuple[str, ...],
    type_names: tuple[str, ...],
    output_file: str | None,
    runtime_import: str,
) -> None:
    """Generate decoders for record types."""
    schemas = _load_schemas(input_files, type_names)
    try:
        generated_file = python.render(schemas, runtime_import=runtime_import)
    except GenerationError as err:
        _fail(err)

    if output_file is None:
        click.echo(generated_file, nl=False)
        return

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)
    logger.info("wrote %s", output_file)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="tlsgen_runtime", help="Runtime package name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content, encoding="utf-8")
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@_input_option
@_type_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_files: tuple[str, ...], type_names: tuple[str, ...], output_json: bool) -> None:
    """Display record schemas and encoded sizes."""
    schemas = _load_schemas(input_files, type_names)

    if output_json:
        _output_json(schemas)
    else:
        _output_plain(schemas)


def _field_to_dict(f: Field) -> dict[str, Any]:
    data: dict[str, Any] = {"name": f.name, "kind": f.kind.value}
    if isinstance(f, FixedUint):
        data["width"] = f.width
    elif isinstance(f, LengthPrefixedBytes):
        data["length_prefix"] = f.length_prefix
    elif isinstance(f, LengthPrefixedList):
        data["length_prefix"] = f.length_prefix
        data["elem_name"] = f.elem_name
        data["fields"] = [_field_to_dict(elem) for elem in f.fields]
    return data


def _output_json(schemas: list[RecordSchema]) -> None:
    """Output record schemas as JSON."""
    sizes = calculate_sizes(schemas)
    data: dict[str, Any] = {"records": {}}

    for schema in schemas:
        size = sizes[schema.name].size
        data["records"][schema.name] = {
            "parser": python.parser_name(schema),
            "min_size": size.min_size,
            "max_size": size.max_size,
            "kind": size.kind.value,
            "fields": [_field_to_dict(f) for f in schema.fields],
        }

    print(json.dumps(data, indent=2))


def _format_size(size: SizeInfo) -> str:
    if size.is_fixed:
        return f"{size.min_size} bytes"
    return f"{size.min_size}-{size.max_size} bytes"


def _add_fields(tree: Tree, fields: tuple[Field, ...]) -> None:
    for f in fields:
        if isinstance(f, FixedUint):
            tree.add(f"{f.name} [yellow]{f.kind}[/yellow]")
        elif isinstance(f, LengthPrefixedBytes):
            tree.add(f"{f.name} [yellow]bytes[/yellow] [dim]uint{f.length_prefix} prefix[/dim]")
        elif isinstance(f, LengthPrefixedList):
            branch = tree.add(
                f"{f.name} [yellow]{escape(f'list[{f.elem_name}]')}[/yellow] "
                f"[dim]uint{f.length_prefix} prefix[/dim]"
            )
            _add_fields(branch, f.fields)


def _output_plain(schemas: list[RecordSchema]) -> None:
    """Output record schemas using rich text formatting."""
    console = Console()
    sizes = calculate_sizes(schemas)

    for schema in schemas:
        size = sizes[schema.name].size
        tree = Tree(
            f"[bold cyan]{schema.name}[/bold cyan] "
            f"[dim]{_format_size(size)}, {python.parser_name(schema)}()[/dim]"
        )
        _add_fields(tree, schema.fields)
        console.print(tree)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
