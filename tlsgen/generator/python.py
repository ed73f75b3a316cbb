"""Python decoder generator for record schemas."""

import ast
import logging
from importlib import resources
from typing import assert_never

from jinja2 import Environment, PackageLoader

from .errors import NameConflictError
from .schema import (
    Field,
    FixedUint,
    LengthPrefixedBytes,
    LengthPrefixedList,
    RecordSchema,
)
from .util import to_snake_case

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "errors.py",
    "reader.py",
]

env = Environment(
    loader=PackageLoader("tlsgen.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

INDENT = "    "


def _member_decl(f: Field) -> str:
    """Type annotation and default value of a record member."""
    if isinstance(f, FixedUint):
        return "int = 0"
    if isinstance(f, LengthPrefixedBytes):
        return 'bytes = b""'
    if isinstance(f, LengthPrefixedList):
        return f"list[{f.elem_name}] = _field(default_factory=list)"
    assert_never(f)


def parser_name(schema: RecordSchema) -> str:
    """Name of the generated decode function for a record."""
    return f"parse_{to_snake_case(schema.name)}"


def gen_decode_fields(
    fields: tuple[Field, ...],
    reader: str = "s",
    output: str = "output",
    scope: str = "",
    indent: str = INDENT,
) -> list[str]:
    """Generate the statements that decode fields from reader into output.

    List fields read their region into a local named after the field path
    (_outer_inner) so nested loops never share a variable.
    """
    lines: list[str] = []

    for f in fields:
        if isinstance(f, FixedUint):
            lines.append(f"{indent}{output}.{f.name} = {reader}.read_uint{f.width}()")
        elif isinstance(f, LengthPrefixedBytes):
            lines.append(
                f"{indent}{output}.{f.name} = "
                f"{reader}.read_uint{f.length_prefix}_length_prefixed_bytes()"
            )
        elif isinstance(f, LengthPrefixedList):
            region = f"{scope}_{f.name}"
            single = f"single{region}"
            lines.append(
                f"{indent}{region} = {reader}.read_uint{f.length_prefix}_length_prefixed()"
            )
            lines.append(f"{indent}while not {region}.empty():")
            lines.append(f"{indent}{INDENT}{single} = {f.elem_name}()")
            lines.extend(gen_decode_fields(f.fields, region, single, region, indent + INDENT))
            lines.append(f"{indent}{INDENT}{output}.{f.name}.append({single})")
        else:
            assert_never(f)

    return lines


def collect_records(schemas: list[RecordSchema]) -> list[RecordSchema]:
    """Return every record needed by the schemas, each once, element types
    before the records that contain them."""
    records: dict[str, RecordSchema] = {}

    def visit(schema: RecordSchema) -> None:
        if schema.name in records:
            return
        for f in schema.fields:
            if isinstance(f, LengthPrefixedList):
                visit(RecordSchema(name=f.elem_name, fields=f.fields))
        records[schema.name] = schema

    for schema in schemas:
        visit(schema)
    return list(records.values())


def _unique(schemas: list[RecordSchema]) -> list[RecordSchema]:
    seen: dict[str, RecordSchema] = {}
    for schema in schemas:
        seen.setdefault(schema.name, schema)
    return list(seen.values())


def _check_names(schemas: list[RecordSchema], records: list[RecordSchema]) -> None:
    """Reject parser names that collide with each other or with a record class."""
    owners = {r.name: f"type {r.name}" for r in records}
    for schema in schemas:
        name = parser_name(schema)
        if name in owners:
            raise NameConflictError(
                f"parser {name} for type {schema.name} conflicts with {owners[name]}"
            )
        owners[name] = f"the parser for type {schema.name}"


def render(schemas: list[RecordSchema], runtime_import: str = "tlsgen_runtime") -> str:
    """Render record schemas to a Python module of decode functions."""
    schemas = _unique(schemas)
    records = collect_records(schemas)
    _check_names(schemas, records)
    exports = [r.name for r in records] + [parser_name(s) for s in schemas]

    source = template.render(
        schemas=schemas,
        records=records,
        exports=exports,
        member_decl=_member_decl,
        parser_name=parser_name,
        gen_decode_fields=lambda schema: gen_decode_fields(schema.fields),
        runtime_import=runtime_import,
    )

    try:
        ast.parse(source)
    except SyntaxError as err:
        raise AssertionError(f"generated code is invalid: {err}\n{source}") from err

    logger.debug("rendered %d parsers and %d records", len(schemas), len(records))
    return source


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("tlsgen.proto").joinpath(filename).read_text()
        result[filename] = content
    return result
