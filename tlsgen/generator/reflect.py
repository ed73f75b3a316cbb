"""Derive record schemas from type declarations."""

import keyword
import logging
import re

from .errors import (
    AnonymousTypeError,
    CyclicTypeError,
    MissingLengthPrefixError,
    NotARecordError,
    TypeNotFoundError,
    UnsupportedTypeError,
)
from .schema import Field, FixedUint, LengthPrefixedBytes, LengthPrefixedList, RecordSchema
from .types import UINT_WIDTHS, Declarations, FieldDecl, TypeRef

logger = logging.getLogger(__name__)

PREFIX_TAGS = {
    "uint8prefixed": 8,
    "uint16prefixed": 16,
    "uint24prefixed": 24,
}

# Names the generated module binds or relies on; records may not reuse them
RESERVED_NAMES = frozenset(
    [
        "Reader",
        "dataclass",
        "_field",
        "annotations",
        "output",
        "s",
        "data",
        "list",
        "int",
        "bytes",
        "bytearray",
        "memoryview",
    ]
)

# Prefixes of the decode loop locals (_items, single_items)
RESERVED_PREFIXES = ("_", "single_")

# Names a record class body evaluates for its member defaults
RESERVED_MEMBER_NAMES = frozenset(["list", "_field"])

_TLS_TAG = re.compile(r'(?:^|\s)tls:"([^"]*)"')


def parse_struct_tag(tag: str | None) -> list[str]:
    """Return the comma separated options of the tls key in a struct tag."""
    if not tag:
        return []
    match = _TLS_TAG.search(tag)
    if not match:
        return []
    return match.group(1).split(",")


def get_length_prefix(tag: str | None) -> int:
    """Return the length prefix width named by a tag, or 0 if there is none."""
    for option in parse_struct_tag(tag):
        if option in PREFIX_TAGS:
            return PREFIX_TAGS[option]
    return 0


def _check_identifier(name: str, where: str | None = None) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise UnsupportedTypeError(f"{where or name}: {name!r} is not a usable Python name")


class Reflector:
    """Resolve declared types into field schemas."""

    def __init__(self, decls: Declarations):
        self.decls = decls
        self._cache: dict[str, RecordSchema] = {}

    def underlying(self, t: TypeRef) -> TypeRef:
        """Follow named types until a basic, slice or struct type is reached."""
        seen: list[str] = []
        while t.kind == "named":
            name = str(t.name)
            if name in seen:
                raise CyclicTypeError(f"type {' -> '.join([*seen, name])} refers to itself")
            seen.append(name)

            decl = self.decls.lookup(name)
            if decl is None:
                raise TypeNotFoundError(f"type {name} is not declared")
            t = decl.type
        return t

    def reflect(self, name: str) -> RecordSchema:
        """Build the schema of the named record type."""
        return self._reflect(name, [])

    def _reflect(self, name: str, stack: list[str]) -> RecordSchema:
        if name in stack:
            raise CyclicTypeError(f"record {' -> '.join([*stack, name])} contains itself")
        if name in self._cache:
            return self._cache[name]

        decl = self.decls.lookup(name)
        if decl is None:
            raise TypeNotFoundError(f"type {name} is not declared")

        t = self.underlying(decl.type)
        if t.kind != "struct":
            raise NotARecordError(f"type {name} is not a struct")

        _check_identifier(name)
        if name in RESERVED_NAMES or name.startswith(RESERVED_PREFIXES):
            raise UnsupportedTypeError(f"type name {name} is reserved in generated code")
        fields = tuple(self._field(name, f, [*stack, name]) for f in t.fields or [])
        schema = RecordSchema(name=name, fields=fields)
        self._cache[name] = schema
        logger.debug("reflected %s with %d fields", name, len(fields))
        return schema

    def _field(self, record: str, f: FieldDecl, stack: list[str]) -> Field:
        where = f"{record}.{f.name}"
        _check_identifier(f.name, where)
        if f.name in RESERVED_MEMBER_NAMES:
            raise UnsupportedTypeError(f"{where}: field name {f.name} is reserved in records")
        t = self.underlying(f.type)

        if t.kind == "basic":
            width = UINT_WIDTHS.get(str(t.name))
            if width is None:
                raise UnsupportedTypeError(f"{where}: unsupported basic type: {t.name}")
            return FixedUint(name=f.name, width=width)

        if t.kind == "struct":
            raise UnsupportedTypeError(
                f"{where}: struct fields are not supported, use a length prefixed list"
            )

        if t.kind != "slice" or t.elem is None:
            raise UnsupportedTypeError(f"{where}: unsupported type: {f.type}")

        elem = self.underlying(t.elem)
        if elem.kind == "basic":
            if UINT_WIDTHS.get(str(elem.name)) != 8:
                raise UnsupportedTypeError(f"{where}: unsupported slice element type: {t.elem}")
            return LengthPrefixedBytes(name=f.name, length_prefix=self._length_prefix(where, f))

        if elem.kind == "struct":
            if t.elem.kind != "named":
                raise AnonymousTypeError(f"{where}: anonymous slice elements are not supported")
            elem_name = str(t.elem.name)
            length_prefix = self._length_prefix(where, f)
            elem_fields = self._reflect(elem_name, stack).fields
            # An element that consumes no bytes would never empty the region
            if not elem_fields:
                raise UnsupportedTypeError(f"{where}: list element type {elem_name} has no fields")
            return LengthPrefixedList(
                name=f.name,
                length_prefix=length_prefix,
                elem_name=elem_name,
                fields=elem_fields,
            )

        raise UnsupportedTypeError(f"{where}: unsupported slice element type: {t.elem}")

    @staticmethod
    def _length_prefix(where: str, f: FieldDecl) -> int:
        length_prefix = get_length_prefix(f.tag)
        if length_prefix == 0:
            raise MissingLengthPrefixError(f"{where} is missing a length prefix tag")
        return length_prefix


def reflect(decls: Declarations, name: str) -> RecordSchema:
    """Build the schema of one record type."""
    return Reflector(decls).reflect(name)


def reflect_all(decls: Declarations, names: list[str]) -> list[RecordSchema]:
    """Build schemas for several record types, in the order given."""
    reflector = Reflector(decls)
    return [reflector.reflect(name) for name in names]
