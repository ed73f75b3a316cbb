"""Type declarations fed to the reflector.

This is the normalized form of a set of Go-style type declarations, produced
either by the declaration parser or loaded from a JSON manifest.
"""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin

from .errors import DuplicateTypeError


@dataclass
class TypeRef(DataClassJsonMixin):
    """Reference to a type as written in a declaration.

    kind is one of:
    - "basic": a predeclared scalar such as uint16 or byte, named by name
    - "named": a declared type, named by name
    - "slice": a []elem slice
    - "struct": an inline struct literal with fields
    """

    kind: str
    name: str | None = None
    elem: "TypeRef | None" = None
    fields: "list[FieldDecl] | None" = None

    def __str__(self) -> str:
        if self.kind == "slice":
            return f"[]{self.elem}"
        if self.kind == "struct":
            return "struct{...}"
        return str(self.name)


@dataclass
class FieldDecl(DataClassJsonMixin):
    """A struct field: its name, declared type and raw tag text."""

    name: str
    type: TypeRef
    tag: str | None = None


@dataclass
class TypeDecl(DataClassJsonMixin):
    """A named type declaration, e.g. `type foo struct {...}`."""

    name: str
    type: TypeRef


@dataclass
class Declarations(DataClassJsonMixin):
    """A set of named type declarations."""

    types: list[TypeDecl] = field(default_factory=list)

    def lookup(self, name: str) -> TypeDecl | None:
        """Find a declared type by name."""
        for decl in self.types:
            if decl.name == name:
                return decl
        return None

    def merge(self, other: "Declarations") -> "Declarations":
        """Combine two sets of declarations, rejecting duplicate names."""
        merged = Declarations(types=list(self.types))
        for decl in other.types:
            if merged.lookup(decl.name) is not None:
                raise DuplicateTypeError(f"type {decl.name} is declared more than once")
            merged.types.append(decl)
        return merged


# Bit widths of the unsigned integers that map to fixed-width wire fields.
# byte is an alias of uint8.
UINT_WIDTHS: dict[str, int] = {
    "byte": 8,
    "uint8": 8,
    "uint16": 16,
    "uint24": 24,
    "uint32": 32,
    "uint48": 48,
    "uint64": 64,
}

BASIC_TYPES = frozenset(
    [
        *UINT_WIDTHS,
        "bool",
        "string",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uintptr",
        "rune",
        "float32",
        "float64",
        "complex64",
        "complex128",
    ]
)


def is_basic(name: str) -> bool:
    """Check if a name refers to a predeclared scalar type."""
    return name in BASIC_TYPES
