"""Type declaration parser using Lark."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lark import Lark, Token
from lark.exceptions import UnexpectedInput
from lark.visitors import Transformer

from .errors import DeclarationSyntaxError
from .types import Declarations, FieldDecl, TypeDecl, TypeRef, is_basic

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None


@dataclass
class _Package:
    value: str


class TreeTransformer(Transformer):
    """Transform parse tree into type declarations."""

    def start(self, args: list[Any]) -> Declarations:
        return Declarations(types=[arg for arg in args if isinstance(arg, TypeDecl)])

    def package(self, args: list[Any]) -> _Package:
        return _Package(value=str(args[0]))

    def typedecl(self, args: list[Any]) -> TypeDecl:
        return TypeDecl(name=str(args[0]), type=args[1])

    def slice(self, args: list[Any]) -> TypeRef:
        return TypeRef(kind="slice", elem=args[0])

    def struct(self, args: list[Any]) -> TypeRef:
        return TypeRef(kind="struct", fields=list(args))

    def named(self, args: list[Any]) -> TypeRef:
        name = str(args[0])
        return TypeRef(kind="basic" if is_basic(name) else "named", name=name)

    def field(self, args: list[Any]) -> FieldDecl:
        tag = None
        if len(args) == 3:
            tag = _strip_tag(args[2])
        return FieldDecl(name=str(args[0]), type=args[1], tag=tag)


def _strip_tag(token: Token) -> str:
    return str(token)[1:-1]


def _get_parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/typedecl.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, parser="lalr")
    return _g_parser


def parse(text: str) -> Declarations:
    """Parse Go-style type declarations."""
    try:
        tree = _get_parser().parse(text)
    except UnexpectedInput as err:
        raise DeclarationSyntaxError(
            f"syntax error at line {err.line}, column {err.column}:\n{err.get_context(text)}"
        ) from err

    # Duplicates are checked outside the transformer, which would wrap the error
    decls = Declarations().merge(TreeTransformer().transform(tree))
    logger.debug("parsed %d type declarations", len(decls.types))
    return decls


def parse_manifest(text: str) -> Declarations:
    """Load declarations from a JSON manifest (the Declarations.to_json() form)."""
    try:
        decls = Declarations.from_json(text)
    except (KeyError, TypeError, ValueError) as err:
        raise DeclarationSyntaxError(f"invalid manifest: {err}") from err
    return Declarations().merge(decls)


def load(path: str | Path) -> Declarations:
    """Load a declaration file; .json files are read as manifests."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    logger.debug("loading declarations from %s", path)

    try:
        if path.suffix == ".json":
            return parse_manifest(text)
        return parse(text)
    except DeclarationSyntaxError as err:
        raise DeclarationSyntaxError(f"{path}: {err}") from err


def load_all(paths: list[str] | list[Path]) -> Declarations:
    """Load and merge several declaration files."""
    decls = Declarations()
    for path in paths:
        decls = decls.merge(load(path))
    return decls
