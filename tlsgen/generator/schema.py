"""Field schemas: the wire layout of a record, field by field."""

from dataclasses import dataclass
from enum import StrEnum

from .errors import MissingLengthPrefixError

# Valid bit widths for fixed integers and for length prefixes
FIXED_WIDTHS = (8, 16, 24, 32, 48, 64)
PREFIX_WIDTHS = (8, 16, 24)


class FieldKind(StrEnum):
    """Wire kind of a field."""

    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT24 = "uint24"
    UINT32 = "uint32"
    UINT48 = "uint48"
    UINT64 = "uint64"
    BYTES = "bytes"
    LIST = "list"


@dataclass(frozen=True)
class FixedUint:
    """Big-endian unsigned integer of a fixed bit width."""

    name: str
    width: int

    def __post_init__(self) -> None:
        if self.width not in FIXED_WIDTHS:
            raise ValueError(f"{self.name}: unsupported integer width {self.width}")

    @property
    def kind(self) -> FieldKind:
        return FieldKind(f"uint{self.width}")


@dataclass(frozen=True)
class LengthPrefixedBytes:
    """Byte string preceded by its length."""

    name: str
    length_prefix: int

    def __post_init__(self) -> None:
        _check_prefix(self.name, self.length_prefix)

    @property
    def kind(self) -> FieldKind:
        return FieldKind.BYTES


@dataclass(frozen=True)
class LengthPrefixedList:
    """Records packed back to back in a region preceded by its byte length.

    The element count is not transmitted; elements are decoded until the
    region is used up.
    """

    name: str
    length_prefix: int
    elem_name: str
    fields: "tuple[Field, ...]"

    def __post_init__(self) -> None:
        _check_prefix(self.name, self.length_prefix)

    @property
    def kind(self) -> FieldKind:
        return FieldKind.LIST


Field = FixedUint | LengthPrefixedBytes | LengthPrefixedList


@dataclass(frozen=True)
class RecordSchema:
    """A named record and its fields in wire order."""

    name: str
    fields: tuple[Field, ...]


def _check_prefix(name: str, length_prefix: int) -> None:
    if length_prefix == 0:
        raise MissingLengthPrefixError(f"{name} is missing a length prefix tag")
    if length_prefix not in PREFIX_WIDTHS:
        raise MissingLengthPrefixError(
            f"{name} has an invalid length prefix width {length_prefix}"
        )


def walk(fields: tuple[Field, ...]) -> list[LengthPrefixedList]:
    """Return every list field in a field tree, outermost first."""
    found: list[LengthPrefixedList] = []
    for f in fields:
        if isinstance(f, LengthPrefixedList):
            found.append(f)
            found.extend(walk(f.fields))
    return found
