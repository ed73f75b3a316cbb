"""Size calculation for record schemas."""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import assert_never

from .schema import Field, FixedUint, LengthPrefixedBytes, LengthPrefixedList, RecordSchema, walk


class SizeKind(StrEnum):
    """Classification of size characteristics."""

    FIXED = auto()  # Min == Max, no variable components
    BOUNDED = auto()  # Variable, limited by the length prefix widths


@dataclass(frozen=True)
class SizeInfo:
    """Encoded size range of a field or record."""

    min_size: int
    max_size: int
    kind: SizeKind

    @property
    def is_fixed(self) -> bool:
        return self.kind == SizeKind.FIXED


@dataclass(frozen=True)
class StructSizeInfo:
    """Complete size information for a record."""

    name: str
    size: SizeInfo


def max_prefixed_length(length_prefix: int) -> int:
    """Largest length a prefix of the given bit width can carry."""
    return (1 << length_prefix) - 1


class SizeCalculator:
    """Calculate encoded sizes of record schemas."""

    def calc_field_size(self, f: Field) -> SizeInfo:
        """Calculate size for one field."""
        if isinstance(f, FixedUint):
            size = f.width // 8
            return SizeInfo(size, size, SizeKind.FIXED)

        if isinstance(f, (LengthPrefixedBytes, LengthPrefixedList)):
            prefix = f.length_prefix // 8
            # Lists are packed into the same length-delimited region as bytes,
            # so both are bounded by what the prefix can express
            return SizeInfo(prefix, prefix + max_prefixed_length(f.length_prefix), SizeKind.BOUNDED)

        assert_never(f)

    def calc_fields_size(self, fields: tuple[Field, ...]) -> SizeInfo:
        """Calculate size for a sequence of fields."""
        total_min = 0
        total_max = 0
        overall_kind = SizeKind.FIXED

        for f in fields:
            size = self.calc_field_size(f)
            total_min += size.min_size
            total_max += size.max_size
            if size.kind == SizeKind.BOUNDED:
                overall_kind = SizeKind.BOUNDED

        return SizeInfo(total_min, total_max, overall_kind)

    def calc_record_size(self, schema: RecordSchema) -> StructSizeInfo:
        """Calculate size for a record."""
        return StructSizeInfo(schema.name, self.calc_fields_size(schema.fields))


def calculate_sizes(schemas: list[RecordSchema]) -> dict[str, StructSizeInfo]:
    """Calculate sizes for the given records and every list element record they contain."""
    calc = SizeCalculator()
    result: dict[str, StructSizeInfo] = {}

    for schema in schemas:
        result[schema.name] = calc.calc_record_size(schema)
        for lst in walk(schema.fields):
            if lst.elem_name not in result:
                result[lst.elem_name] = StructSizeInfo(
                    lst.elem_name, calc.calc_fields_size(lst.fields)
                )

    return result
