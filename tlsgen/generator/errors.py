"""Generation-time errors.

Every failure while loading declarations or deriving schemas is a
GenerationError. These abort the generation run; they are never raised by
generated decode code.
"""


class GenerationError(RuntimeError):
    """Raised when a type declaration cannot be turned into a decoder."""


class DeclarationSyntaxError(GenerationError):
    """Raised when a declaration file cannot be parsed."""


class DuplicateTypeError(GenerationError):
    """Raised when the same type name is declared more than once."""


class TypeNotFoundError(GenerationError):
    """Raised when a referenced type name is not declared."""


class NotARecordError(GenerationError):
    """Raised when a requested type is not a struct."""


class UnsupportedTypeError(GenerationError):
    """Raised when a field's type has no wire representation."""


class MissingLengthPrefixError(GenerationError):
    """Raised when a variable-length field has no length prefix annotation."""


class AnonymousTypeError(GenerationError):
    """Raised when a list element type is an inline struct."""


class CyclicTypeError(GenerationError):
    """Raised when a record contains itself, directly or indirectly."""


class NameConflictError(GenerationError):
    """Raised when two types would generate the same Python name."""
