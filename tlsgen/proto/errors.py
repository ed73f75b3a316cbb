"""Decode-time errors."""


class MalformedInputError(ValueError):
    """Raised when input bytes do not match the expected wire layout."""
