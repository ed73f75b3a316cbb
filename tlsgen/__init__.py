"""tlsgen - Decoder generator for TLS-style length-prefixed records."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tlsgen")
except PackageNotFoundError:
    __version__ = "(local)"
