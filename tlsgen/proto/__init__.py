"""Runtime support for generated tlsgen decoders."""

from .errors import MalformedInputError as MalformedInputError
from .reader import Reader as Reader
