"""Utility functions for code generation."""

import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case.

    Runs of capitals are kept together: hpkeKEMID -> hpke_kemid,
    TLSRecord -> tls_record.
    """
    return _WORD_BOUNDARY.sub("_", name).lower()
