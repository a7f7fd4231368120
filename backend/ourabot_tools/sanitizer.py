from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

_SEQUENCE_TYPES = (list, tuple)


def remove_string_fields_and_arrays(record: MutableMapping[str, Any]) -> None:
    """Prune string and sequence values from ``record`` in place.

    Nested mappings are kept and pruned recursively. Numbers, booleans and
    ``None`` are left untouched.
    """
    for key in list(record.keys()):
        value = record[key]
        # Sequences go first so they are dropped, never walked.
        if isinstance(value, _SEQUENCE_TYPES):
            del record[key]
        elif isinstance(value, MutableMapping):
            remove_string_fields_and_arrays(value)
        elif isinstance(value, str):
            del record[key]


def is_sanitized(record: Mapping[str, Any]) -> bool:
    for value in record.values():
        if isinstance(value, (str, *_SEQUENCE_TYPES)):
            return False
        if isinstance(value, Mapping) and not is_sanitized(value):
            return False
    return True
