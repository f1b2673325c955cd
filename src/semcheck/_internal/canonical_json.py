"""Canonical JSON serialization for compatibility reports.

Two runs over identical trees must serialize to identical bytes, so every
report write goes through this one function.
"""

import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Serialize a report structure to byte-stable JSON.

    Rules:
    - Sorted keys
    - Compact separators (",", ":")
    - Lists keep their order (callers sort changes before serializing)
    - Non-ASCII kept as UTF-8

    Args:
        obj: JSON-compatible object (dicts, lists, strings, ints, bools, None)

    Returns:
        Canonical JSON string
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
