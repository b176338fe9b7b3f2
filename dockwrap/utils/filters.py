"""Filter helpers for list and prune calls."""

from typing import Any, Dict, Optional


def merge_filters(*maps: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Merge filter mappings left to right.

    Values may be single strings or lists; the SDK encodes both. Returns
    None when nothing was given so the engine applies no filter at all.
    """
    merged: Dict[str, Any] = {}
    for m in maps:
        if m:
            merged.update(m)
    return merged or None
