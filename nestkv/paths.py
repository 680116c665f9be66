"""Dot-path helpers for addressing values nested under a root key.

A dot-path like ``app.ui.theme`` splits into the root key ``app`` (the
literal row key) and the sub-path ``["ui", "theme"]``, which is walked
through nested dicts of the decoded root value.

Only dicts are traversed. Any other node on the way (list, scalar, None)
makes the path unresolvable for reads, is replaced by a fresh dict on
writes, and leaves the tree untouched on deletes.
"""

import copy
from typing import Any, Dict, List, Optional, Tuple, Union

SEPARATOR = "."

Value = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

# Returned by get_path when a path does not resolve. Distinct from None,
# which is a legitimate stored value.
MISSING = object()


def classify(key: str) -> Tuple[bool, str]:
    """Classify a key as root or nested.

    Returns:
        (is_root, root) where root is the text before the first separator
    """
    root, sep, _ = key.partition(SEPARATOR)
    return not sep, root


def split_path(key: str) -> Tuple[str, List[str]]:
    """Split a dot-path into its root key and remaining segments."""
    root, *segments = key.split(SEPARATOR)
    return root, segments


def get_path(value: Value, segments: List[str]) -> Any:
    """Walk segments through nested dicts.

    Returns:
        The located sub-value, or MISSING if any segment is absent or a
        node on the way is not a dict
    """
    current = value
    for segment in segments:
        if not isinstance(current, dict) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def set_path(value: Optional[Value], segments: List[str], leaf: Value) -> Value:
    """Return a copy of value with leaf placed at segments.

    Intermediate dicts are created as needed. Siblings of every dict on
    the path are preserved. A non-dict node in the way, including the
    root itself, is replaced by a new dict and its previous content is
    discarded: writing ``x`` under a list ``[1, 2]`` leaves ``{"x": ...}``.
    """
    if not segments:
        return leaf

    result = copy.deepcopy(value) if isinstance(value, dict) else {}
    current = result
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = leaf
    return result


def forget_path(value: Value, segments: List[str]) -> Value:
    """Return a copy of value with the subtree at segments removed.

    A path that does not resolve leaves the value unchanged. Emptied
    parent dicts are kept.
    """
    if not segments or not isinstance(value, dict):
        return value

    result = copy.deepcopy(value)
    parent = get_path(result, segments[:-1])
    if isinstance(parent, dict):
        parent.pop(segments[-1], None)
    return result
