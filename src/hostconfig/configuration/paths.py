"""
Configuration key paths.

Keys are flat strings whose segments are joined by ``KEY_DELIMITER``.
"""

import functools
import re
from typing import Optional

KEY_DELIMITER = ":"

_INT_SEGMENT = re.compile(r"[+-]?\d+")


def combine(*segments: str) -> str:
    """Join path segments with the key delimiter."""
    return KEY_DELIMITER.join(segments)


def get_section_key(path: Optional[str]) -> Optional[str]:
    """Return the last segment of ``path`` ("a:b:c" -> "c")."""
    if not path:
        return path
    return path.rsplit(KEY_DELIMITER, 1)[-1]


def normalize_key(key: str) -> str:
    """Case-insensitive lookup form of a key."""
    return key.casefold()


def _as_int(segment: str) -> Optional[int]:
    if _INT_SEGMENT.fullmatch(segment):
        return int(segment)
    return None


def compare_keys(left: str, right: str) -> int:
    """
    Order keys segment by segment.

    Integer segments compare numerically and sort before text segments, so
    array-like children come out as 0, 1, 2, 10 rather than 0, 1, 10, 2.
    Text segments compare case-insensitively. When one key is a prefix of the
    other, the shorter one sorts first.
    """
    left_parts = [p for p in left.split(KEY_DELIMITER) if p]
    right_parts = [p for p in right.split(KEY_DELIMITER) if p]

    for left_part, right_part in zip(left_parts, right_parts):
        left_int = _as_int(left_part)
        right_int = _as_int(right_part)

        if left_int is not None and right_int is not None:
            result = (left_int > right_int) - (left_int < right_int)
        elif left_int is not None:
            result = -1
        elif right_int is not None:
            result = 1
        else:
            a, b = normalize_key(left_part), normalize_key(right_part)
            result = (a > b) - (a < b)

        if result:
            return result

    return len(left_parts) - len(right_parts)


key_sort_key = functools.cmp_to_key(compare_keys)
