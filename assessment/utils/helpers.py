"""
Utility helpers for PRE/POST assessment comparison

Value semantics shared by the diff engine and the new-user flag reader.
Stored records were written by a JavaScript client, so equality and
truthiness follow its rules rather than Python's.
"""

from typing import Any


def strictly_equal(a: Any, b: Any) -> bool:
    """
    Equality that keeps booleans apart from numbers.

    Python treats True == 1 and False == 0; stored assessments do not.
    Numbers of different kinds still compare by value (1 == 1.0).

    Examples:
        >>> strictly_equal(1, True)
        False
        >>> strictly_equal(1, 1.0)
        True
        >>> strictly_equal(None, None)
        True
    """
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def js_truthy(value: Any) -> bool:
    """
    Truthiness of a parsed JSON value as the client saw it.

    Empty lists and objects are truthy; everything else follows bool().

    Examples:
        >>> js_truthy([])
        True
        >>> js_truthy(0)
        False
        >>> js_truthy("")
        False
    """
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def reject_json_constant(name: str) -> Any:
    """parse_constant hook: NaN/Infinity are not JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")
