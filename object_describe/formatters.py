"""
Formatting helpers for exception messages.

Type-aware formatters used across the package to build readable, robust error
messages. They handle broken __repr__ methods and very long representations gracefully.
"""

# Standard library -----------------------------------------------------------------------------------------------------

from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------

def fmt_type(obj: Any) -> str:
    """Format type information for exception messages.

    Args:
        obj: Any Python object or type to extract type information from.

    Returns:
        Formatted type string like "<int>" or "<MyClass>".

    Examples:
        >>> fmt_type(42)
        '<int>'
        >>> fmt_type(int)
        '<int>'
    """
    return f"<{type_name(obj)}>"


def fmt_value(obj: Any, *, max_repr: int = 120, ellipsis: str = "...") -> str:
    """
    Format a single value as a type-value pair for exception messages.

    Args:
        obj: Any Python object to format.
        max_repr: Maximum length of the value's repr before truncation.
        ellipsis: Truncation token appended to shortened reprs.

    Returns:
        Formatted string like "<int: 42>" or "<str: 'hello'>".

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
        >>> fmt_value("hello world", max_repr=5)
        "<str: 'hell...>"
    """
    repr_ = _safe_repr(obj)
    if max_repr > 0 and len(repr_) > max_repr:
        repr_ = repr_[:max_repr] + ellipsis
    return f"<{type(obj).__name__}: {repr_}>"


def type_name(obj: Any) -> str:
    """
    Get the class name of an object or a class.

    Examples:
        >>> type_name(10)
        'int'
        >>> type_name(int)
        'int'
    """
    cls = obj if issubclass(type(obj), type) else type(obj)
    return cls.__name__


# Private Methods ------------------------------------------------------------------------------------------------------

def _safe_repr(obj) -> str:
    """
    Defensive repr() call - handle broken __repr__ methods gracefully
    """
    try:
        repr_ = repr(obj)
    except Exception as e:
        # Fallback for broken __repr__: show type and exception info
        repr_ = f"<{type(obj).__name__} object (repr failed: {type(e).__name__})>"
    return repr_
