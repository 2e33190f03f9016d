"""
Sentinel objects used by the describe engine.

All sentinels use identity checks (using 'is') rather than equality checks.

Sentinels:
    UNDEFINED: A value that was never assigned, distinct from None ("null")
    RESTRICTED: Stands in for a property whose value cannot be read reflectively

Example:
    >>> from object_describe import describe, UNDEFINED
    >>> describe(UNDEFINED).kind
    'undefined'
"""

from typing import Any, Final

__all__ = [
    'UNDEFINED',
    'RESTRICTED',
    'UndefinedType',
    'RestrictedType',
    'is_sentinel',
]


# Base Sentinel --------------------------------------------------------------------------------------------------------

class _SentinelBase:
    """
    Base class for all sentinel objects.

    Sentinels are singleton objects optimized for identity checks.
    They provide clean representations and consistent behavior.
    """
    __slots__ = ('_name',)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        """Returns a clean string representation for debugging."""
        return f'<{self._name}>'

    def __eq__(self, other: Any) -> bool:
        """Ensures identity-based comparison."""
        return self is other

    def __hash__(self) -> int:
        """Returns a hash based on object identity."""
        return id(self)

    def __bool__(self) -> bool:
        """Returns False (sentinels are falsy)."""
        return False

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


# Sentinel Types -----------------------------------------------------------------------------------------------------

class UndefinedType(_SentinelBase):
    """
    Sentinel type for UNDEFINED.

    Marks a value that was never assigned. The classifier reports it as "undefined",
    while None is reported as "null".
    """
    _instance: 'UndefinedType | None' = None

    def __new__(cls) -> 'UndefinedType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("UNDEFINED")


class RestrictedType(_SentinelBase):
    """
    Sentinel type for RESTRICTED.

    Substituted for a property value when reading the property raises AttributeError although
    the name is declared on the owner, e.g. ``type.__abstractmethods__``.
    The property stays in the report with this value instead of being dropped.
    """
    __type_tag__ = "restricted"

    _instance: 'RestrictedType | None' = None

    def __new__(cls) -> 'RestrictedType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("RESTRICTED")


# Sentinel Objects -----------------------------------------------------------------------------------------------------

UNDEFINED: Final[UndefinedType] = UndefinedType()
"""
Sentinel representing a value that was never assigned.

Use with identity check: `if value is UNDEFINED:`
"""

RESTRICTED: Final[RestrictedType] = RestrictedType()
"""
Sentinel standing in for a reflectively unreadable property value.
"""


# Helper Functions -----------------------------------------------------------------------------------------------------

def is_sentinel(value: Any) -> bool:
    """Return True if value is one of the describe sentinels."""
    return issubclass(type(value), _SentinelBase)
