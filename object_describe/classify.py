"""
Type classification and capability checks for arbitrary runtime values.

The classifier never trusts a value's own attribute machinery: namespaces are read
through ``object.__getattribute__`` and class metadata through ``type.__getattribute__``,
so proxies with a hostile ``__getattribute__`` are still classified.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import datetime
import enum
import logging
import numbers
import re
import types

from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .sentinels import UNDEFINED, is_sentinel

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

FUNCTION_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.WrapperDescriptorType,
    types.MethodWrapperType,
    types.MethodDescriptorType,
    types.ClassMethodDescriptorType,
)

PRIMITIVE_KINDS = frozenset({
    "undefined",
    "null",
    "boolean",
    "number",
    "string",
    "bytes",
    "function",
})

TYPE_TAG = "__type_tag__"

_STRUCTURAL_REPR = re.compile(r"^<(?:.+\.)?([^.\s<>]+) object at")


# Methods --------------------------------------------------------------------------------------------------------------

def classify(value: Any) -> str:
    """
    Return the semantic kind of any value.

    Primitive kinds are "undefined", "null", "boolean", "number", "string", "bytes"
    and "function". Every other value is named by, in order of precedence:

    - a non-empty ``__type_tag__`` string declared on the value itself or on its
      immediate prototype (never inherited from further up);
    - the constructor name, ``type(value).__name__``, or the class's own ``__name__``
      when the value is a class;
    - the structural tag parsed from ``object.__repr__(value)``;
    - "object".

    Never raises.

    Examples:
        >>> classify(None)
        'null'
        >>> classify([1, 2])
        'list'
        >>> classify(int)
        'int'
    """
    try:
        return _classify(value)
    except Exception as exc:
        logger.debug("classify fell back to 'object' after %s", type(exc).__name__)
        return "object"


def is_array_like(value: Any) -> bool:
    """
    Return True for indexable, sized, non-text values that are not mappings.
    """
    cls = type(value)
    if issubclass(cls, (str, bytes, bytearray)):
        return False
    if issubclass(cls, abc.Sequence):
        return True
    if issubclass(cls, abc.Mapping):
        return False
    return _has_type_attr(cls, "__len__") and _has_type_attr(cls, "__getitem__")


def is_class(value: Any) -> bool:
    """Return True if value is a class, without consulting value.__class__."""
    return issubclass(type(value), type)


def is_date_like(value: Any) -> bool:
    """Return True for date, datetime and time instances."""
    return issubclass(type(value), (datetime.date, datetime.time))


def is_function(value: Any) -> bool:
    """Return True for functions, lambdas, bound methods, builtins and slot/method descriptors."""
    return issubclass(type(value), FUNCTION_TYPES)


def is_iterable(value: Any) -> bool:
    """
    Return True if the value's type implements the iteration protocol.

    Strings and bytes are iterable in Python, but are reported as not iterable here:
    they are primitives and their characters are never worth sampling.
    """
    if value is None or issubclass(type(value), (str, bytes)):
        return False
    return _has_type_attr(type(value), "__iter__", callable_only=True)


def is_iterator(value: Any) -> bool:
    """Return True if the value's type implements ``__next__``."""
    if value is None:
        return False
    return _has_type_attr(type(value), "__next__", callable_only=True)


def is_primitive_or_null(value: Any) -> bool:
    """
    A pragmatic, not strictly correct interpretation of "primitive".

    Functions and date-like values count as primitives, as do the describe sentinels.
    This is the only definition of "primitive" the engine uses.
    """
    if is_sentinel(value) or is_date_like(value):
        return True
    return classify(value) in PRIMITIVE_KINDS


def own_namespace(obj: Any) -> abc.Mapping | None:
    """
    Return the object's own attribute namespace, or None if it has none.

    Reads ``__dict__`` through ``object.__getattribute__`` so a custom
    ``__getattribute__`` on the object is bypassed.
    """
    try:
        namespace = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        return None
    if isinstance(namespace, abc.Mapping):
        return namespace
    return None


def prototype_of(value: Any, mro_owner: type | None = None) -> type | None:
    """
    Return the prototype of a value.

    The prototype of an instance is its type. The prototype of a class is the class
    that follows it in the method resolution order of ``mro_owner`` (the class itself
    by default), so a chain started from a derived class visits every base exactly
    once in MRO order. ``object`` has no prototype.

    Examples:
        >>> prototype_of(1)
        <class 'int'>
        >>> prototype_of(bool)
        <class 'int'>
        >>> prototype_of(object) is None
        True
    """
    if not is_class(value):
        return type(value)

    for owner in (mro_owner, value):
        if owner is None:
            continue
        mro = type.__getattribute__(owner, "__mro__")
        for index, cls in enumerate(mro):
            if cls is value:
                return mro[index + 1] if index + 1 < len(mro) else None
    return None


# Private Methods ------------------------------------------------------------------------------------------------------

def _classify(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"

    cls = type(value)
    if not issubclass(cls, enum.Enum):
        if issubclass(cls, bool):
            return "boolean"
        if issubclass(cls, numbers.Number):
            return "number"
        if issubclass(cls, str):
            return "string"
        if issubclass(cls, bytes):
            return "bytes"
    if is_function(value):
        return "function"

    tag = _type_tag(value)
    if tag:
        return tag

    if is_class(value):
        name = type.__getattribute__(value, "__name__")
    else:
        name = cls.__name__
    if isinstance(name, str) and name:
        return name

    match = _STRUCTURAL_REPR.match(object.__repr__(value))
    if match:
        return match.group(1)
    return "object"


def _has_type_attr(cls: type, name: str, callable_only: bool = False) -> bool:
    try:
        attr = getattr(cls, name)
    except Exception:
        return False
    return callable(attr) if callable_only else True


def _type_tag(value: Any) -> str | None:
    """
    Look up ``__type_tag__`` on the value and its immediate prototype only.
    """
    for owner in (value, prototype_of(value)):
        if owner is None:
            continue
        namespace = own_namespace(owner)
        if namespace is None or TYPE_TAG not in namespace:
            continue
        tag = namespace[TYPE_TAG]
        if hasattr(type(tag), "__get__"):
            # A property or other descriptor computing the tag per instance
            try:
                tag = getattr(value, TYPE_TAG)
            except Exception:
                return None
        if isinstance(tag, str) and tag:
            return tag
        return None
    return None
