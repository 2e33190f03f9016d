"""
Recursive description of arbitrary runtime values.

``describe()`` walks a value's own properties, its prototype chain (the instance's type,
then the classes of the MRO) and a bounded sample of its iterable contents. The walk
always terminates: cycles are detected by identity along the current path and iterables
are only ever sampled. Wide object graphs such as modules can still be large; cap them
with ``DescribeOptions.max_depth``.

See Also:
    :mod:`~.render`: HTML presentation of a Description tree.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import dataclasses
import inspect
import logging
import re

from dataclasses import dataclass
from typing import Any, Iterable, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .buckets import BucketedSample, sample
from .classify import (
    classify,
    is_array_like,
    is_class,
    is_iterable,
    is_iterator,
    is_primitive_or_null,
    own_namespace,
    prototype_of,
)
from .formatters import fmt_type, fmt_value
from .meta import MetaMixin
from .sentinels import RESTRICTED
from .serialize import ParsedSignature, SignatureParseError, parse_signature, serialize

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

DEFAULT_IGNORED_TYPES: tuple = (object,)

_HEAPTYPE = 1 << 9
_IMMUTABLETYPE = 1 << 8

_NUMERIC_NAME = re.compile(r"\d+")


# Classes --------------------------------------------------------------------------------------------------------------

class CircularReference:
    """
    Stands in for a property value that is already on the traversal path.

    Holds a back-reference to the value instead of describing it again.
    """
    __slots__ = ("_reference",)

    def __init__(self, reference: Any) -> None:
        self._reference = reference

    @property
    def reference(self) -> Any:
        return self._reference

    def __repr__(self) -> str:
        return f"CircularReference({self})"

    def __str__(self) -> str:
        return "Circular: " + serialize(self._reference)


@dataclass(frozen=True)
class DescribeOptions:
    """
    Configuration of a describe() call.

    Attributes:
        truncate_at: Maximum length of serialized strings and summaries.
        bucket_size: Number of sampled items per bucket.
        max_total: Maximum number of sampled items per iterable.
        ignored_types: Prototypes that are not described. Entries are types, matched by
            identity, or kind strings, matched against classify() of the prototype.
        max_depth: Number of nesting levels that are expanded; composites at that depth or
            deeper get a summary-only description. None means no limit, 0 summarizes the
            root itself. Prototype descriptions stay at the depth of the value they belong to.
    """
    truncate_at: int = 100
    bucket_size: int = 10
    max_total: int = 50
    ignored_types: tuple = DEFAULT_IGNORED_TYPES
    max_depth: int | None = None

    def __post_init__(self) -> None:
        """Validate limits and normalize ignored_types to a tuple."""
        for name in ("truncate_at", "bucket_size", "max_total"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int):
                raise TypeError(f"DescribeOptions.{name} must be an int, got {fmt_type(val)}")
        for name in ("truncate_at", "bucket_size"):
            val = getattr(self, name)
            if val < 1:
                raise ValueError(f"DescribeOptions.{name} must be >=1, but got {fmt_value(val)}")
        if self.max_total < 0:
            raise ValueError(f"DescribeOptions.max_total must be >=0, but got {fmt_value(self.max_total)}")
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise TypeError(f"DescribeOptions.max_depth must be an int or None, "
                                f"got {fmt_type(self.max_depth)}")
            if self.max_depth < 0:
                raise ValueError(f"DescribeOptions.max_depth must be >=0, but got {fmt_value(self.max_depth)}")

        ignored = self.ignored_types
        if ignored is None:
            ignored = ()
        elif isinstance(ignored, (str, type)):
            ignored = (ignored,)
        elif not isinstance(ignored, abc.Iterable):
            raise TypeError(f"DescribeOptions.ignored_types must be an iterable of types or str, "
                            f"but got {fmt_type(ignored)}")
        ignored = tuple(ignored)
        for item in ignored:
            if not isinstance(item, (str, type)):
                raise TypeError(f"DescribeOptions.ignored_types items must be types or str, "
                                f"but found {fmt_value(item)}")
        # Use object.__setattr__ to bypass frozen restriction
        object.__setattr__(self, "ignored_types", ignored)

    @classmethod
    def debug_options(cls) -> "DescribeOptions":
        """Small samples, short strings and shallow nesting, for quick console inspection."""
        return cls(truncate_at=40, bucket_size=5, max_total=10, max_depth=2)

    @classmethod
    def full_options(cls) -> "DescribeOptions":
        """Describe every prototype, including object."""
        return cls(ignored_types=())

    def is_ignored(self, prototype: Any) -> bool:
        """Whether prototype matches an ignored type (by identity) or an ignored kind."""
        for item in self.ignored_types:
            if isinstance(item, str):
                if classify(prototype) == item:
                    return True
            elif prototype is item:
                return True
        return False


@dataclass(frozen=True)
class PropertyDescription(MetaMixin):
    """
    One own property of a described value.

    Attributes:
        name: Property name; non-str keys are stringified with repr().
        kind: Kind of the property's value.
        enumerable: Whether the name is public, i.e. does not start with an underscore.
        configurable: Whether the property can be reassigned or deleted.
        declared_on: Kind of the object owning the property.
        value: Serialized string for primitives and accessors, RESTRICTED for unreadable
            properties, a CircularReference for values already on the path, and a nested
            Description otherwise.
        overridden_by: Kinds of objects closer to the origin that redeclare the name, the origin first,
            so the first entry is the declaration that wins attribute lookup.
        getter_signature: Accessor getter, if any.
        setter_signature: Accessor setter, if any.
        is_primitive: Whether the value is primitive.
        is_circular: Whether the value is a CircularReference.
    """
    name: str
    kind: str
    enumerable: bool
    configurable: bool
    declared_on: str
    value: Any
    overridden_by: tuple[str, ...] = ()
    getter_signature: ParsedSignature | None = None
    setter_signature: ParsedSignature | None = None
    is_primitive: bool = False
    is_circular: bool = False

    @property
    def is_accessor(self) -> bool:
        return self.getter_signature is not None or self.setter_signature is not None

    def to_dict(self, include_none_attrs: bool = False) -> dict[str, Any]:
        dict_ = super().to_dict(include_none_attrs=include_none_attrs)
        if not self.overridden_by:
            dict_.pop("overriddenBy", None)
        return dict_


@dataclass(frozen=True)
class Description(MetaMixin):
    """
    Report of one described value.

    Attributes:
        kind: Semantic type name, see classify().
        is_primitive: Whether the value is primitive.
        value: Serialized value, present iff primitive.
        summary: Best-effort, non-recursive serialization, present iff composite.
        is_iterable: Whether the value implements the iteration protocol.
        is_iterator: Whether the value implements __next__.
        properties: Own properties, present iff composite and not circular.
        iterable_sample: Described sample of the iterable contents.
        prototype_description: Description of the prototype, unless absent or ignored.
        is_circular: Whether this stands in for a value already on the traversal path.
    """
    kind: str
    is_primitive: bool = False
    value: Any = None
    summary: str | None = None
    is_iterable: bool = False
    is_iterator: bool = False
    properties: tuple[PropertyDescription, ...] | None = None
    iterable_sample: BucketedSample | None = None
    prototype_description: "Description | None" = None
    is_circular: bool = False

    def chain(self) -> Iterator["Description"]:
        """Yield this description and then its prototype descriptions, nearest first."""
        description = self
        while description is not None:
            yield description
            description = description.prototype_description

    def find_property(self, name: str) -> PropertyDescription | None:
        """Return the first property called name, searching this level only."""
        for prop in self.properties or ():
            if prop.name == name:
                return prop
        return None


# Methods --------------------------------------------------------------------------------------------------------------

def describe(value: Any,
             ignored_types: Iterable[type | str] | None = None,
             *,
             options: DescribeOptions | None = None,
             ) -> Description:
    """
    Describe any value: its kind, own properties, prototype chain and iterable contents.

    Args:
        value: Any object or primitive.
        ignored_types: Prototypes not to describe, as types or kind strings. Overrides
            options.ignored_types; defaults to DEFAULT_IGNORED_TYPES.
        options: Limits and ignored types; DescribeOptions() if None.

    Returns:
        Description tree; ``Description.to_dict()`` gives JSON-ready data.

    Raises:
        TypeError: If options is not a DescribeOptions instance.
        Exception: Any non-AttributeError raised while reading a property propagates.

    Examples:
        >>> describe(42).value
        '42'
        >>> describe([1, 2]).iterable_sample.buckets[0].items[0].value
        '1'
    """
    if options is None:
        options = DescribeOptions()
    elif not isinstance(options, DescribeOptions):
        raise TypeError(f"options must be a DescribeOptions instance, but found {fmt_type(options)}")
    if ignored_types is not None:
        options = dataclasses.replace(options, ignored_types=ignored_types)
    return _describe(value, options, history=(), prototype_chain=(), depth=0)


def own_names(obj: Any) -> list[tuple[Any, str]]:
    """
    List (key, name) pairs of an object's own properties.

    Order: str keys of the attribute namespace, then its non-str keys (named by repr),
    then populated __slots__ of non-class objects.
    """
    keys = []
    namespace = own_namespace(obj)
    if namespace is not None:
        raw_keys = list(namespace.keys())
        keys.extend((key, key) for key in raw_keys if isinstance(key, str))
        keys.extend((key, repr(key)) for key in raw_keys if not isinstance(key, str))
    if not is_class(obj):
        seen = {name for _, name in keys}
        keys.extend((slot, slot) for slot in _populated_slots(obj) if slot not in seen)
    return keys


# Private Methods ------------------------------------------------------------------------------------------------------

def _describe(value: Any, opt: DescribeOptions, history: tuple, prototype_chain: tuple, depth: int) -> Description:
    kind = classify(value)

    if is_primitive_or_null(value):
        return Description(kind=kind, is_primitive=True, value=serialize(value, opt.truncate_at))

    summary = serialize(value, opt.truncate_at)
    iterable = is_iterable(value)
    iterator = is_iterator(value)

    if any(value is visited for visited in history):
        return Description(
            kind=kind,
            summary=f"Circular: {summary}",
            is_iterable=iterable,
            is_iterator=iterator,
            is_circular=True,
        )
    if opt.max_depth is not None and depth >= opt.max_depth:
        return Description(kind=kind, summary=summary, is_iterable=iterable, is_iterator=iterator)
    history = history + (value,)

    ancestors = tuple((classify(a), {name for _, name in own_names(a)}) for a in prototype_chain)
    properties = tuple(
        _describe_property(value, kind, key, name, opt, history, ancestors, depth)
        for key, name in _filtered_names(value)
    )

    iterable_sample = None
    if iterable and not any(is_iterable(a) for a in prototype_chain[1:]):
        iterable_sample = _sample(value, opt)
        if iterable_sample is not None:
            iterable_sample = iterable_sample.map(
                lambda item: _describe(item, opt, history, prototype_chain=(), depth=depth + 1)
            )

    prototype_description = None
    mro_owner = next((a for a in prototype_chain + (value,) if is_class(a)), None)
    prototype = prototype_of(value, mro_owner)
    if prototype is not None and not opt.is_ignored(prototype):
        prototype_description = _describe(prototype, opt, history, prototype_chain + (value,), depth)

    return Description(
        kind=kind,
        summary=summary,
        is_iterable=iterable,
        is_iterator=iterator,
        properties=properties,
        iterable_sample=iterable_sample,
        prototype_description=prototype_description,
    )


def _describe_property(owner: Any,
                       owner_kind: str,
                       key: Any,
                       name: str,
                       opt: DescribeOptions,
                       history: tuple,
                       ancestors: tuple,
                       depth: int,
                       ) -> PropertyDescription:
    flags = {
        "name": name,
        "enumerable": not name.startswith("_"),
        "configurable": _is_configurable(owner),
        "declared_on": owner_kind,
        "overridden_by": tuple(kind for kind, names in ancestors if name in names),
    }

    namespace = own_namespace(owner)
    raw = namespace.get(key) if namespace is not None and key in namespace else None
    fget, fset = _accessor_functions(raw) if is_class(owner) else (None, None)
    if fget is not None or fset is not None:
        summary = serialize(raw, opt.truncate_at) or classify(raw)
        return PropertyDescription(
            kind=classify(raw),
            value=summary,
            getter_signature=_signature(fget),
            setter_signature=_signature(fset),
            **flags,
        )

    value = _read_property(owner, key, namespace)
    kind = classify(value)
    if is_primitive_or_null(value):
        return PropertyDescription(kind=kind, value=serialize(value, opt.truncate_at), is_primitive=True, **flags)
    if any(value is visited for visited in history):
        return PropertyDescription(kind=kind, value=CircularReference(value), is_circular=True, **flags)
    nested = _describe(value, opt, history, prototype_chain=(), depth=depth + 1)
    return PropertyDescription(kind=kind, value=nested, **flags)


def _accessor_functions(raw: Any) -> tuple[Any, Any]:
    """Return the (fget, fset) pair of a property-like descriptor, without invoking it."""
    if raw is None or is_class(raw):
        return None, None
    try:
        fget = getattr(raw, "fget", None)
        fset = getattr(raw, "fset", None)
    except Exception:
        return None, None
    return (fget if callable(fget) else None), (fset if callable(fset) else None)


def _filtered_names(value: Any) -> list[tuple[Any, str]]:
    """Own names, without index-like names on array-like values."""
    names = own_names(value)
    if is_array_like(value):
        return [(key, name) for key, name in names if not _NUMERIC_NAME.fullmatch(name)]
    return names


def _is_configurable(owner: Any) -> bool:
    """Attributes of builtin and immutable types cannot be set or deleted."""
    if not is_class(owner):
        return True
    flags = type.__getattribute__(owner, "__flags__")
    return bool(flags & _HEAPTYPE) and not flags & _IMMUTABLETYPE


def _is_data_descriptor(cls: type, name: str) -> bool:
    """Whether cls declares name as a data descriptor (one defining __set__ or __delete__)."""
    try:
        attr = inspect.getattr_static(cls, name)
    except AttributeError:
        return False
    descriptor_type = type(attr)
    return hasattr(descriptor_type, "__set__") or hasattr(descriptor_type, "__delete__")


def _mangle(cls: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{cls.__name__.lstrip('_')}{name}"
    return name


def _populated_slots(obj: Any) -> list[str]:
    names = []
    cls = type(obj)
    for base in type.__getattribute__(cls, "__mro__"):
        namespace = type.__getattribute__(base, "__dict__")
        slots = namespace.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            attr = _mangle(base, slot)
            member = namespace.get(attr)
            if member is None or attr in names:
                continue
            try:
                member.__get__(obj, cls)
            except AttributeError:
                continue
            names.append(attr)
    return names


def _read_property(owner: Any, key: Any, namespace: abc.Mapping | None) -> Any:
    """
    Read a property value; RESTRICTED when the read raises AttributeError.

    Non-str keys are only reachable through the namespace. An instance's own entry shadowed
    by a data descriptor of its class is read from the namespace, so the descriptor is
    never invoked. Any other exception propagates.
    """
    if not isinstance(key, str):
        return namespace[key]
    if namespace is not None and key in namespace and not is_class(owner):
        if _is_data_descriptor(type(owner), key):
            return namespace[key]
    try:
        return getattr(owner, key)
    except AttributeError:
        logger.debug("restricted property %r on %s", key, fmt_type(owner))
        return RESTRICTED


def _sample(value: Any, opt: DescribeOptions) -> BucketedSample | None:
    """Sample the value's iterable contents, or None if iteration fails."""
    try:
        source = value.items() if issubclass(type(value), abc.Mapping) else value
        return sample(source, bucket_size=opt.bucket_size, max_total=opt.max_total)
    except Exception as exc:
        logger.debug("sampling %s failed: %s: %s", fmt_type(value), type(exc).__name__, exc)
        return None


def _signature(fn: Any) -> ParsedSignature | None:
    if fn is None:
        return None
    try:
        return parse_signature(fn)
    except SignatureParseError as exc:
        logger.debug("accessor signature unavailable: %s", exc)
        return None
