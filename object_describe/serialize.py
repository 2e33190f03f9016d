"""
Human-oriented serialization of primitive, function and date values, and function signature parsing.

Serialization is meant for human consumption, not machine interoperability: numbers and
dates are formatted with the process locale and long strings are truncated.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections
import datetime
import decimal
import dis
import enum
import functools
import inspect
import locale
import math
import numbers
import re
import textwrap
import types

from dataclasses import dataclass
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .classify import is_class, is_function
from .formatters import fmt_type, fmt_value
from .meta import MetaMixin
from .sentinels import RESTRICTED, UNDEFINED

# Constants ------------------------------------------------------------------------------------------------------------

ELLIPSIS = "…"

NATIVE_CODE = "[native code]"

# Containers whose inherited str and repr would recurse into their items
_CONTAINER_TYPES = (
    list,
    tuple,
    dict,
    set,
    frozenset,
    bytearray,
    collections.deque,
    collections.OrderedDict,
    collections.defaultdict,
    collections.Counter,
    collections.ChainMap,
    types.MappingProxyType,
)
_CONTAINER_STRS = tuple(cls.__str__ for cls in _CONTAINER_TYPES) + (object.__str__,)
_CONTAINER_REPRS = tuple(cls.__repr__ for cls in _CONTAINER_TYPES) + (object.__repr__,)

_DEF = re.compile(r"\A[ \t]*(async[ \t]+)?def\b[ \t]*(\w*)[ \t]*\(")
_LAMBDA = re.compile(r"\blambda\b")

# Instructions the compiler places before a function body, without the body's position
_PROLOGUE_OPS = frozenset({"RESUME", "MAKE_CELL", "COPY_FREE_VARS", "RETURN_GENERATOR", "NOP"})

_OPENERS = "([{"
_CLOSERS = ")]}"


# Classes --------------------------------------------------------------------------------------------------------------

class SignatureParseError(ValueError):
    """Raised when a callable's string representation matches neither the def nor the lambda shape."""


@dataclass(frozen=True)
class ParsedSignature(MetaMixin):
    """
    Structured view of a callable's signature.

    Attributes:
        name: Function name; "<lambda>" for lambdas.
        parameters: Parameter declarations as written, including defaults and annotations.
        body: Function body text, dedented.
        is_native: Whether the source was synthesized because no Python source is available.
        is_generator: Whether calling the function returns a (sync or async) generator.
        is_lambda: Whether the lambda shape matched.
        is_async: Whether the function is a coroutine or async generator function.
        source: The string representation the signature was parsed from.
    """
    name: str
    parameters: tuple[str, ...] = ()
    body: str = ""
    is_native: bool = False
    is_generator: bool = False
    is_lambda: bool = False
    is_async: bool = False
    source: str = ""

    def __str__(self) -> str:
        return self.source


# Methods --------------------------------------------------------------------------------------------------------------

def parse_signature(fn: Any) -> ParsedSignature | None:
    """
    Parse the signature of a callable from its source text.

    The source comes from ``inspect.getsource``. When no Python source exists, e.g. builtins,
    C extensions or code created by ``exec``, a stand-in ``def name(...): [native code]``
    is synthesized from ``inspect.signature``.

    Args:
        fn: A callable, or None/UNDEFINED.

    Returns:
        ParsedSignature, or None if fn is None or UNDEFINED.

    Raises:
        TypeError: If fn is not callable.
        SignatureParseError: If the source matches neither the def nor the lambda shape,
            e.g. for a class.

    Examples:
        >>> def add(a, b=1):
        ...     return a + b
        >>> sig = parse_signature(add)
        >>> sig.name, sig.parameters
        ('add', ('a', 'b=1'))
    """
    if fn is None or fn is UNDEFINED:
        return None
    if not callable(fn):
        raise TypeError(f"fn must be callable, but got {fmt_type(fn)}")

    name = _callable_name(fn)
    source = _source_of(fn, name)
    is_generator = inspect.isgeneratorfunction(fn) or inspect.isasyncgenfunction(fn)
    is_async = inspect.iscoroutinefunction(fn) or inspect.isasyncgenfunction(fn)

    shapes = (_parse_def, _parse_lambda)
    if name == "<lambda>":
        shapes = (functools.partial(_parse_lambda, body_offset=_lambda_body_offset(fn, source)), _parse_def)

    for shape in shapes:
        parsed = shape(source)
        if parsed is None:
            continue
        return ParsedSignature(
            name=parsed["name"],
            parameters=split_parameters(parsed["parameters"]),
            body=parsed["body"],
            is_native=NATIVE_CODE in parsed["body"],
            is_generator=is_generator,
            is_lambda=parsed["is_lambda"],
            is_async=is_async or parsed["is_async"],
            source=source,
        )
    raise SignatureParseError(f"Unable to parse {fmt_value(source)}")


def serialize(value: Any, truncate_at: int = 100) -> Any:
    """
    Serialize a value as a human-readable string.

    Rules, in order:
        - RESTRICTED is returned as itself;
        - None is "null" and UNDEFINED is "undefined";
        - strings are double-quoted, and truncated with an ellipsis (and no closing quote)
          when longer than truncate_at;
        - bytes use their repr, truncated the same way;
        - booleans use str();
        - numbers are "NaN" for NaN, locale-grouped for integers and floats, str() otherwise;
        - datetimes, dates and times use the locale's %c, %x and %X formats;
        - functions use the source text of their parsed signature;
        - other values use str(), truncated, if their type customizes __str__ or __repr__,
          and "" otherwise. Builtin containers serialize to "".

    Args:
        value: Any value.
        truncate_at: Maximum length of the serialized text before truncation.

    Returns:
        Serialized string, or RESTRICTED.

    Raises:
        TypeError: If truncate_at is not an int.
        ValueError: If truncate_at is less than 1.

    Examples:
        >>> serialize("hello")
        '"hello"'
        >>> serialize(None)
        'null'
        >>> serialize([1, 2, 3])
        ''
    """
    if isinstance(truncate_at, bool) or not isinstance(truncate_at, int):
        raise TypeError(f"truncate_at must be an int, got {fmt_type(truncate_at)}")
    if truncate_at < 1:
        raise ValueError(f"truncate_at must be >=1, but got {fmt_value(truncate_at)}")

    if value is RESTRICTED:
        return RESTRICTED
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"

    cls = type(value)
    if issubclass(cls, enum.Enum):
        return _serialize_composite(value, truncate_at)
    if issubclass(cls, str):
        if len(value) > truncate_at:
            return '"' + value[:truncate_at - 1] + ELLIPSIS
        return f'"{value}"'
    if issubclass(cls, bytes):
        return truncate(repr(value), truncate_at)
    if issubclass(cls, bool):
        return str(value)
    if issubclass(cls, numbers.Number):
        return _serialize_number(value)
    if issubclass(cls, datetime.datetime):
        return value.strftime("%c")
    if issubclass(cls, datetime.date):
        return value.strftime("%x")
    if issubclass(cls, datetime.time):
        return value.strftime("%X")
    if is_function(value):
        try:
            return str(parse_signature(value))
        except SignatureParseError:
            return repr(value)
    return _serialize_composite(value, truncate_at)


def split_parameters(text: str) -> tuple[str, ...]:
    """
    Split a parameter list on top-level commas.

    Brackets, string literals and comments are respected; blank entries are dropped.

    Examples:
        >>> split_parameters("a, b: dict[str, int] = {}, *args")
        ('a', 'b: dict[str, int] = {}', '*args')
        >>> split_parameters("")
        ()
    """
    params = []
    start = 0
    for index, char, depth in _scan(text):
        if char == "," and depth == 0:
            params.append(text[start:index])
            start = index + 1
    params.append(text[start:])
    return tuple(p for p in (_strip_comments(p).strip() for p in params) if p)


def truncate(text: str, truncate_at: int) -> str:
    """Shorten text to at most truncate_at characters, ending with an ellipsis when shortened."""
    if len(text) > truncate_at:
        return text[:truncate_at - 1] + ELLIPSIS
    return text


# Private Methods ------------------------------------------------------------------------------------------------------

def _callable_name(fn: Any) -> str:
    try:
        name = getattr(fn, "__name__", None)
    except Exception:
        name = None
    if isinstance(name, str) and name:
        return name
    return type(fn).__name__


def _lambda_body_offset(fn: Any, source: str) -> int | None:
    """
    Offset in source where the lambda's own code starts on its first line.

    Taken from the positions recorded in the code object, and used to tell apart lambdas
    that share a source line.
    """
    code = getattr(fn, "__code__", None)
    if code is None or not source:
        return None
    first_line = code.co_firstlineno
    columns = [
        instr.positions.col_offset
        for instr in dis.get_instructions(code)
        if instr.opname not in _PROLOGUE_OPS
        and instr.positions is not None
        and instr.positions.lineno == first_line
        and instr.positions.col_offset is not None
    ]
    if not columns:
        return None
    try:
        raw = inspect.getsourcelines(fn)[0][0]
    except (OSError, TypeError):
        return None
    # Positions count UTF-8 bytes of the raw line; source is dedented
    column = len(raw.encode("utf-8")[:min(columns)].decode("utf-8", errors="ignore"))
    first = source.splitlines()[0]
    dedent = (len(raw) - len(raw.lstrip())) - (len(first) - len(first.lstrip()))
    return column - dedent


def _native_source(fn: Any, name: str) -> str:
    """Synthesize a stand-in source for callables without Python source."""
    try:
        signature = str(inspect.signature(fn))
    except (TypeError, ValueError):
        signature = "(...)"
    if is_class(fn):
        return f"class {name}{signature}: {NATIVE_CODE}"
    if name == "<lambda>":
        return f"lambda {signature[1:-1]}: {NATIVE_CODE}"
    return f"def {name}{signature}: {NATIVE_CODE}"


def _parse_def(source: str) -> dict | None:
    text = _skip_decorators(source)
    match = _DEF.match(text)
    if not match:
        return None
    open_paren = match.end() - 1
    close_paren = _matching_close(text, open_paren)
    if close_paren is None:
        return None
    colon = _find_top_level(text, ":", close_paren + 1)
    if colon is None:
        return None
    return {
        "name": match.group(2),
        "parameters": text[open_paren + 1:close_paren],
        "body": textwrap.dedent(text[colon + 1:].lstrip(" \t")).strip(),
        "is_lambda": False,
        "is_async": bool(match.group(1)),
    }


def _parse_lambda(source: str, body_offset: int | None = None) -> dict | None:
    candidates = []
    for match in _LAMBDA.finditer(source):
        colon = _find_top_level(source, ":", match.end())
        if colon is not None:
            candidates.append((match, colon))
    if not candidates:
        return None
    match, colon = candidates[0]
    if body_offset is not None:
        # Lambdas sharing a line: the last one whose colon precedes the body offset owns it
        preceding = [(m, c) for m, c in candidates if c < body_offset]
        if preceding:
            match, colon = preceding[-1]
    end = len(source)
    for index, char, depth in _scan(source, colon + 1):
        # The body ends at a comma, semicolon or newline at its own level, or at an unmatched bracket
        if depth < 0 or (depth == 0 and char in ",;\n"):
            end = index
            break
    return {
        "name": "<lambda>",
        "parameters": source[match.end():colon],
        "body": _strip_comments(source[colon + 1:end]).strip(),
        "is_lambda": True,
        "is_async": False,
    }


def _find_top_level(text: str, target: str, start: int) -> int | None:
    for index, char, depth in _scan(text, start):
        if char == target and depth == 0:
            return index
    return None


def _matching_close(text: str, open_index: int) -> int | None:
    for index, char, depth in _scan(text, open_index + 1):
        if depth < 0:
            return index
    return None


def _scan(text: str, start: int = 0) -> Iterator[tuple[int, str, int]]:
    """
    Yield (index, char, depth) for code characters outside string literals and comments.

    Depth counts open brackets relative to start; a closing bracket is reported at its
    outer depth, so an unmatched closer shows up with depth -1.
    """
    depth = 0
    quote = None
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "#":
            newline = text.find("\n", index)
            index = length if newline < 0 else newline
            continue
        else:
            if char in _CLOSERS:
                depth -= 1
            yield index, char, depth
            if char in _OPENERS:
                depth += 1
        index += 1


def _serialize_composite(value: Any, truncate_at: int) -> str:
    try:
        cls = type(value)
        str_impl = inspect.getattr_static(cls, "__str__")
        repr_impl = inspect.getattr_static(cls, "__repr__")
        if any(str_impl is s for s in _CONTAINER_STRS) and any(repr_impl is r for r in _CONTAINER_REPRS):
            return ""
        return truncate(str(value), truncate_at)
    except Exception:
        return ""


def _serialize_number(value: numbers.Number) -> str:
    if isinstance(value, float) and math.isnan(value):
        return "NaN"
    if isinstance(value, decimal.Decimal):
        return "NaN" if value.is_nan() else str(value)
    if isinstance(value, numbers.Integral):
        return locale.format_string("%d", value, grouping=True)
    if isinstance(value, float):
        return locale.format_string("%.15g", value, grouping=True)
    return str(value)


def _skip_decorators(source: str) -> str:
    """Drop leading decorator expressions, which may span several lines."""
    text = source
    while text.lstrip().startswith("@"):
        text = text.lstrip()
        end = _find_top_level(text, "\n", 0)
        if end is None:
            return ""
        text = text[end + 1:]
    return text


def _source_of(fn: Any, name: str) -> str:
    try:
        return textwrap.dedent(inspect.getsource(fn)).rstrip()
    except (OSError, TypeError):
        return _native_source(fn, name)


def _strip_comments(text: str) -> str:
    """Remove # comments that sit outside string literals."""
    kept = []
    quote = None
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if quote:
            if char == "\\":
                kept.append(text[index:index + 2])
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "#":
            newline = text.find("\n", index)
            index = length if newline < 0 else newline
            continue
        kept.append(char)
        index += 1
    return "".join(kept)
