"""
Structured, JSON-ready descriptions of arbitrary Python values, with HTML rendering.
"""

from .buckets import Bucket, BucketedSample, sample
from .classify import classify, is_iterable, is_iterator, is_primitive_or_null, prototype_of
from .describe import (
    DEFAULT_IGNORED_TYPES,
    CircularReference,
    DescribeOptions,
    Description,
    PropertyDescription,
    describe,
)
from .render import render_html
from .sentinels import RESTRICTED, UNDEFINED
from .serialize import ParsedSignature, SignatureParseError, parse_signature, serialize

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_IGNORED_TYPES",
    "RESTRICTED",
    "UNDEFINED",
    "Bucket",
    "BucketedSample",
    "CircularReference",
    "DescribeOptions",
    "Description",
    "ParsedSignature",
    "PropertyDescription",
    "SignatureParseError",
    "classify",
    "describe",
    "is_iterable",
    "is_iterator",
    "is_primitive_or_null",
    "parse_signature",
    "prototype_of",
    "render_html",
    "sample",
    "serialize",
]
