"""
HTML presentation of Description trees.

Rendering is pure: it reads a Description and returns markup, never touching the described
value. Every piece of text is escaped. The CSS class names (``object``, ``property``,
``enumerable``, ``configurable``, ``overridden``, ``toggleable``, ``toggle-none``, ...) are
the hooks for a stylesheet and a toggling script.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import html

from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .buckets import Bucket, BucketedSample
from .describe import CircularReference, Description, PropertyDescription
from .formatters import fmt_type

# Constants ------------------------------------------------------------------------------------------------------------

PROTOTYPE_LABEL = "Proto"

DEFAULT_STYLESHEET = "object-describe.css"

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
{link}</head>
<body>
{body}
</body>
</html>
"""


# Methods --------------------------------------------------------------------------------------------------------------

def escape(text: Any) -> str:
    """Escape text for HTML content and attribute values; non-str values are stringified first."""
    return html.escape(text if isinstance(text, str) else str(text), quote=True)


def render_html(description: Description, stylesheet: str | None = DEFAULT_STYLESHEET) -> str:
    """
    Render a Description as a complete HTML page.

    Args:
        description: Root of the tree returned by describe().
        stylesheet: URL of the stylesheet to link, or None for no stylesheet.

    Returns:
        HTML document as a string.

    Raises:
        TypeError: If description is not a Description.
    """
    if not isinstance(description, Description):
        raise TypeError(f"description must be a Description, but got {fmt_type(description)}")
    link = f'  <link rel="stylesheet" href="{escape(stylesheet)}">\n' if stylesheet else ""
    return _PAGE.format(
        title=escape(f"{description.kind} description"),
        link=link,
        body=render_object(description),
    )


def render_object(description: Description, name: str | None = None, *,
                  prototype: bool = False, collapsed: bool = False) -> str:
    """
    Render a Description as an HTML fragment.

    Primitive descriptions render as a single property row; composite ones as a toggleable
    block with properties, iterable sample and prototype.
    """
    if description.is_primitive:
        return _render_row(
            class_names=["property", f"is-{description.kind}"],
            name=name,
            title=description.kind,
            kind=description.kind,
            value_html=_span("value", description.value),
        )

    class_names = _classes(
        "object",
        description.properties is not None and "toggleable",
        collapsed and "toggle-none",
        prototype and "prototype toggle-none",
        description.is_iterable and "iterable",
        description.is_iterator and "iterator",
        description.is_circular and "circular",
    )
    if name is not None:
        label = _span("name", name)
    elif prototype:
        label = '<span class="name" title="Prototype">' + PROTOTYPE_LABEL + "</span>"
    else:
        label = ""

    parts = []
    if description.properties is not None:
        rows = "".join(render_property(prop, description.kind) for prop in description.properties)
        parts.append(f'<div class="properties">{rows}</div>')
    if description.iterable_sample is not None:
        parts.append(render_iterables(description.iterable_sample))
    if description.prototype_description is not None:
        parts.append(render_object(description.prototype_description, prototype=True))

    group = ' class="toggle-group"' if description.properties is not None else ""
    return (
        f'<div class="{class_names}">'
        f"{label}"
        f'<span class="is is-{escape(description.kind)}">{escape(description.kind)}</span>'
        f'<span class="summary">{escape(description.summary or "")}</span>'
        f"<div{group}>{''.join(parts)}</div>"
        f"</div>"
    )


def render_property(prop: PropertyDescription, owner_kind: str) -> str:
    """Render one property row, with accessors or a nested object as needed."""
    accessor = prop.is_accessor
    title = f"{owner_kind}#{prop.name}"
    if prop.overridden_by:
        title += f" overridden by {prop.overridden_by[0]}"

    class_names = [
        "property",
        not accessor and f"is-{prop.kind}",
        prop.enumerable and "enumerable",
        prop.configurable and "configurable",
        bool(prop.overridden_by) and "overridden",
        accessor and "toggleable toggle-none",
        prop.is_circular and "circular",
    ]
    if accessor:
        return _render_row(class_names, prop.name, title, kind=None, value_html=render_accessors(prop))
    if isinstance(prop.value, Description) and not prop.value.is_primitive:
        return f'<div class="{_classes(*class_names)}">{render_object(prop.value, prop.name)}</div>'
    return _render_row(class_names, prop.name, title, kind=prop.kind, value_html=render_value(prop.value))


def render_accessors(prop: PropertyDescription) -> str:
    """Render the getter and setter signatures of an accessor property."""
    parts = []
    if prop.getter_signature is not None:
        parts.append(f'<div class="getter is-function"> get {_span("value", prop.getter_signature)}</div>')
    if prop.setter_signature is not None:
        parts.append(f'<div class="setter is-function"> set {_span("value", prop.setter_signature)}</div>')
    return f'<div class="accessors toggle-group">{"".join(parts)}</div>'


def render_iterables(iterable_sample: BucketedSample) -> str:
    """Render a described iterable sample as toggleable buckets."""
    buckets = "".join(render_bucket(bucket) for bucket in iterable_sample.buckets)
    truncated = '<div class="truncated">…</div>' if iterable_sample.truncated else ""
    return (
        '<div class="iterables toggleable">'
        '<span class="name">Iterables</span>'
        f'<div class="buckets toggle-group">{buckets}'
        f'<div class="truncated" title="Values truncated for display">{truncated}</div>'
        "</div>"
        "</div>"
    )


def render_bucket(bucket: Bucket) -> str:
    """Render one bucket; items are labelled with their index in the original iterable."""
    items = "".join(
        f'<div class="item">{_render_item(item, str(bucket.lower_bound + index))}</div>'
        for index, item in enumerate(bucket.items)
    )
    return (
        '<div class="bucket toggleable toggle-none">'
        f'<span class="name">{bucket.lower_bound}–{bucket.upper_bound}</span>'
        f'<div class="toggle-group">{items}</div>'
        "</div>"
    )


def render_value(value: Any) -> str:
    """Render a property value: serialized text, RESTRICTED, a circular reference or a primitive Description."""
    if isinstance(value, Description):
        return render_object(value)
    if isinstance(value, CircularReference):
        return _span("value circular", value)
    return _span("value", value)


# Private Methods ------------------------------------------------------------------------------------------------------

def _classes(*names: Any) -> str:
    return escape(" ".join(name for name in names if isinstance(name, str) and name))


def _render_item(item: Any, name: str) -> str:
    if isinstance(item, Description):
        return render_object(item, name, collapsed=True)
    return _span("value", item)


def _render_row(class_names: list, name: str | None, title: str, kind: str | None, value_html: str) -> str:
    parts = []
    if name is not None:
        parts.append(f'<span class="name" title="{escape(title)}">{escape(name)}</span>')
    if kind is not None:
        parts.append(_span("is", kind))
    parts.append(value_html)
    return f'<div class="{_classes(*class_names)}">{"".join(parts)}</div>'


def _span(class_name: str, text: Any) -> str:
    return f'<span class="{class_name}">{escape("" if text is None else text)}</span>'
