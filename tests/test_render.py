#
# Object Describe - Render Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from object_describe.buckets import Bucket, BucketedSample
from object_describe.describe import Description, PropertyDescription, describe
from object_describe.render import escape, render_html, render_object, render_property
from object_describe.sentinels import RESTRICTED
from object_describe.serialize import parse_signature


# Local Classes & Methods ----------------------------------------------------------------------------------------------

class Widget:
    def __init__(self):
        self.label = "<b>bold</b>"

    @property
    def size(self):
        return 1

    def __str__(self):
        return "Widget & <co>"


class Base:
    def m(self):
        return None


class Derived(Base):
    def m(self):
        return None


class Leaf(Derived):
    def m(self):
        return None


def make_property(**kwargs) -> PropertyDescription:
    fields = dict(name="p", kind="string", enumerable=True, configurable=True, declared_on="Owner",
                  value='"v"', is_primitive=True)
    fields.update(kwargs)
    return PropertyDescription(**fields)


# Tests ----------------------------------------------------------------------------------------------------------------

class TestEscape:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            pytest.param("<a>", "&lt;a&gt;", id="angle"),
            pytest.param("a & b", "a &amp; b", id="amp"),
            pytest.param('"q"', "&quot;q&quot;", id="quote"),
            pytest.param(RESTRICTED, "&lt;RESTRICTED&gt;", id="non-str"),
        ],
    )
    def test_escape(self, text, expected):
        """HTML special characters are escaped."""
        assert escape(text) == expected


class TestRenderHtml:
    def test_page(self):
        """A complete page with the stylesheet link and escaped content."""
        page = render_html(describe(Widget()))
        assert page.startswith("<!DOCTYPE html>")
        assert '<link rel="stylesheet" href="object-describe.css">' in page
        assert "<title>Widget description</title>" in page
        assert "&lt;b&gt;bold&lt;/b&gt;" in page
        assert "Widget &amp; &lt;co&gt;" in page
        assert "<b>bold</b>" not in page

    def test_no_stylesheet(self):
        """The stylesheet link can be left out."""
        assert "<link" not in render_html(describe(1), stylesheet=None)

    def test_rejects_non_description(self):
        """Only Description trees are rendered."""
        with pytest.raises(TypeError, match=r"Description"):
            render_html({"kind": "dict"})

    def test_prototype_and_accessors(self):
        """Prototype blocks and accessor rows are rendered."""
        page = render_html(describe(Widget()))
        assert 'class="object toggleable prototype toggle-none"' in page
        assert '<div class="getter is-function"> get ' in page
        assert "toggleable toggle-none" in page

    def test_overridden(self):
        """Overridden properties carry the class and a title naming the override."""
        page = render_html(describe(Derived()))
        assert "overridden" in page
        assert 'title="Base#m overridden by Derived"' in page

    def test_overridden_names_winner(self):
        """The title names the most-derived override, the one attribute lookup finds."""
        page = render_html(describe(Leaf()))
        assert 'title="Base#m overridden by Leaf"' in page
        assert 'title="Derived#m overridden by Leaf"' in page

    def test_iterables_and_truncation(self):
        """Buckets are labelled by bounds and truncation is marked."""
        page = render_html(describe(list(range(60))))
        assert '<span class="name">Iterables</span>' in page
        assert '<span class="name">0–9</span>' in page
        assert '<span class="name">40–49</span>' in page
        assert '<div class="truncated">…</div>' in page

    def test_circular(self):
        """Circular references render as text."""
        class Node:
            pass

        node = Node()
        node.self = node
        page = render_html(describe(node))
        assert '<span class="value circular">Circular: </span>' in page

    def test_restricted(self):
        """RESTRICTED values are rendered escaped."""
        html = render_property(make_property(value=RESTRICTED, kind="restricted"), "Owner")
        assert "&lt;RESTRICTED&gt;" in html


class TestRenderFragments:
    def test_primitive_row(self):
        """Primitive descriptions render as a single property row."""
        html = render_object(Description(kind="number", is_primitive=True, value="1"), "0")
        assert html == ('<div class="property is-number"><span class="name" title="number">0</span>'
                        '<span class="is">number</span><span class="value">1</span></div>')

    def test_property_flags(self):
        """Flags become CSS classes."""
        html = render_property(make_property(enumerable=False, configurable=False), "Owner")
        assert 'class="property is-string"' in html
        assert 'title="Owner#p"' in html

    def test_missing_optional_fields(self):
        """A bare composite description renders without properties, sample or prototype."""
        html = render_object(Description(kind="thing", summary=None))
        assert '<span class="is is-thing">thing</span>' in html
        assert "properties" not in html

    def test_kind_escaped_in_class(self):
        """Kinds from custom tags cannot break out of attributes."""
        html = render_object(Description(kind='x" onclick="y', is_primitive=True, value="1"))
        assert 'onclick="y' not in html

    def test_setter_only(self):
        """Accessors may lack a getter."""
        def setter(self, value):
            pass

        html = render_property(make_property(setter_signature=parse_signature(setter), value=""), "Owner")
        assert "set " in html
        assert "getter" not in html

    def test_raw_bucket_items(self):
        """Items that are not descriptions are rendered as escaped text."""
        sample = BucketedSample(buckets=(Bucket(0, 0, ("<x>",)),), truncated=False)
        html = render_object(Description(kind="list", summary="", iterable_sample=sample))
        assert "&lt;x&gt;" in html
