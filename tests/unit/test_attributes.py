"""Unit tests for markup-sourced attribute resolution."""

import pytest

from block_parser import AttributeSchema, ResolutionFailure
from block_parser.attributes import AttributeResolver


def schema(**kwargs):
    return AttributeSchema(**kwargs)


class TestAttributeSource:
    """The "attribute" source reads an HTML attribute."""

    def test_reads_attribute_of_selected_element(self):
        resolver = AttributeResolver()
        markup = '<figure><img src="/a.jpg" alt="A cat"></figure>'

        assert resolver.resolve(schema(source="attribute", selector="img", attribute="src"), markup, 1) == "/a.jpg"

    def test_without_selector_uses_first_element(self):
        resolver = AttributeResolver()

        value = resolver.resolve(schema(source="attribute", attribute="id"), '<p id="intro">x</p><p id="b">y</p>', 1)

        assert value == "intro"

    def test_missing_attribute_falls_back_to_default(self):
        resolver = AttributeResolver()
        attribute = schema(source="attribute", selector="a", attribute="target", default="_self")

        assert resolver.resolve(attribute, '<a href="/">home</a>', 1) == "_self"

    def test_missing_element_without_default_is_none(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="attribute", selector="img", attribute="src"), "<p>x</p>", 1) is None

    def test_boolean_reads_presence(self):
        resolver = AttributeResolver()
        attribute = schema(type="boolean", source="attribute", selector="video", attribute="autoplay")

        assert resolver.resolve(attribute, "<video autoplay></video>", 1) is True
        assert resolver.resolve(attribute, "<video></video>", 1) is False

    def test_multi_valued_attribute_joined(self):
        resolver = AttributeResolver()

        value = resolver.resolve(schema(source="attribute", selector="div", attribute="class"), '<div class="a b"></div>', 1)

        assert value == "a b"

    @pytest.mark.parametrize(
        "declared, raw, expected",
        [
            ("integer", "3", 3),
            ("number", "2", 2),
            ("number", "1.5", 1.5),
            ("number", "wide", None),
            ("string", "3", "3"),
        ],
    )
    def test_numeric_coercion(self, declared, raw, expected):
        resolver = AttributeResolver()
        attribute = schema(type=declared, source="attribute", selector="div", attribute="data-x")

        assert resolver.resolve(attribute, f'<div data-x="{raw}"></div>', 1) == expected


class TestHtmlSource:
    """The "html" and "rich-text" sources read inner markup."""

    def test_inner_html_of_selector(self):
        resolver = AttributeResolver()

        value = resolver.resolve(schema(source="html", selector="p"), "<p>Hello <strong>world</strong></p>", 1)

        assert value == "Hello <strong>world</strong>"

    def test_rich_text_same_as_html(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="rich-text", selector="figcaption"), "<figcaption>Cap</figcaption>", 1) == "Cap"

    def test_selector_list(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="html", selector="h1,h2,h3"), "<h2>Title</h2>", 1) == "Title"

    def test_without_selector_whole_fragment(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="html"), "<li>a</li><li>b</li>", 1) == "<li>a</li><li>b</li>"

    def test_empty_markup_yields_default(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="html", selector="p", default=""), "", 1) == ""


class TestTextSource:
    def test_text_strips_tags(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="text", selector="p"), "<p>Hi <em>there</em></p>", 1) == "Hi there"

    def test_text_numeric(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(type="integer", source="text", selector="span"), "<span> 42 </span>", 1) == 42


class TestQuerySource:
    """The "query" source maps each matched element through a sub-schema."""

    def test_query_items(self):
        resolver = AttributeResolver()
        attribute = AttributeSchema.model_validate({
            "type": "array",
            "source": "query",
            "selector": "img",
            "query": {
                "url": {"source": "attribute", "attribute": "src"},
                "alt": {"source": "attribute", "attribute": "alt", "default": ""},
            },
        })
        markup = '<figure><img src="/1.jpg" alt="One"><img src="/2.jpg"></figure>'

        assert resolver.resolve(attribute, markup, 1) == [
            {"url": "/1.jpg", "alt": "One"},
            {"url": "/2.jpg", "alt": ""},
        ]

    def test_query_without_matches(self):
        resolver = AttributeResolver()
        attribute = AttributeSchema.model_validate({
            "source": "query",
            "selector": "img",
            "query": {"url": {"source": "attribute", "attribute": "src"}},
        })

        assert resolver.resolve(attribute, "<p>none</p>", 1) == []


class TestOtherSources:
    def test_raw_returns_markup(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="raw"), "<b>x</b>", 1) == "<b>x</b>"
        assert resolver.resolve(schema(source="raw"), "", 1) is None

    def test_meta_uses_lookup(self):
        calls = []

        def lookup(content_id, key):
            calls.append((content_id, key))
            return "meta-value"

        resolver = AttributeResolver(meta_lookup=lookup)

        assert resolver.resolve(schema(source="meta", meta="subtitle"), "", "page") == "meta-value"
        assert calls == [("page", "subtitle")]

    def test_meta_without_lookup(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="meta", meta="subtitle", default="x"), "", 1) == "x"

    def test_no_source_returns_default(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(type="boolean", default=False), "<p>x</p>", 1) is False
        assert resolver.resolve(schema(type="string"), "<p>x</p>", 1) is None

    def test_explicit_null_default(self):
        attribute = schema(default=None)

        assert attribute.has_default
        assert not schema().has_default

    def test_unknown_source(self):
        resolver = AttributeResolver()

        assert resolver.resolve(schema(source="children", selector="p"), "<p>x</p>", 1) is None

    def test_invalid_selector_raises_resolution_failure(self):
        resolver = AttributeResolver()

        with pytest.raises(ResolutionFailure, match="Invalid selector"):
            resolver.resolve(schema(source="html", selector="p[["), "<p>x</p>", 1)
