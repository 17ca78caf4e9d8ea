"""
Pytest fixtures and configuration for block parser tests.
Provides in-memory collaborators and a parser factory.
"""

import pytest

from block_parser import BlockParser
from block_parser.memory import InMemoryFieldStorage, InMemorySchemaRegistry, InMemoryTreeSource


@pytest.fixture
def schema_registry():
    """Block types used across parser tests."""
    return InMemorySchemaRegistry({
        "core/group": {
            "attributes": {
                "align": {"type": "string", "source": "attribute", "attribute": "data-align"},
            },
        },
        "core/paragraph": {
            "attributes": {
                "content": {"type": "string", "source": "html", "selector": "p"},
                "dropCap": {"type": "boolean", "default": False},
            },
            "supports": {"anchor": True},
        },
        "core/heading": {
            "attributes": {
                "content": {"type": "string", "source": "html", "selector": "h1,h2,h3,h4,h5,h6"},
                "level": {"type": "number", "default": 2},
            },
        },
        "acf/hero": {
            "attributes": {
                "data": {"type": "object"},
                "name": {"type": "string"},
                "mode": {"type": "string"},
            },
        },
    })


@pytest.fixture
def field_storage():
    """Field definitions for the acf/hero block."""
    return InMemoryFieldStorage([
        {"id": 123, "key": "field_123", "name": "title", "type": "text", "parent": 10},
        {"id": 124, "key": "field_124", "name": "featured", "type": "true_false", "parent": 10},
        {"id": 125, "key": "field_125", "name": "layout_tab", "type": "tab", "parent": 10},
    ])


@pytest.fixture
def tree_source():
    return InMemoryTreeSource()


@pytest.fixture
def make_parser(tree_source, schema_registry, field_storage):
    """Factory building a BlockParser over the shared in-memory collaborators."""
    def _make(**kwargs):
        kwargs.setdefault("field_storage", field_storage)
        return BlockParser(tree_source, schema_registry, **kwargs)
    return _make
