"""Collaborator protocols consumed by the block parser.

The parser never reaches storage, schema registration, rendering, or
field formatting directly; hosts supply objects satisfying these
protocols. block_parser.memory provides in-memory implementations.
"""

from typing import Any, Dict, Hashable, Mapping, Optional, Protocol, runtime_checkable

from .models import AttributeSchema, FieldDescriptor, RawBlock


@runtime_checkable
class TreeSource(Protocol):
    """Loads the raw block tree of a content item."""

    def load_tree(self, content_id: Hashable) -> Optional[RawBlock]:
        """Load the root block of a content item.

        Args:
            content_id: Content item identifier.

        Returns:
            Unnamed root RawBlock whose inner_blocks are the top-level
            blocks, or None if the content item does not exist.

        Raises:
            NotFoundError: Implementations may raise instead of returning None.
        """
        ...


@runtime_checkable
class SchemaRegistry(Protocol):
    """Declares which attributes a block type supports."""

    def get_attributes(self, block_name: str) -> Dict[str, AttributeSchema]:
        """Return attribute declarations for a block type (empty if unknown)."""
        ...

    def supports_anchor(self, block_name: str) -> bool:
        """Whether the block type supports an HTML anchor."""
        ...


@runtime_checkable
class Renderer(Protocol):
    """Renders a block to its final markup."""

    def render(self, block: RawBlock, content_id: Hashable) -> str:
        ...


@runtime_checkable
class FieldStorage(Protocol):
    """Field storage and formatting engine behind schema-field blocks."""

    def get_field_descriptor(self, reference: str) -> Optional[FieldDescriptor]:
        """Look up a field definition by its field-reference token."""
        ...

    def get_field(self, selector: str, instance_id: str) -> Optional[FieldDescriptor]:
        """Look up a field definition by name or key in a block instance."""
        ...

    def setup_meta(self, data: Mapping[str, Any], instance_id: str) -> None:
        """Make a block instance's raw field data available for loading."""
        ...

    def load_value(self, instance_id: str, field: FieldDescriptor) -> Any:
        """Load the stored raw value of a field for a block instance."""
        ...

    def format_value(self, value: Any, instance_id: str, field: FieldDescriptor) -> Any:
        """Format a raw value according to its field definition."""
        ...
