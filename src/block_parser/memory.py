"""In-memory implementations of the collaborator protocols.

Useful for tests, fixtures and small hosts that keep content and field
definitions in plain Python or YAML.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Union

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError, NotFoundError, ResolutionFailure
from .models import AttributeSchema, BlockTypeSchema, FieldDescriptor, RawBlock

logger = logging.getLogger(__name__)

TreeInput = Union[RawBlock, Sequence[Union[RawBlock, Mapping[str, Any]]]]
ValueFormatter = Callable[[Any, FieldDescriptor], Any]


def _to_root(blocks: TreeInput) -> RawBlock:
    if isinstance(blocks, RawBlock):
        return blocks
    return RawBlock.root([
        block if isinstance(block, RawBlock) else RawBlock.from_dict(block)
        for block in blocks
    ])


class InMemoryTreeSource:
    """TreeSource backed by a dict of content id -> blocks."""

    def __init__(self, trees: Optional[Mapping[Hashable, TreeInput]] = None):
        self._trees: Dict[Hashable, RawBlock] = {}
        for content_id, blocks in (trees or {}).items():
            self.add(content_id, blocks)

    def add(self, content_id: Hashable, blocks: TreeInput) -> None:
        """Store a root block, or a list of blocks / parse-tree dicts, under content_id."""
        self._trees[content_id] = _to_root(blocks)

    def load_tree(self, content_id: Hashable) -> RawBlock:
        if content_id not in self._trees:
            raise NotFoundError(f"Content not found: {content_id}")
        return self._trees[content_id]


class InMemorySchemaRegistry:
    """SchemaRegistry backed by a dict of block name -> BlockTypeSchema."""

    def __init__(self, block_types: Optional[Mapping[str, Union[BlockTypeSchema, Mapping[str, Any]]]] = None):
        self._block_types: Dict[str, BlockTypeSchema] = {}
        for name, block_type in (block_types or {}).items():
            if isinstance(block_type, BlockTypeSchema):
                self._block_types[name] = block_type
            else:
                self.register(name, **block_type)

    def register(
        self,
        name: str,
        attributes: Optional[Mapping[str, Union[AttributeSchema, Mapping[str, Any]]]] = None,
        supports: Optional[Mapping[str, Any]] = None,
    ) -> BlockTypeSchema:
        block_type = BlockTypeSchema(attributes=dict(attributes or {}), supports=dict(supports or {}))
        self._block_types[name] = block_type
        logger.debug(f"Registered block type: {name}")
        return block_type

    def get_attributes(self, block_name: str) -> Dict[str, AttributeSchema]:
        block_type = self._block_types.get(block_name)
        return dict(block_type.attributes) if block_type else {}

    def supports_anchor(self, block_name: str) -> bool:
        block_type = self._block_types.get(block_name)
        return block_type.supports_anchor() if block_type else False

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "InMemorySchemaRegistry":
        """
        Load block types from a YAML mapping of name -> {attributes, supports}.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Block type file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in block type file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Block type file must be a mapping: {path}")

        try:
            return cls(raw)
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid block type in {path}: {e}") from e


def _is_truthy(value: Any) -> bool:
    return value not in (None, "", "0", 0, False)


class InMemoryFieldStorage:
    """FieldStorage holding field definitions and per-instance raw data.

    Composite kinds are stored nested (group -> dict, repeater -> list of
    dicts, flexible_content -> list of dicts with an ``acf_fc_layout``
    key). Formatting keeps only declared sub-fields, so sub-fields that
    were filtered out of a definition disappear from its value.

    Instance data primed by setup_meta is kept until clear_meta() is
    called; hosts reusing one storage across many parses should clear it.
    """

    LAYOUT_KEY = "acf_fc_layout"

    def __init__(
        self,
        fields: Iterable[Union[FieldDescriptor, Mapping[str, Any]]] = (),
        formatters: Optional[Mapping[str, ValueFormatter]] = None,
        key_prefix: str = "_",
    ):
        """
        Args:
            fields: Field definitions (top-level and nested are indexed)
            formatters: Optional per-kind formatters for leaf kinds such as
                image, relationship or post_object
            key_prefix: Marker prefixing field-keys in instance data
        """
        self._by_key: Dict[str, FieldDescriptor] = {}
        self._meta: Dict[str, Dict[str, Any]] = {}
        self.formatters: Dict[str, ValueFormatter] = dict(formatters or {})
        self.key_prefix = key_prefix
        for field in fields:
            self.add_field(field if isinstance(field, FieldDescriptor) else FieldDescriptor(**field))

    def add_field(self, field: FieldDescriptor) -> None:
        """Index a field definition and its nested definitions by key."""
        if field.key:
            self._by_key[field.key] = field
        for sub_field in (field.sub_fields or []) + (field.layouts or []):
            self.add_field(sub_field)

    def get_field_descriptor(self, reference: str) -> Optional[FieldDescriptor]:
        return self._by_key.get(reference)

    def get_field(self, selector: str, instance_id: str) -> Optional[FieldDescriptor]:
        if selector in self._by_key:
            return self._by_key[selector]
        reference = self._meta.get(instance_id, {}).get(self.key_prefix + selector)
        if reference is None:
            return None
        return self._by_key.get(reference)

    def setup_meta(self, data: Mapping[str, Any], instance_id: str) -> None:
        self._meta[instance_id] = dict(data)

    def clear_meta(self, instance_id: Optional[str] = None) -> None:
        """Forget primed instance data, for one instance or all of them."""
        if instance_id is None:
            self._meta.clear()
        else:
            self._meta.pop(instance_id, None)

    def load_value(self, instance_id: str, field: FieldDescriptor) -> Any:
        if instance_id not in self._meta:
            raise ResolutionFailure(f"No field data for block instance {instance_id}")
        return self._meta[instance_id].get(field.name)

    def format_value(self, value: Any, instance_id: str, field: FieldDescriptor) -> Any:
        if value is None:
            return None

        if field.type == "true_false":
            return _is_truthy(value)

        if field.type == "group" and isinstance(value, Mapping):
            return self._format_row(value, instance_id, field.sub_fields or [])

        if field.type == "repeater" and isinstance(value, list):
            return [
                self._format_row(row, instance_id, field.sub_fields or [])
                for row in value
                if isinstance(row, Mapping)
            ]

        if field.type == "flexible_content" and isinstance(value, list):
            layouts = {layout.name: layout for layout in field.layouts or []}
            rows = []
            for row in value:
                layout = layouts.get(row.get(self.LAYOUT_KEY)) if isinstance(row, Mapping) else None
                if layout is None:
                    continue
                formatted = self._format_row(row, instance_id, layout.sub_fields or [])
                rows.append({self.LAYOUT_KEY: layout.name, **formatted})
            return rows

        formatter = self.formatters.get(field.type)
        if formatter is not None:
            return formatter(value, field)
        return value

    def _format_row(
        self,
        row: Mapping[str, Any],
        instance_id: str,
        sub_fields: List[FieldDescriptor],
    ) -> Dict[str, Any]:
        return {
            sub_field.name: self.format_value(row.get(sub_field.name), instance_id, sub_field)
            for sub_field in sub_fields
        }


class InnerHtmlRenderer:
    """Renderer returning a block's saved markup, optionally wrapped per block name."""

    def __init__(self, templates: Optional[Mapping[str, str]] = None):
        """
        Args:
            templates: block name -> format string with an ``{html}`` placeholder
        """
        self.templates = dict(templates or {})

    def render(self, block: RawBlock, content_id: Hashable) -> str:
        html = block.inner_html.strip()
        template = self.templates.get(block.name)
        return template.format(html=html) if template else html


class CallableRenderer:
    """Renderer delegating to a plain function."""

    def __init__(self, func: Callable[[RawBlock, Hashable], str]):
        self.func = func

    def render(self, block: RawBlock, content_id: Hashable) -> str:
        return self.func(block, content_id)
