"""Block tree normalization entry point.

BlockParser walks a raw block tree, dispatches each block to the
transformer of its family, flattens expansions (synced references) into
the parent's children, recurses into inner blocks and runs the block
hook chain on every result.
"""

import logging
from contextvars import ContextVar
from typing import Any, Hashable, Iterable, List, Optional, Tuple, Type, Union

from block_parser.ambient import content_scope
from block_parser.attributes import AttributeResolver
from block_parser.config import ParserConfig
from block_parser.errors import NotFoundError
from block_parser.hooks import HookRegistry
from block_parser.models import BlockFamily, ParsedBlock, RawBlock, TransformResult
from block_parser.protocol import FieldStorage, Renderer, SchemaRegistry, TreeSource
from block_parser.shortcodes import ShortcodeProcessor
from block_parser.transformers.base import (
    BlockTransformer,
    TransformerRegistry,
    check_transformer_contract,
    get_transformer_family,
)
from block_parser.transformers.generic import GenericBlockTransformer
from block_parser.transformers.schema_field import SchemaFieldBlockTransformer

logger = logging.getLogger(__name__)

# Content ids being parsed in the current (possibly nested) pass.
_active_contents: ContextVar[Tuple[Hashable, ...]] = ContextVar("active_contents", default=())


class BlockParser:
    """Normalizes content block trees into ParsedBlock lists."""

    def __init__(
        self,
        tree_source: TreeSource,
        schema_registry: SchemaRegistry,
        field_storage: Optional[FieldStorage] = None,
        renderer: Optional[Renderer] = None,
        hooks: Optional[HookRegistry] = None,
        config: Optional[ParserConfig] = None,
        shortcodes: Optional[ShortcodeProcessor] = None,
        attribute_resolver: Optional[AttributeResolver] = None,
    ):
        """
        Args:
            tree_source: Loads raw trees by content id
            schema_registry: Block type attribute declarations
            field_storage: Field storage engine; without it schema-field
                blocks degrade to the generic family
            renderer: Block renderer; without it no "rendered" is attached
            hooks: Hook registry (a fresh one if omitted)
            config: Parser configuration (defaults if omitted)
            shortcodes: Shortcode processor applied to rendered output
            attribute_resolver: Resolver for markup-sourced attributes
        """
        self.tree_source = tree_source
        self.schema_registry = schema_registry
        self.field_storage = field_storage
        self.renderer = renderer
        self.hooks = hooks or HookRegistry()
        self.config = config or ParserConfig()
        self.shortcodes = shortcodes or ShortcodeProcessor()
        self.attribute_resolver = attribute_resolver or AttributeResolver()
        self.transformers = TransformerRegistry(default_family=BlockFamily.GENERIC.value)

        self.register_default_transformers()

    def register_default_transformers(self) -> None:
        self.register_transformer(GenericBlockTransformer)

        if self.field_storage is not None:
            self.register_transformer(SchemaFieldBlockTransformer)

    def register_transformer(
        self,
        transformer: Union[Type[BlockTransformer], BlockTransformer],
        family: Optional[str] = None,
    ) -> None:
        """
        Register a transformer class or instance for a family.

        Classes are instantiated with this parser. The family defaults to
        the transformer's get_family().

        Raises:
            ContractViolation: If the transformer is abstract, lacks transform()
                or get_family(), or declares no family
        """
        if isinstance(transformer, type):
            check_transformer_contract(transformer)
            transformer = transformer(self)

        self.transformers.register(family or get_transformer_family(transformer), transformer)

    def parse_blocks_from_content(self, content_id: Hashable) -> List[ParsedBlock]:
        """
        Load and normalize a content item's blocks.

        Raises:
            NotFoundError: If the tree source has no such content item
        """
        tree = self.tree_source.load_tree(content_id)
        if tree is None:
            raise NotFoundError(f"Content not found: {content_id}")
        return self.normalize(tree, content_id)

    def parse_blocks_as_dicts(self, content_id: Hashable) -> List[dict]:
        """Like parse_blocks_from_content, serialized to plain dicts."""
        return [block.to_dict() for block in self.parse_blocks_from_content(content_id)]

    def normalize(self, tree: RawBlock, content_id: Hashable) -> List[ParsedBlock]:
        """Normalize the children of a root block under content_id."""
        token = _active_contents.set(_active_contents.get() + (content_id,))
        try:
            with content_scope(content_id):
                return self.transform_blocks(tree.inner_blocks, content_id)
        finally:
            _active_contents.reset(token)

    def transform_blocks(self, blocks: Iterable[RawBlock], content_id: Hashable) -> List[ParsedBlock]:
        """Transform sibling blocks, dropping unnamed ones and splicing expansions."""
        parsed: List[ParsedBlock] = []
        for block in blocks:
            if not block.name:
                logger.debug("Ignoring block without a name")
                continue
            result = self.transform_block(block, content_id)
            if isinstance(result, list):
                parsed.extend(result)
            else:
                parsed.append(result)
        return parsed

    def transform_block(self, block: RawBlock, content_id: Hashable) -> TransformResult:
        """
        Transform one block and its inner blocks.

        Returns:
            The hooked ParsedBlock, or the expansion list as produced by the
            transformer (its blocks already went through their own pass)
        """
        family = self.determine_block_family(block)
        transformer = self.transformers.get(family)
        logger.debug(f"Transforming {block.name} as {family}")

        result = transformer.transform(block, content_id)
        if isinstance(result, list):
            logger.debug(f"{block.name} expanded into {len(result)} block(s)")
            return result

        if block.inner_blocks:
            result.inner_blocks = self.transform_blocks(block.inner_blocks, content_id)

        return self.hooks.apply_block(result, block, content_id)

    def determine_block_family(self, block: RawBlock) -> str:
        """
        Family of a block.

        Either signal makes a block schema-field: its type declares the data
        carrier attribute, or its name is in the schema-field namespace.
        """
        declared = self.schema_registry.get_attributes(block.name)
        if self.config.data_attribute in declared or block.name.startswith(self.config.schema_field_namespace):
            return BlockFamily.SCHEMA_FIELD.value
        return BlockFamily.GENERIC.value

    def expand_reference(self, ref: Any, content_id: Hashable) -> List[ParsedBlock]:
        """Blocks of a referenced content item, or [] when ref is already being parsed."""
        if ref in _active_contents.get():
            logger.warning(f"Synced reference cycle: {ref} referenced again from {content_id}, skipped")
            return []
        return self.parse_blocks_from_content(ref)
