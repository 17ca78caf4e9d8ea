"""Transformer for standard (non schema-field) blocks."""

import logging
from typing import Any, Dict, Hashable, Optional

from block_parser.ambient import ensure_content_scope
from block_parser.errors import ResolutionFailure
from block_parser.models import AttributeSchema, BlockFamily, ParsedBlock, RawBlock, TransformResult
from block_parser.transformers.base import BlockTransformer

logger = logging.getLogger(__name__)

# Added to every block type that supports anchors, whether or not it is declared.
ANCHOR_ATTRIBUTE = AttributeSchema(
    type="string",
    default="",
    source="attribute",
    attribute="id",
    selector="*",
)


def _is_unset(value: Any) -> bool:
    return value is None or value == ""


class GenericBlockTransformer(BlockTransformer):
    """Resolves declared attributes, expands synced references, attaches rendered output."""

    family = BlockFamily.GENERIC.value

    def transform(self, block: RawBlock, content_id: Hashable) -> TransformResult:
        attrs = self.parse_attributes(block, content_id)
        parsed = self.format_base_block(block, attrs)

        ref = attrs.get(self.config.reference_attribute)
        if block.name == self.config.reference_block_name and ref is not None:
            # A synced reference only carries the referenced content id; its
            # blocks replace it in the parent (flattened by the parser).
            return self.parser.expand_reference(ref, content_id)

        if self.should_include_rendered(parsed):
            rendered = self.render(block, content_id)
            if rendered is not None:
                parsed.rendered = rendered

        return parsed

    def parse_attributes(self, block: RawBlock, content_id: Hashable) -> Dict[str, Any]:
        """Raw attrs completed from the block type's attribute declarations."""
        registry = self.parser.schema_registry
        block_attrs = dict(block.attrs)
        declared = dict(registry.get_attributes(block.name))

        if registry.supports_anchor(block.name):
            declared["anchor"] = ANCHOR_ATTRIBUTE

        resolver = self.parser.attribute_resolver
        for key, attribute in declared.items():
            if not _is_unset(block_attrs.get(key)):
                continue
            try:
                value = resolver.resolve(attribute, block.inner_html, content_id)
            except ResolutionFailure as e:
                logger.debug(f"Attribute '{key}' of {block.name} left unset: {e}")
                continue
            if value is not None:
                block_attrs[key] = value

        return self.remove_internal_attributes(block_attrs)

    def should_include_rendered(self, parsed: ParsedBlock) -> bool:
        return self.parser.hooks.apply_include_rendered(self.config.include_rendered, parsed)

    def render(self, block: RawBlock, content_id: Hashable) -> Optional[str]:
        """Rendered markup with shortcodes expanded, or None without a renderer."""
        renderer = self.parser.renderer
        if renderer is None:
            return None

        with ensure_content_scope(content_id):
            rendered = renderer.render(block, content_id)
            if self.config.expand_shortcodes:
                rendered = self.parser.shortcodes.expand(rendered)
        return rendered
