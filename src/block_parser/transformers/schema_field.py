"""Transformer for schema-driven custom-field blocks.

The block's data carrier holds each field twice: ``name -> raw value``
and ``_name -> field_xxx`` (the field reference). Field references are
resolved through field storage so sub-fields, layout-only kinds and
formatted kinds can be told apart.
"""

import logging
from typing import Any, Dict, Hashable, Mapping, Optional

from block_parser.ambient import ensure_content_scope
from block_parser.errors import ContractViolation, ResolutionFailure
from block_parser.fields import FieldValueResolver, is_empty_value, remove_empty_properties
from block_parser.models import BlockFamily, FieldDescriptor, FieldHookMeta, RawBlock, TransformResult
from block_parser.transformers.base import BlockTransformer
from block_parser.utils.hashing import get_block_instance_id

logger = logging.getLogger(__name__)


class SchemaFieldBlockTransformer(BlockTransformer):
    """Transforms schema-field blocks into ``{name, type, attrs, data}``."""

    family = BlockFamily.SCHEMA_FIELD.value

    def __init__(self, parser):
        super().__init__(parser)
        if parser.field_storage is None:
            raise ContractViolation("SchemaFieldBlockTransformer requires field storage")
        self.storage = parser.field_storage
        self.field_resolver = FieldValueResolver(self.storage, self.config.excluded_field_types)

    def transform(self, block: RawBlock, content_id: Hashable) -> TransformResult:
        attrs = dict(block.attrs)
        fields = attrs.get(self.config.data_attribute)
        if not isinstance(fields, Mapping):
            fields = {}

        data = self.transform_fields(fields, block, content_id)

        parsed = self.format_base_block(block, self.remove_internal_attributes(attrs))
        parsed.data = data
        return parsed

    def transform_fields(
        self,
        fields: Mapping[str, Any],
        block: RawBlock,
        content_id: Hashable,
    ) -> Dict[str, Any]:
        """
        Resolve a block's raw field data into a structured mapping.

        Args:
            fields: The data carrier (raw values and field references)
            block: Owning block
            content_id: Content item being parsed

        Returns:
            Mapping of field name to resolved value
        """
        instance_id = get_block_instance_id(fields)

        with ensure_content_scope(content_id):
            if fields:
                self.storage.setup_meta(fields, instance_id)

            # Pass 1: descriptors of every field on this block, ids deduplicated.
            field_ids: Dict[str, bool] = {}
            descriptors: Dict[str, FieldDescriptor] = {}
            for key, value in fields.items():
                if self.is_field_key(key, value):
                    descriptor = self.storage.get_field_descriptor(value)
                    if descriptor is not None and descriptor.id is not None:
                        field_ids[str(descriptor.id)] = True
                        descriptors[key] = descriptor

            # Pass 2: resolve top-level fields, pass plain attributes through.
            parsed: Dict[str, Any] = {}
            for key, value in fields.items():
                if self.is_field_key(key, value):
                    field_name = self.field_name_of(key)
                    descriptor = descriptors.get(key)

                    if self.is_sub_field(descriptor, field_ids):
                        logger.debug(f"Skipping sub-field '{field_name}' of {block.name}")
                        continue
                    if self.field_resolver.is_excluded_type(descriptor):
                        logger.debug(f"Skipping layout field '{field_name}' ({descriptor.type}) of {block.name}")
                        continue

                    try:
                        resolved = self.format_field_value(
                            field_name, fields.get(field_name), descriptor, instance_id, block
                        )
                    except ResolutionFailure as e:
                        logger.debug(f"Field '{field_name}' of {block.name} left out: {e}")
                        continue

                    if not is_empty_value(resolved):
                        parsed[field_name] = resolved
                elif self.config.field_key_prefix + key not in fields:
                    parsed[key] = value

        return parsed

    def is_field_key(self, key: str, value: Any) -> bool:
        """A marked key whose value is a field reference token."""
        return (
            key.startswith(self.config.field_key_prefix)
            and isinstance(value, str)
            and value.startswith(self.config.field_reference_prefix)
        )

    def field_name_of(self, field_key: str) -> str:
        """Field name of a field-key: every leading marker prefix removed."""
        prefix = self.config.field_key_prefix
        name = field_key
        while name.startswith(prefix):
            name = name[len(prefix):]
        return name

    def is_sub_field(self, descriptor: Optional[FieldDescriptor], block_field_ids: Mapping[str, bool]) -> bool:
        """A field nested under another field; only reachable through its parent's value."""
        if descriptor is None or descriptor.parent is None:
            return False
        parent = str(descriptor.parent)
        return parent in block_field_ids or parent.startswith(self.config.field_reference_prefix)

    def requires_formatting(self, field_type: str, value: Any) -> bool:
        """Kinds whose stored raw value is not the value to emit."""
        if field_type in self.config.formatted_field_types:
            return True
        return field_type == "image" and isinstance(value, int) and not isinstance(value, bool)

    def format_field_value(
        self,
        field_name: str,
        value: Any,
        descriptor: Optional[FieldDescriptor],
        instance_id: str,
        block: RawBlock,
    ) -> Any:
        field_type = descriptor.type if descriptor is not None else ""

        if self.requires_formatting(field_type, value):
            value = self.field_resolver.resolve_field(field_name, instance_id)

        meta = FieldHookMeta(type=field_type, name=field_name, block_name=block.name)
        value = self.parser.hooks.apply_field(value, descriptor, meta)

        if isinstance(value, (dict, list)):
            return remove_empty_properties(value)
        return value
