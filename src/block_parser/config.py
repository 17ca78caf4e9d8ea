"""Parser configuration schema and loader.

All tunable names and kind lists used while normalizing blocks live here,
so hosts with a different field-storage vocabulary can override them from
a YAML file instead of subclassing transformers.
"""

import logging
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from block_parser.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ParserConfig(BaseModel):
    """Configuration for BlockParser and its transformers.

    Attributes:
        field_key_prefix: Marker prefixing a field-key in the data carrier.
        field_reference_prefix: Prefix of a field-reference token.
        data_attribute: Name of the attribute carrying structured field data.
        schema_field_namespace: Block name prefix reserved for schema-field blocks.
        reference_block_name: Block name of synced references.
        reference_attribute: Attribute holding the referenced content id.
        excluded_field_types: Layout-only field kinds, never emitted.
        formatted_field_types: Field kinds resolved through field storage.
        internal_attributes: Bookkeeping keys stripped from every block's attrs.
        include_rendered: Seed value for the include_rendered hook chain.
        expand_shortcodes: Whether rendered output goes through shortcode expansion.
    """

    field_key_prefix: str = Field(default="_", min_length=1)
    field_reference_prefix: str = Field(default="field_", min_length=1)
    data_attribute: str = Field(default="data", min_length=1)
    schema_field_namespace: str = Field(default="acf/", min_length=1)
    reference_block_name: str = Field(default="core/block", min_length=1)
    reference_attribute: str = Field(default="ref", min_length=1)
    excluded_field_types: List[str] = Field(
        default_factory=lambda: ["accordion", "tab"],
    )
    formatted_field_types: List[str] = Field(
        default_factory=lambda: [
            "repeater",
            "group",
            "flexible_content",
            "relationship",
            "page_link",
            "post_object",
            "true_false",
            "gallery",
        ],
    )
    internal_attributes: List[str] = Field(
        default_factory=lambda: ["data", "name", "mode"],
    )
    include_rendered: bool = True
    expand_shortcodes: bool = True

    @field_validator("excluded_field_types", "formatted_field_types", "internal_attributes")
    @classmethod
    def dedupe(cls, v: List[str]) -> List[str]:
        """Drop duplicates while keeping declaration order."""
        return list(dict.fromkeys(v))


def load_parser_config(path: str | Path) -> ParserConfig:
    """
    Load a ParserConfig from a YAML file.

    Keys absent from the file keep their defaults.

    Args:
        path: Path to the YAML file

    Returns:
        Validated ParserConfig

    Raises:
        ConfigurationError: If the file is missing, unparsable, or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Parser config not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in parser config {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Parser config must be a mapping: {path}")

    try:
        config = ParserConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid parser config {path}: {e}") from e

    logger.debug(f"Loaded parser config from {path}")
    return config
