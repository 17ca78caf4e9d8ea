"""
Block Parser - normalizes content editor block trees.

Turns raw block trees (generic blocks and schema-driven custom-field
blocks) into a uniform, JSON-serializable structure for renderers and
APIs, with hook chains for rewriting blocks and field values in-flight.
"""

__version__ = "0.1.0"

from block_parser.config import ParserConfig, load_parser_config
from block_parser.errors import (
    BlockParserError,
    ConfigurationError,
    ContractViolation,
    NotFoundError,
    ResolutionFailure,
)
from block_parser.hooks import HookRegistry
from block_parser.models import (
    AttributeSchema,
    BlockFamily,
    BlockTypeSchema,
    FieldDescriptor,
    FieldHookMeta,
    ParsedBlock,
    RawBlock,
)
from block_parser.parser import BlockParser
from block_parser.transformers import BlockTransformer

__all__ = [
    "AttributeSchema",
    "BlockFamily",
    "BlockParser",
    "BlockParserError",
    "BlockTransformer",
    "BlockTypeSchema",
    "ConfigurationError",
    "ContractViolation",
    "FieldDescriptor",
    "FieldHookMeta",
    "HookRegistry",
    "NotFoundError",
    "ParsedBlock",
    "ParserConfig",
    "RawBlock",
    "ResolutionFailure",
    "load_parser_config",
]
