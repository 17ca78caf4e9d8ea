"""Block transformers.

Importing this module exposes the built-in families; hosts add their own
through BlockParser.register_transformer().
"""

from block_parser.transformers.base import (
    BlockTransformer,
    TransformerRegistry,
    check_transformer_contract,
    get_transformer_family,
    implements_transformer_contract,
)
from block_parser.transformers.generic import GenericBlockTransformer
from block_parser.transformers.schema_field import SchemaFieldBlockTransformer

__all__ = [
    "BlockTransformer",
    "TransformerRegistry",
    "check_transformer_contract",
    "get_transformer_family",
    "implements_transformer_contract",
    "GenericBlockTransformer",
    "SchemaFieldBlockTransformer",
]
